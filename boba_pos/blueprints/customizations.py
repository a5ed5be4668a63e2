"""Customizations blueprint - add-ons and ice / sweetness / size options."""
from flask import Blueprint, jsonify
from boba_pos.database import get_session
from boba_pos.models import ITEM_TYPE_ADDON, ITEM_TYPE_CUSTOMIZATION
from boba_pos.services.catalog_service import list_options_of_type, grouped_customizations

customizations_bp = Blueprint('customizations', __name__, url_prefix='/api/customizations')


@customizations_bp.route('/addons', methods=['GET'])
def addons():
    return jsonify(list_options_of_type(get_session(), ITEM_TYPE_ADDON))


@customizations_bp.route('/customizations', methods=['GET'])
def customizations():
    return jsonify(list_options_of_type(get_session(), ITEM_TYPE_CUSTOMIZATION))


@customizations_bp.route('/grouped', methods=['GET'])
def grouped():
    """Customizations split into ice / sweetness / size, cheapest first."""
    return jsonify(grouped_customizations(get_session()))
