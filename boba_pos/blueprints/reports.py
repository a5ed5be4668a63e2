"""Reports and analytics blueprints (managers only)."""
from flask import Blueprint, request, jsonify, current_app
from boba_pos.database import get_session
from boba_pos.middleware import require_manager
from boba_pos.services import report_service

reports_bp = Blueprint('reports', __name__, url_prefix='/api/reports')
analytics_bp = Blueprint('analytics', __name__, url_prefix='/api/analytics')


def _today():
    return report_service.shop_today(current_app.config.get('ORDER_TIMEZONE', report_service.DEFAULT_TIMEZONE))


@reports_bp.route('/x', methods=['GET'])
@require_manager
def x_report():
    """Mid-shift summary for date between startTime and endTime (HH:MM)."""
    report = report_service.x_report(
        get_session(),
        request.args.get('date'),
        request.args.get('startTime'),
        request.args.get('endTime'),
    )
    return jsonify(report)


@analytics_bp.route('/sales', methods=['GET'])
@require_manager
def sales():
    return jsonify(report_service.daily_sales(
        get_session(), request.args.get('startDate'), request.args.get('endDate'), today=_today()
    ))


@analytics_bp.route('/trends', methods=['GET'])
@require_manager
def trends():
    return jsonify(report_service.sales_trends(
        get_session(),
        request.args.get('metric'),
        request.args.get('startDate'),
        request.args.get('endDate'),
        today=_today(),
    ))


@analytics_bp.route('/zreport', methods=['GET'])
@require_manager
def zreport():
    return jsonify(report_service.z_report(get_session(), request.args.get('date'), today=_today()))


@analytics_bp.route('/xreport', methods=['GET'])
@require_manager
def hourly_xreport():
    """Orders and sales per hour for ?date= (today by default)."""
    return jsonify(report_service.hourly_sales(get_session(), request.args.get('date'), today=_today()))
