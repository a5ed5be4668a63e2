"""Flask application factory."""
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from boba_pos.database import init_db
import os


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Initialize Sentry for error tracking in production
    sentry_dsn = app.config.get('SENTRY_DSN')
    if sentry_dsn and (app.config.get('ENV') == 'production' or os.getenv('FLASK_ENV') == 'production'):
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=sentry_dsn,
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
            environment=os.getenv('FLASK_ENV', 'production'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Setup Prometheus metrics instrumentation
    from boba_pos.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    # Production: Enable ProxyFix for HTTPS behind Nginx reverse proxy
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    # Initialize database
    init_db(app)

    # Load the logged-in staff member before each request
    from boba_pos.middleware import load_staff

    @app.before_request
    def before_request_handler():
        load_staff()

    # Error Handlers
    from boba_pos.exceptions import PosError

    @app.errorhandler(PosError)
    def handle_pos_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"PosError [{error.status_code}]: {error.message}")
        else:
            app.logger.warning(f"PosError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'status': 'error', 'code': 'not_found', 'message': 'Not Found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'status': 'error', 'code': 'method_not_allowed', 'message': 'Method Not Allowed'}), 405

    @app.errorhandler(500)
    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException) and error.code and error.code < 500:
            return jsonify({'status': 'error', 'code': 'http_error', 'message': error.description}), error.code

        import traceback
        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'status': 'error', 'code': 'internal_error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from boba_pos.blueprints.auth import auth_bp
    from boba_pos.blueprints.menu import menu_bp
    from boba_pos.blueprints.customizations import customizations_bp
    from boba_pos.blueprints.cart import cart_bp
    from boba_pos.blueprints.orders import orders_bp
    from boba_pos.blueprints.customers import customers_bp
    from boba_pos.blueprints.inventory import inventory_bp
    from boba_pos.blueprints.employees import employees_bp
    from boba_pos.blueprints.reports import reports_bp, analytics_bp
    from boba_pos.blueprints.metrics import metrics_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(menu_bp)
    app.register_blueprint(customizations_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(metrics_bp)

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    # Register CLI commands
    from boba_pos.cli_commands import init_cli_commands
    init_cli_commands(app)

    return app
