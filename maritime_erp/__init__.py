import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler

import click
from flask import Flask, jsonify, request
from flask_login import LoginManager, current_user
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from flask_wtf import CSRFProtect
from werkzeug.exceptions import HTTPException

from config import get_config, ensure_directories
from .errors import ERPError

# Initialize extensions (but don't bind to app yet)
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()


def configure_logging(app):
    """Attach console (and optional rotating file) handlers to app.logger"""
    log_level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    app.logger.handlers.clear()
    app.logger.setLevel(log_level)
    app.logger.propagate = False

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    app.logger.addHandler(console_handler)

    if app.config.get('LOG_FILE'):
        file_handler = RotatingFileHandler(app.config['LOG_FILE'], maxBytes=5 * 1024 * 1024, backupCount=5)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        app.logger.addHandler(file_handler)


def register_error_handlers(app):
    @app.errorhandler(ERPError)
    def handle_erp_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def page_not_found(e):
        return jsonify({'success': False, 'message': 'Resource not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({'success': False, 'message': 'Method not allowed'}), 405

    @app.errorhandler(Exception)
    def internal_server_error(e):
        if isinstance(e, HTTPException):
            return jsonify({'success': False, 'message': e.description}), e.code

        db.session.rollback()
        app.logger.exception(f"Unhandled error on {request.method} {request.path}")

        from .services.error_logs import record_exception
        record_exception(
            e,
            url=request.path,
            user_agent=request.headers.get('User-Agent'),
            user_id=current_user.id if current_user.is_authenticated else None,
            component=request.endpoint,
        )
        return jsonify({'success': False, 'message': 'Internal server error'}), 500


def register_commands(app):
    @app.cli.command('refresh-invoice-statuses')
    def refresh_invoice_statuses_command():
        """Persist paid/partially_paid/overdue statuses for open invoices."""
        from .services.invoices import refresh_open_invoices
        changed = refresh_open_invoices(persist_overdue=True)
        click.echo(f'{changed} invoice(s) updated')


def create_app(config_class=None):
    if config_class is None:
        config_class = get_config()

    ensure_directories(config_class)

    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app)

    # Init extensions WITH the app
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)

    # Import models (inside function to avoid circular imports)
    from .models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'message': 'Please log in to access this resource.'}), 401

    # Ledger receivers listen to document signals
    from .services import ledger  # noqa: F401

    # Register blueprints
    from .blueprints.auth import auth_bp
    from .blueprints.master_data import master_data_bp
    from .blueprints.projects import projects_bp
    from .blueprints.sales import sales_bp
    from .blueprints.purchases import purchases_bp
    from .blueprints.ledger import ledger_bp
    from .blueprints.error_logs import error_logs_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(master_data_bp, url_prefix='/api')
    app.register_blueprint(projects_bp, url_prefix='/api/projects')
    app.register_blueprint(sales_bp, url_prefix='/api')
    app.register_blueprint(purchases_bp, url_prefix='/api')
    app.register_blueprint(ledger_bp, url_prefix='/api/general-ledger')
    app.register_blueprint(error_logs_bp, url_prefix='/api/error-logs')

    register_error_handlers(app)
    register_commands(app)

    # Health check endpoint
    @app.route('/health')
    def health_check():
        return {'status': 'healthy', 'timestamp': datetime.utcnow().isoformat()}

    # CSRF token endpoint
    @app.route('/csrf-token')
    def csrf_token_endpoint():
        from flask_wtf.csrf import generate_csrf
        return {
            'csrf_token': generate_csrf(),
            'message': 'CSRF token generated'
        }

    # Initialize database
    with app.app_context():
        try:
            db.create_all()
            app.logger.info("Database tables checked/created")

            if app.config.get('SEED_ADMIN', True):
                admin = User.query.filter_by(username='admin').first()
                if not admin:
                    admin = User(
                        username='admin',
                        email='admin@maritime-erp.local',
                        role='admin',
                        is_active=True
                    )
                    admin.set_password(os.environ.get('ADMIN_PASSWORD', 'admin123'))
                    db.session.add(admin)
                    db.session.commit()
                    app.logger.info("Created default admin user: admin")
        except Exception:
            db.session.rollback()
            app.logger.exception("Error during database initialization")
            raise

    return app
