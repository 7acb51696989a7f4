import os
import logging
import click
from logging.handlers import RotatingFileHandler
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from config import config
from extensions import db, migrate, login_manager, limiter, mail, notifier, token_issuer
from services.errors import ServiceError, Unauthorized


def configure_logging(app):
    """Configure application logging"""
    if not app.debug and not app.testing:
        # Create logs directory if it doesn't exist
        if not os.path.exists('logs'):
            os.mkdir('logs')

        # File handler for errors
        file_handler = RotatingFileHandler(
            'logs/spendlist.log',
            maxBytes=10240000,  # 10MB
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s '
            '[in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        app.logger.setLevel(logging.INFO)
        app.logger.info('Spendlist startup')
    else:
        # Development logging to console
        app.logger.setLevel(logging.DEBUG)
        app.logger.info('Spendlist startup (DEBUG mode)')


def create_app(config_name=None):
    """Application factory pattern"""

    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])
    config[config_name].init_app(app)

    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///') and \
            ':memory:' not in app.config['SQLALCHEMY_DATABASE_URI']:
        os.makedirs(os.path.join(os.path.dirname(__file__), 'instance'), exist_ok=True)

    # Configure logging
    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)
    mail.init_app(app)
    notifier.init_app(app)
    token_issuer.init_app(app)

    @app.after_request
    def add_headers(response):
        """Security headers and CORS for the browser client"""
        headers = app.config.get('SECURITY_HEADERS', {})
        for header, value in headers.items():
            response.headers[header] = value
        response.headers['Access-Control-Allow-Origin'] = app.config.get('CORS_ALLOW_ORIGIN', '*')
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type, Authorization, x-access-token'
        return response

    # Token authentication for Flask-Login: every request carries its own token,
    # nothing is kept in the session cookie.
    @login_manager.request_loader
    def load_user_from_request(request):
        from services.token_service import token_from_request
        token = token_from_request(request)
        if not token:
            return None
        return token_issuer.verify(token)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': Unauthorized().to_dict()}), 401

    # Import models to ensure they're registered with SQLAlchemy
    with app.app_context():
        import models  # noqa: F401

    # Register blueprints
    from blueprints.auth import auth_bp
    from blueprints.account import account_bp
    from blueprints.expenses import expenses_bp
    from blueprints.contact import contact_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(account_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(contact_bp)

    # Create database tables
    with app.app_context():
        db.create_all()

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_commands(app)

    return app


def register_error_handlers(app):
    """Register global error handlers"""

    @app.errorhandler(ServiceError)
    def service_error(error):
        if error.status_code >= 500 or error.retryable:
            app.logger.warning(f'{error.code}: {error.msg}')
        return jsonify({'error': error.to_dict()}), error.status_code

    @app.errorhandler(HTTPException)
    def http_error(error):
        return jsonify({'error': {'code': error.name.replace(' ', ''), 'msg': error.description}}), error.code

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f'Internal Server Error: {error}')
        return jsonify({'error': {'code': 'InternalServerError', 'msg': 'Internal server error.'}}), 500


def register_commands(app):
    """Register Flask CLI commands."""

    @app.cli.group()
    def currency():
        """Manage the currencies expenses can be recorded in."""
        pass

    @currency.command('add')
    @click.argument('code')
    @click.argument('name')
    @click.argument('symbol', required=False, default='')
    def add_currency(code, name, symbol):
        """Add a currency by ISO CODE with a display NAME and optional SYMBOL."""
        from models.currencies import Currency
        code = code.strip().upper()
        if len(code) != 3:
            click.echo('ERROR: Currency code must be 3 letters', err=True)
            return
        if Currency.query.filter_by(code=code).first():
            click.echo(f'Currency {code} already exists.')
            return
        db.session.add(Currency(code=code, name=name, symbol=symbol))
        db.session.commit()
        click.echo(f'SUCCESS: Currency {code} added.')

    @currency.command('seed')
    def seed_default_currencies():
        """Add the default currencies that are missing."""
        from models.currencies import seed_currencies
        added = seed_currencies()
        click.echo(f'{added} currencies added.')

    @currency.command('list')
    def list_currencies():
        """List all currencies."""
        from models.currencies import Currency
        currencies = Currency.query.order_by(Currency.code).all()
        if not currencies:
            click.echo('No currencies found.')
            return
        click.echo(f'{"ID":<5} {"Code":<6} {"Symbol":<8} {"Name":<30}')
        click.echo('-' * 50)
        for c in currencies:
            click.echo(f'{c.id:<5} {c.code:<6} {c.symbol:<8} {c.name:<30}')

    @app.cli.group()
    def family():
        """Family link maintenance."""
        pass

    @family.command('reconcile')
    def reconcile_family():
        """Complete every family link that has only one side."""
        from services.family_service import FamilyService
        repaired = FamilyService.reconcile()
        click.echo(f'{repaired} missing link sides repaired.')


if __name__ == '__main__':
    app = create_app()
    # SECURITY: Only bind to localhost in development
    app.run(host='127.0.0.1', port=int(os.environ.get('PORT', 3001)), debug=True)
