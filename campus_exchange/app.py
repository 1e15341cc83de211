"""
Campus Exchange API: Flask application
Users, listings, purchases and seller feedback over one relational database.
"""

import logging
import os

import click
from dotenv import load_dotenv
from flasgger import Swagger
from flask import Flask

from campus_exchange.errors import register_error_handlers
from campus_exchange.extensions import cors, db
from campus_exchange.observability import setup_logging
from campus_exchange import models  # noqa: F401  (register models)

logger = logging.getLogger(__name__)


def _database_uri():
    if os.environ.get('DATABASE_URL'):
        return os.environ['DATABASE_URL']
    db_user = os.environ.get('DB_USER', 'campus_user')
    db_pass = os.environ.get('DB_PASS', 'password')
    db_host = os.environ.get('DB_HOST', 'localhost')
    db_port = os.environ.get('DB_PORT', '5432')
    db_name = os.environ.get('DB_NAME', 'campus_exchange')
    return f"postgresql://{db_user}:{db_pass}@{db_host}:{db_port}/{db_name}"


def _engine_options(app):
    # SQLite gets Flask-SQLAlchemy's own pool defaults
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite'):
        return {}
    return {
        'pool_size': app.config['DB_POOL_SIZE'],
        'max_overflow': app.config['DB_MAX_OVERFLOW'],
        'pool_timeout': app.config['DB_POOL_TIMEOUT'],
        'pool_pre_ping': True,
    }


def create_app(test_config=None):
    load_dotenv()

    app = Flask(__name__)

    # Configuration
    app.config['SQLALCHEMY_DATABASE_URI'] = _database_uri()
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['DB_POOL_SIZE'] = int(os.environ.get('DB_POOL_SIZE', 10))
    app.config['DB_MAX_OVERFLOW'] = int(os.environ.get('DB_MAX_OVERFLOW', 0))
    app.config['DB_POOL_TIMEOUT'] = int(os.environ.get('DB_POOL_TIMEOUT', 30))
    app.config['BCRYPT_LOG_ROUNDS'] = int(os.environ.get('BCRYPT_LOG_ROUNDS', 12))
    app.config['CORS_ORIGINS'] = os.environ.get('CORS_ORIGINS', '*')
    app.config['LOG_LEVEL'] = os.environ.get('LOG_LEVEL', 'INFO')
    app.config['LOG_FORMAT'] = os.environ.get('LOG_FORMAT', 'text')

    if test_config:
        app.config.update(test_config)

    app.config.setdefault('SQLALCHEMY_ENGINE_OPTIONS', _engine_options(app))

    setup_logging(app.config['LOG_LEVEL'], app.config['LOG_FORMAT'])

    # Initialize Extensions (the engine and its pool belong to this app)
    db.init_app(app)
    origins = [o.strip() for o in app.config['CORS_ORIGINS'].split(',') if o.strip()]
    cors.init_app(app, origins=origins or '*')

    Swagger(app)

    register_error_handlers(app)

    # Register Blueprints
    from campus_exchange.routes.health import health_bp
    app.register_blueprint(health_bp)

    from campus_exchange.routes.auth import auth_bp
    app.register_blueprint(auth_bp)

    from campus_exchange.routes.user import user_bp
    app.register_blueprint(user_bp)

    from campus_exchange.routes.listings import listings_bp
    app.register_blueprint(listings_bp)

    from campus_exchange.routes.purchase import purchase_bp
    app.register_blueprint(purchase_bp)

    from campus_exchange.routes.feedback import feedback_bp
    app.register_blueprint(feedback_bp)

    @app.cli.command('init-db')
    def init_db_command():
        """Create the users, listings, transactions and feedback tables."""
        db.create_all()
        click.echo('Initialized the database.')

    return app


def shutdown(app):
    """Close every pooled connection owned by the app."""
    with app.app_context():
        db.engine.dispose()
    logger.info("Database pool disposed")


if __name__ == '__main__':
    app = create_app()
    try:
        app.run(host='0.0.0.0', port=int(os.environ.get('SERVER_PORT', 5000)))
    finally:
        shutdown(app)
