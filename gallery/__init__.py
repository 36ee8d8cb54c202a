"""
Art Gallery - Application Factory

This module provides the Flask application factory pattern for creating
and configuring the application instance.
"""

import logging
import os
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix
from gallery.extensions import db, login_manager
from gallery.config import Config


def create_app(config_class=Config):
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use (default: Config)

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.from_object(config_class)
    _configure_logging(app)

    if app.config['TRUST_PROXY']:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    # Initialize extensions
    from gallery.datastore import datastore
    from gallery.models import TABLES

    db.init_app(app)
    datastore.init_app(app, tables=TABLES)
    login_manager.init_app(app)
    login_manager.login_view = 'auth.login'

    # Dwell trackers live for the lifetime of the process
    from gallery.tracking.registry import TrackingRegistry
    app.extensions['tracking'] = TrackingRegistry.from_app(app)

    # Global approval check runs before any blueprint handler
    from gallery.gate import init_gate
    init_gate(app)

    # Register blueprints
    from gallery.auth import auth_bp
    from gallery.public import public_bp
    from gallery.studio import studio_bp
    from gallery.admin import admin_bp
    from gallery.tracking import tracking_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(public_bp)
    app.register_blueprint(studio_bp)
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(tracking_bp, url_prefix='/api/tracking')

    # User loader for Flask-Login
    @login_manager.user_loader
    def load_user(user_id):
        from gallery.models import User
        return db.session.get(User, int(user_id))

    # Create database tables
    with app.app_context():
        if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///') and not app.testing:
            os.makedirs(os.path.join(Config.basedir, 'instance'), exist_ok=True)
        db.create_all()

    return app


def _configure_logging(app):
    level = logging.getLevelName(str(app.config.get('LOG_LEVEL', 'INFO')).upper())
    if not isinstance(level, int):
        level = logging.INFO
    logger = logging.getLogger('gallery')
    logger.setLevel(level)
    if not logger.handlers and not logging.getLogger().handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))
        logger.addHandler(handler)
