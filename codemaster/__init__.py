import os

import click
from flask import Flask
from flask_login import LoginManager
from flask_wtf import CSRFProtect
from flask_wtf.csrf import CSRFError
from sqlalchemy.engine import make_url
from werkzeug.exceptions import HTTPException

from config import Config
from .models import db, User
from .sessions import DatabaseSessionInterface, purge_expired_sessions
from .auth.provider import OIDCProvider
from .runner import SimulatedRunner
from .storage import UPSERT_DIALECTS

login_manager = LoginManager()
csrf = CSRFProtect()


def create_app(config_object=Config, test_config=None):
    app = Flask(__name__)
    app.config.from_object(config_object)
    if test_config:
        app.config.update(test_config)
    app.logger.setLevel(app.config["LOG_LEVEL"])

    backend = make_url(app.config["SQLALCHEMY_DATABASE_URI"]).get_backend_name()
    if backend not in UPSERT_DIALECTS:
        raise RuntimeError(f"Unsupported database backend {backend!r}; DATABASE_URL must be PostgreSQL or SQLite")

    # ensure instance folder exists
    os.makedirs(app.instance_path, exist_ok=True)

    # initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    csrf.init_app(app)
    app.session_interface = DatabaseSessionInterface()

    app.extensions["identity_provider"] = OIDCProvider(
        app.config["OIDC_ISSUER_URL"],
        app.config["OIDC_CLIENT_ID"],
        app.config["OIDC_CLIENT_SECRET"],
        scope=app.config["OIDC_SCOPE"],
    )
    app.extensions["code_runner"] = SimulatedRunner()

    from .auth.routes import auth_bp
    from .api.routes import api_bp
    from .ai.routes import ai_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp)
    app.register_blueprint(ai_bp)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        return {"message": "Unauthorized"}, 401

    @app.errorhandler(CSRFError)
    def csrf_error(e):
        return {"message": "Invalid CSRF token"}, 400

    @app.errorhandler(HTTPException)
    def http_error(e):
        return {"message": e.name}, e.code

    @app.errorhandler(Exception)
    def unhandled_error(e):
        db.session.rollback()
        app.logger.exception("Unhandled error")
        return {"message": "Internal Server Error"}, 500

    @app.cli.command("seed")
    def seed_command():
        """Load the reference catalogue."""
        from .seed import seed_reference_data
        seed_reference_data()
        click.echo("Seeded reference data.")

    @app.cli.command("purge-sessions")
    def purge_sessions_command():
        """Delete expired session records."""
        count = purge_expired_sessions()
        click.echo(f"Removed {count} expired sessions.")

    with app.app_context():
        db.create_all()

    return app
