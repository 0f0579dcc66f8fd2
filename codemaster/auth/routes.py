import secrets

from flask import Blueprint, current_app, redirect, request, session, url_for
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from ..models import db
from ..schemas import UpsertUserSchema, parse
from ..storage import storage
from .provider import IdentityProviderError, user_from_claims

auth_bp = Blueprint("auth", __name__, url_prefix="/api")


def _provider():
    return current_app.extensions["identity_provider"]


def _callback_url():
    return url_for("auth.callback", _external=True)


@auth_bp.route("/login")
def login():
    state = secrets.token_urlsafe(16)
    session["oauth_state"] = state
    try:
        url = _provider().authorization_url(_callback_url(), state)
    except IdentityProviderError:
        current_app.logger.exception("Error starting login")
        return {"message": "Failed to start login"}, 500
    return redirect(url)


@auth_bp.route("/callback")
def callback():
    state = session.pop("oauth_state", None)
    code = request.args.get("code")
    if not code or not state or request.args.get("state") != state:
        return {"message": "Invalid login callback"}, 400

    try:
        claims = _provider().fetch_claims(code, _callback_url())
        user = storage.upsert_user(parse(UpsertUserSchema, user_from_claims(claims)))
    except (IdentityProviderError, KeyError, ValidationError):
        current_app.logger.exception("Error completing login")
        return {"message": "Failed to complete login"}, 500
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error saving user")
        return {"message": "Failed to complete login"}, 500

    current_app.session_interface.regenerate(session)
    login_user(user)
    return redirect("/")


@auth_bp.route("/logout")
def logout():
    logout_user()
    session.clear()
    try:
        url = _provider().end_session_url(request.host_url)
    except IdentityProviderError:
        current_app.logger.warning("Provider logout unavailable, redirecting home")
        url = "/"
    return redirect(url)


@auth_bp.route("/auth/user")
@login_required
def auth_user():
    try:
        user = storage.get_user(current_user.id)
    except SQLAlchemyError:
        current_app.logger.exception("Error fetching user")
        return {"message": "Failed to fetch user"}, 500
    return user.to_dict()


@auth_bp.route("/csrf-token")
def csrf_token():
    return {"csrfToken": generate_csrf()}
