import os
import tempfile
from urllib.parse import parse_qs, urlparse

from codemaster.auth.provider import IdentityProviderError, user_from_claims
from codemaster.models import db, StoredSession, User
from helpers import FakeProvider, make_test_app


def _login(client):
    resp = client.get("/api/login")
    state = parse_qs(urlparse(resp.headers["Location"]).query)["state"][0]
    return client.get(f"/api/callback?code=auth-code&state={state}")


def test_login_redirects_to_provider_with_state(client):
    resp = client.get("/api/login")
    assert resp.status_code == 302
    location = urlparse(resp.headers["Location"])
    assert location.netloc == "id.example.test"
    query = parse_qs(location.query)
    assert query["state"][0]
    assert query["redirect_uri"][0].endswith("/api/callback")


def test_callback_creates_user_and_session(app, client):
    resp = _login(client)
    assert resp.status_code == 302
    assert resp.headers["Location"] == "/"
    assert app.extensions["identity_provider"].exchanged == ["auth-code"]

    user = db.session.get(User, "user-42")
    assert user.email == "ada@example.com"

    resp = client.get("/api/auth/user")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["id"] == "user-42"
    assert data["firstName"] == "Ada"
    assert data["profileImageUrl"] == "https://img.example.test/ada.png"


def test_second_login_updates_the_same_user(app, client):
    _login(client)
    app.extensions["identity_provider"].claims = {"sub": "user-42", "email": "ada@newmail.test"}
    _login(client)
    assert User.query.count() == 1
    assert db.session.get(User, "user-42").email == "ada@newmail.test"


def test_login_moves_the_session_to_a_new_id(client):
    client.get("/api/login")
    before = client.get_cookie("connect.sid").value
    _login(client)
    after = client.get_cookie("connect.sid").value
    assert before != after
    assert StoredSession.query.count() == 1


def test_callback_rejects_state_mismatch(client):
    client.get("/api/login")
    resp = client.get("/api/callback?code=auth-code&state=forged")
    assert resp.status_code == 400
    assert resp.get_json() == {"message": "Invalid login callback"}
    assert client.get("/api/auth/user").status_code == 401


def test_callback_without_login_is_rejected(client):
    assert client.get("/api/callback?code=auth-code&state=anything").status_code == 400


def test_provider_failure_is_reported(app, client):
    app.extensions["identity_provider"] = FakeProvider(error=IdentityProviderError("token endpoint down"))
    resp = _login(client)
    assert resp.status_code == 500
    assert resp.get_json() == {"message": "Failed to complete login"}
    assert User.query.count() == 0


def test_malformed_claims_are_rejected(app, client):
    app.extensions["identity_provider"] = FakeProvider(claims={"sub": "user-9", "email": ["ada@example.com"]})
    resp = _login(client)
    assert resp.status_code == 500
    assert resp.get_json() == {"message": "Failed to complete login"}
    assert User.query.count() == 0
    assert client.get("/api/auth/user").status_code == 401


def test_logout_ends_the_session(client):
    _login(client)
    resp = client.get("/api/logout")
    assert resp.status_code == 302
    assert resp.headers["Location"] == "https://id.example.test/logout"
    assert client.get("/api/auth/user").status_code == 401
    assert StoredSession.query.count() == 0


def test_auth_user_requires_login(client):
    resp = client.get("/api/auth/user")
    assert resp.status_code == 401
    assert resp.get_json() == {"message": "Unauthorized"}


def test_user_from_claims_accepts_standard_names():
    claims = {"sub": "abc", "given_name": "Alan", "family_name": "Turing", "picture": "https://img/a.png"}
    assert user_from_claims(claims) == {
        "id": "abc",
        "email": None,
        "first_name": "Alan",
        "last_name": "Turing",
        "profile_image_url": "https://img/a.png",
    }


def test_csrf_token_is_required_when_enabled():
    db_fd, db_path = tempfile.mkstemp()
    app = make_test_app(db_path, WTF_CSRF_ENABLED=True)
    try:
        client = app.test_client()
        payload = {"name": "Google", "slug": "google", "color": "#4285f4"}

        resp = client.post("/api/companies", json=payload)
        assert resp.status_code == 400
        assert resp.get_json() == {"message": "Invalid CSRF token"}

        token = client.get("/api/csrf-token").get_json()["csrfToken"]
        resp = client.post("/api/companies", json=payload, headers={"X-CSRFToken": token})
        assert resp.status_code == 401
    finally:
        with app.app_context():
            db.session.remove()
            db.drop_all()
        os.close(db_fd)
        os.unlink(db_path)
