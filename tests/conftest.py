import os
import tempfile

import pytest

from codemaster.models import db, User
from helpers import FakeProvider, make_test_app


@pytest.fixture
def app():
    db_fd, db_path = tempfile.mkstemp()
    app = make_test_app(db_path)
    app.extensions["identity_provider"] = FakeProvider()
    ctx = app.app_context()
    ctx.push()
    try:
        yield app
    finally:
        db.session.remove()
        db.drop_all()
        ctx.pop()
        os.close(db_fd)
        os.unlink(db_path)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    user = User(id="user-1", email="grace@example.com", first_name="Grace", last_name="Hopper")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def auth_client(client, user):
    with client.session_transaction() as sess:
        sess["_user_id"] = user.id
        sess["_fresh"] = True
    return client
