"""Server-side sessions stored in the ``sessions`` table.

The browser only ever holds a signed session id; the payload lives in the
database row together with its expiry.
"""
import secrets
from datetime import datetime, timezone

from flask.sessions import SessionInterface, SessionMixin
from itsdangerous import BadSignature, Signer
from werkzeug.datastructures import CallbackDict

from .models import db, utcnow, StoredSession


class ServerSideSession(CallbackDict, SessionMixin):
    def __init__(self, initial=None, sid=None, new=False):
        def on_update(self):
            self.modified = True

        CallbackDict.__init__(self, initial, on_update)
        self.sid = sid
        self.new = new
        self.modified = False


class DatabaseSessionInterface(SessionInterface):
    session_class = ServerSideSession
    salt = "codemaster-session"

    def _signer(self, app):
        return Signer(app.secret_key, salt=self.salt)

    def _new_session(self):
        return self.session_class(sid=secrets.token_urlsafe(32), new=True)

    def open_session(self, app, request):
        signed = request.cookies.get(self.get_cookie_name(app))
        if not signed:
            return self._new_session()
        try:
            sid = self._signer(app).unsign(signed).decode("utf-8")
        except BadSignature:
            return self._new_session()
        record = db.session.get(StoredSession, sid)
        if record is None or record.expire <= utcnow():
            return self._new_session()
        return self.session_class(record.sess, sid=sid)

    def save_session(self, app, session, response):
        name = self.get_cookie_name(app)
        domain = self.get_cookie_domain(app)
        path = self.get_cookie_path(app)

        if not session:
            if session.modified:
                self._delete(session.sid)
                response.delete_cookie(name, domain=domain, path=path)
            return

        if not self.should_set_cookie(app, session):
            return

        expires = datetime.now(timezone.utc) + app.permanent_session_lifetime
        record = db.session.get(StoredSession, session.sid)
        if record is None:
            record = StoredSession(sid=session.sid)
            db.session.add(record)
        record.sess = dict(session)
        record.expire = expires.replace(tzinfo=None)
        db.session.commit()

        response.set_cookie(
            name,
            self._signer(app).sign(session.sid).decode("utf-8"),
            expires=expires,
            httponly=self.get_cookie_httponly(app),
            domain=domain,
            path=path,
            secure=self.get_cookie_secure(app),
            samesite=self.get_cookie_samesite(app),
        )

    def regenerate(self, session):
        """Move the session to a fresh id, dropping the old record."""
        self._delete(session.sid)
        session.sid = secrets.token_urlsafe(32)
        session.modified = True

    def _delete(self, sid):
        StoredSession.query.filter_by(sid=sid).delete()
        db.session.commit()


def purge_expired_sessions():
    count = StoredSession.query.filter(StoredSession.expire <= utcnow()).delete()
    db.session.commit()
    return count
