from types import SimpleNamespace

from codemaster import create_app


def make_test_app(db_path, **overrides):
    config = {
        "TESTING": True,
        "WTF_CSRF_ENABLED": False,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
        "OIDC_ISSUER_URL": "https://id.example.test",
        "OIDC_CLIENT_ID": "codemaster-test",
        "OPENAI_API_KEY": "test-key",
        "OPENAI_MODEL": "gpt-test",
    }
    config.update(overrides)
    return create_app(test_config=config)


class FakeProvider:
    """Identity provider double: hands back fixed claims for any code."""

    def __init__(self, claims=None, error=None):
        self.claims = claims or {
            "sub": "user-42",
            "email": "ada@example.com",
            "first_name": "Ada",
            "last_name": "Lovelace",
            "profile_image_url": "https://img.example.test/ada.png",
        }
        self.error = error
        self.exchanged = []

    def authorization_url(self, redirect_uri, state):
        return f"https://id.example.test/authorize?state={state}&redirect_uri={redirect_uri}"

    def fetch_claims(self, code, redirect_uri):
        if self.error:
            raise self.error
        self.exchanged.append(code)
        return self.claims

    def end_session_url(self, post_logout_redirect_uri):
        return "https://id.example.test/logout"


class FakeOpenAI:
    """Stands in for the OpenAI client; replies with ``content`` or raises ``error``."""

    def __init__(self, content="{}", error=None):
        self.content = content
        self.error = error
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])
