"""OpenID Connect client for the external identity provider."""
import logging
from urllib.parse import urlencode

import httpx

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    pass


class OIDCProvider:
    """Authorization-code flow against a discovered OpenID Connect issuer."""

    def __init__(self, issuer_url, client_id, client_secret=None, scope="openid email profile"):
        self.issuer_url = issuer_url.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.scope = scope
        self._metadata = None

    def metadata(self):
        if self._metadata is None:
            url = f"{self.issuer_url}/.well-known/openid-configuration"
            try:
                response = httpx.get(url)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise IdentityProviderError(f"Discovery failed for {self.issuer_url}: {e}") from e
            self._metadata = response.json()
        return self._metadata

    def authorization_url(self, redirect_uri, state):
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "scope": self.scope,
            "state": state,
            "prompt": "login consent",
        }
        return f"{self.metadata()['authorization_endpoint']}?{urlencode(params)}"

    def fetch_claims(self, code, redirect_uri):
        """Exchange an authorization code for the user's claims."""
        meta = self.metadata()
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
            "client_id": self.client_id,
        }
        if self.client_secret:
            data["client_secret"] = self.client_secret
        try:
            token = httpx.post(meta["token_endpoint"], data=data)
            token.raise_for_status()
            access_token = token.json()["access_token"]
            userinfo = httpx.get(
                meta["userinfo_endpoint"],
                headers={"Authorization": f"Bearer {access_token}"},
            )
            userinfo.raise_for_status()
        except (httpx.HTTPError, KeyError) as e:
            raise IdentityProviderError(f"Code exchange failed: {e}") from e
        return userinfo.json()

    def end_session_url(self, post_logout_redirect_uri):
        endpoint = self.metadata().get("end_session_endpoint")
        if not endpoint:
            return post_logout_redirect_uri
        params = {"client_id": self.client_id, "post_logout_redirect_uri": post_logout_redirect_uri}
        return f"{endpoint}?{urlencode(params)}"


def user_from_claims(claims):
    """Map provider claims onto the users table columns."""
    return {
        "id": claims["sub"],
        "email": claims.get("email"),
        "first_name": claims.get("first_name") or claims.get("given_name"),
        "last_name": claims.get("last_name") or claims.get("family_name"),
        "profile_image_url": claims.get("profile_image_url") or claims.get("picture"),
    }
