"""
Canvas OAuth2 authorization-code negotiation for the admin API token.

The flow spans two requests: the start view redirects the installer to the
Canvas authorize page, and Canvas redirects back to the callback view with
a code that is exchanged for a token. State between the two lives in the
Django session.
"""

import logging
import secrets
from urllib.parse import urlencode

import requests
from django.conf import settings

from .exceptions import ErrorCode, InstallerError

logger = logging.getLogger(__name__)

SESSION_STATE_KEY = "oauth_state"
SESSION_URL_KEY = "oauth_instance_url"
SESSION_REDIRECT_KEY = "oauth_redirect_uri"
SESSION_TOKEN_KEY = "oauth_token"
SESSION_USER_KEY = "oauth_user"


def normalize_instance_url(url):
    return (url or "").strip().rstrip("/")


def canvas_request(method, url, **kwargs):
    kwargs.setdefault("timeout", getattr(settings, "OAUTH_TIMEOUT", 30))
    try:
        resp = requests.request(method, url, **kwargs)
    except requests.RequestException as exc:
        logger.error("Canvas request %s %s failed: %s", method, url, exc)
        raise InstallerError(f"Canvas request to {url} failed: {exc}", ErrorCode.API_TOKEN) from exc
    if not resp.ok:
        logger.error("Canvas API error %s from %s: %s", resp.status_code, url, resp.text)
        raise InstallerError(f"Canvas API error {resp.status_code}: {resp.text}", ErrorCode.API_TOKEN)
    return resp


def revoke_token(instance_url, token):
    """Ask Canvas to invalidate `token`."""
    canvas_request(
        "DELETE",
        f"{normalize_instance_url(instance_url)}/login/oauth2/token",
        headers={"Authorization": f"Bearer {token}"},
    )


class OAuthNegotiator:
    def __init__(self, session, instance_url=None, client_id="", client_secret="", redirect_uri=""):
        self.session = session
        self.instance_url = normalize_instance_url(instance_url or session.get(SESSION_URL_KEY))
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri or session.get(SESSION_REDIRECT_KEY, "")

    def authorize_url(self, purpose=""):
        """Start a negotiation and return the Canvas URL to send the installer to."""
        state = secrets.token_urlsafe(24)
        self.session[SESSION_STATE_KEY] = state
        self.session[SESSION_URL_KEY] = self.instance_url
        self.session[SESSION_REDIRECT_KEY] = self.redirect_uri

        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
            "state": state,
        }
        if purpose:
            params["purpose"] = purpose
        return f"{self.instance_url}/login/oauth2/auth?{urlencode(params)}"

    def exchange(self, code, state):
        """Trade an authorization code for a token and keep it in the session."""
        expected = self.session.pop(SESSION_STATE_KEY, None)
        if not expected or not secrets.compare_digest(str(state or ""), expected):
            raise InstallerError("OAuth state mismatch, please request the token again.", ErrorCode.API_TOKEN)
        if not self.instance_url:
            raise InstallerError("No Canvas instance URL for this OAuth request.", ErrorCode.API_TOKEN)

        resp = canvas_request(
            "POST",
            f"{self.instance_url}/login/oauth2/token",
            data={
                "grant_type": "authorization_code",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
                "code": code,
            },
        )

        try:
            token_json = resp.json()
        except ValueError as exc:
            raise InstallerError(f"Canvas returned an unreadable token response: {exc}", ErrorCode.API_TOKEN) from exc

        access_token = token_json.get("access_token")
        if not access_token:
            raise InstallerError("Canvas did not return an access token.", ErrorCode.API_TOKEN)

        self.session[SESSION_TOKEN_KEY] = access_token
        self.session[SESSION_USER_KEY] = token_json.get("user", {})
        logger.info("Acquired Canvas API token from %s", self.instance_url)
        return access_token

    def is_api_token(self):
        return bool(self.session.get(SESSION_TOKEN_KEY))

    def get_token(self):
        return self.session.get(SESSION_TOKEN_KEY)

    def get_user(self):
        return self.session.get(SESSION_USER_KEY)

    def clear(self):
        for key in (SESSION_STATE_KEY, SESSION_REDIRECT_KEY, SESSION_TOKEN_KEY, SESSION_USER_KEY):
            self.session.pop(key, None)
