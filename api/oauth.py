"""
OAuth blueprint (Google, GitHub):
- GET /auth/<provider>            -> redirect to the provider consent screen
- GET /auth/<provider>/callback   -> redirect to the frontend with ?token=<accessToken>

Every failure past the provider check ends in a redirect to
{CLIENT_URL}/login?error=oauth_failed rather than a JSON error.
"""
from __future__ import annotations

import logging
import secrets
from urllib.parse import urlencode

from flask import Blueprint, request, redirect, session, abort, current_app

from services.errors import AuthError
from services.oauth import OAUTH_PROVIDERS, provider_from_config
from services.sessions import current_issuer
from .auth import set_refresh_cookie

logger = logging.getLogger(__name__)

bp = Blueprint("oauth", __name__)

STATE_KEY = "oauth_state"


def _provider(name: str):
    if name not in OAUTH_PROVIDERS:
        abort(404)
    return provider_from_config(name, current_app.config)


def _failure_redirect():
    return redirect(f"{current_app.config['CLIENT_URL']}/login?error=oauth_failed")


@bp.get("/<provider>")
def oauth_start(provider: str):
    """
    Start the OAuth flow
    ---
    tags:
      - OAuth
    parameters:
      - in: path
        name: provider
        type: string
        enum: [google, github]
        required: true
    responses:
      302:
        description: Redirect to the provider
      404:
        description: Unknown provider
    """
    client = _provider(provider)
    if not client.configured:
        logger.warning("%s OAuth is not configured", provider)
        return _failure_redirect()

    state = secrets.token_urlsafe(16)
    session[STATE_KEY] = f"{provider}:{state}"
    return redirect(client.authorization_url(state))


@bp.get("/<provider>/callback")
def oauth_callback(provider: str):
    """
    OAuth provider callback
    ---
    tags:
      - OAuth
    parameters:
      - in: path
        name: provider
        type: string
        enum: [google, github]
        required: true
      - in: query
        name: code
        type: string
      - in: query
        name: state
        type: string
    responses:
      302:
        description: Redirect to the frontend with the access token, or with error=oauth_failed
    """
    client = _provider(provider)
    expected_state = session.pop(STATE_KEY, None)
    state = request.args.get("state")
    code = request.args.get("code")

    if request.args.get("error") or not code:
        logger.warning("%s OAuth callback without code", provider)
        return _failure_redirect()
    if not state or expected_state != f"{provider}:{state}":
        logger.warning("%s OAuth state mismatch", provider)
        return _failure_redirect()

    try:
        profile = client.fetch_profile(code)
        issued = current_issuer().login_external(profile)
    except AuthError as exc:
        logger.warning("%s OAuth callback failed: %s", provider, exc.message)
        return _failure_redirect()
    except Exception:
        logger.exception("%s OAuth callback failed", provider)
        return _failure_redirect()

    query = urlencode({"token": issued.access_token})
    response = redirect(f"{current_app.config['CLIENT_URL']}/oauth/callback?{query}")
    return set_refresh_cookie(response, issued.refresh_token)
