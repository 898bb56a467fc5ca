from __future__ import annotations
from functools import wraps
from flask import request, g, abort
from services.errors import InvalidToken
from services.sessions import current_issuer


def bearer_token() -> str | None:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    return auth.split(" ", 1)[1].strip() or None


def access_token_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            if not token:
                abort(401, description="Access token required")
            try:
                user = current_issuer().authenticate(token)
            except InvalidToken as e:
                abort(401, description=e.message)

            g.current_user = user
            return fn(*args, **kwargs)

        return wrapper

    return decorator
