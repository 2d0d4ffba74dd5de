# depotlifecycle/auth.py
"""HTTP Basic authentication for the API blueprints."""

import hmac

from flask import abort, current_app, g, request


def check_api_access():
    """``before_request`` hook shared by the API blueprints.

    Answers 503 while the API is paused and 401 unless the request carries
    Basic credentials for one of the configured ``API_USERS``.
    """
    if current_app.config.get('API_PAUSED'):
        abort(503)

    creds = request.authorization
    users = current_app.config.get('API_USERS') or {}
    if creds is None or creds.username not in users:
        abort(401)
    if not hmac.compare_digest((users[creds.username] or '').encode(), (creds.password or '').encode()):
        abort(401)
    g.username = creds.username


def current_username():
    return g.get('username')


def is_validation_user():
    """True when the caller is the distinguished validation identity."""
    return current_username() == current_app.config.get('VALIDATE_USER_NAME')
