# Authorization guard for mutating endpoints
from functools import wraps

from flask import g, request

import tokens
from errors import Forbidden, InvalidTokenError, Unauthenticated


def login_required(f):
    """Resolve the caller from a Bearer token before running the view."""
    @wraps(f)
    def decorated(*args, **kwargs):
        header = request.headers.get('Authorization')
        if not header:
            raise Unauthenticated()

        scheme, _, token = header.partition(' ')
        if scheme.lower() != 'bearer' or not token.strip():
            raise InvalidTokenError()

        g.identity = tokens.verify(token.strip())
        return f(*args, **kwargs)
    return decorated


def current_identity():
    return g.identity


def ensure_owner(author_id, caller_id):
    if author_id != caller_id:
        raise Forbidden()
