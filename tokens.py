# Token service: signed, time-limited identity tokens
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from errors import InvalidTokenError


def issue(user_id, username, expires_delta=None):
    """Sign a token carrying the user's id and username.

    Lifetime defaults to JWT_ACCESS_TOKEN_EXPIRES (7 days).
    """
    kwargs = {}
    if expires_delta is not None:
        kwargs['expires_delta'] = expires_delta
    return create_access_token(identity=str(user_id),
                               additional_claims={"username": username},
                               **kwargs)


def verify(token):
    """Return {id, username} from a token whose signature and expiry check out."""
    if not token:
        raise InvalidTokenError()
    try:
        claims = decode_token(token)
        return {"id": int(claims["sub"]), "username": claims["username"]}
    except (PyJWTError, JWTExtendedException, KeyError, TypeError, ValueError) as e:
        raise InvalidTokenError() from e
