"""Signed HS256 tokens for staff sessions.

Access tokens carry the user's role so the edge can reject obvious
mismatches; the role stored in the database still wins on every request.
"""
import datetime as dt
import uuid
from typing import Dict, Optional

import jwt
from flask import current_app

ISSUER = "pratodigital"
ALGORITHM = "HS256"


class TokenError(Exception):
    pass


def _encode(user_id, token_type: str, lifetime: dt.timedelta, **claims) -> str:
    now = dt.datetime.now(dt.timezone.utc)
    payload: Dict = {
        "sub": str(user_id),
        "type": token_type,
        "iss": ISSUER,
        "iat": now,
        "exp": now + lifetime,
        "jti": uuid.uuid4().hex,
        **claims,
    }
    return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm=ALGORITHM)


def create_access_token(user_id, role: Optional[str]) -> str:
    minutes = current_app.config["ACCESS_TOKEN_LIFETIME_MIN"]
    return _encode(user_id, "access", dt.timedelta(minutes=minutes), role=role or "")


def create_refresh_token(user_id) -> str:
    days = current_app.config["REFRESH_TOKEN_LIFETIME_DAYS"]
    return _encode(user_id, "refresh", dt.timedelta(days=days))


def token_pair(user) -> Dict:
    return {
        "access_token": create_access_token(user.id, user.role),
        "refresh_token": create_refresh_token(user.id),
        "expires_in": current_app.config["ACCESS_TOKEN_LIFETIME_MIN"] * 60,
    }


def decode_token(token: str, expected_type: str = "access") -> Dict:
    try:
        data = jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[ALGORITHM],
            issuer=ISSUER,
            options={"require": ["exp", "sub", "iss"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("token expired")
    except jwt.InvalidTokenError:
        raise TokenError("invalid token")

    if data.get("type") != expected_type:
        raise TokenError(f"expected {expected_type} token")
    return data
