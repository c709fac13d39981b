from .responses import ok, error, error_response, internal_error_response, validation_error_response
from .auth import auth_required, role_required, restaurant_access
from .validation import validate_schema
from .db import transactional, run_in_transaction
from .jwt import (
    create_access_token,
    create_refresh_token,
    decode_token,
    token_pair,
    TokenError,
)
from .slug import slugify

__all__ = [
    'ok',
    'error',
    'error_response',
    'internal_error_response',
    'validation_error_response',
    'auth_required',
    'role_required',
    'restaurant_access',
    'create_access_token',
    'create_refresh_token',
    'decode_token',
    'TokenError',
    'token_pair',
    'validate_schema',
    'transactional',
    'run_in_transaction',
    'slugify',
]
