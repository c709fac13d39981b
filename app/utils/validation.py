from functools import wraps
from flask import request
from pydantic import ValidationError
from .responses import validation_error_response


def _payload(source):
    if source == "args":
        return request.args.to_dict()
    return request.get_json(silent=True) or {}


def validate_schema(schema, source="json"):
    """Validate the JSON body (or, with ``source="args"``, the query string) against a pydantic schema.

    The parsed model is left on ``request.validated_data``.
    """

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                obj = schema(**_payload(source))
            except ValidationError as ve:
                return validation_error_response(
                    ve.errors(include_url=False, include_context=False, include_input=False)
                )
            request.validated_data = obj
            return fn(*args, **kwargs)
        return wrapper

    return decorator
