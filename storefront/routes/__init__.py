from flask import current_app, request
from flask_jwt_extended import get_jwt_identity

from storefront.errors import Unauthorized


def services():
    return current_app.extensions["storefront"]


def json_body():
    """The request's JSON object; anything else (absent, invalid, array, scalar) reads as {}."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def current_user_id():
    try:
        return int(get_jwt_identity())
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token")
