from functools import wraps
from flask_jwt_extended import verify_jwt_in_request
from repairdesk.errors import Forbidden
from repairdesk.services.policy import has_role


def require_roles(*roles: str):
    """Require a valid token whose role claim is one of roles (any role when empty)."""
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if roles and not has_role(*roles):
                raise Forbidden('Missing role')
            return fn(*args, **kwargs)
        return wrapper
    return outer
