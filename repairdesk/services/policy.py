from __future__ import annotations
from typing import Optional
from flask_jwt_extended import get_jwt, get_jwt_identity
from repairdesk.constants.roles import ROLE_TECHNICIAN


def current_user_id() -> str:
    # Identity is the user's opaque id, stored as the token subject
    return str(get_jwt_identity())


def current_role() -> Optional[str]:
    claims = get_jwt()
    return claims.get('role')


def has_role(*roles: str) -> bool:
    return current_role() in roles


def is_technician() -> bool:
    return current_role() == ROLE_TECHNICIAN

