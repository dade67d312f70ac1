from __future__ import annotations
"""Identity: registration gated by access codes, password login and user lookups."""
import logging
from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from repairdesk import get_db
from repairdesk.errors import AuthenticationFailure, NotFound, PersistenceFailure, ValidationFailure
from repairdesk.models.user import User
from repairdesk.services.access import validate_access_code
from repairdesk.utils.validation import require_non_blank, require_text

logger = logging.getLogger(__name__)


def register_user(dni: str, first_name: str, last_name: str, email: str, password: str, access_code: str, session=None) -> User:
    session = session or get_db()
    # Role comes from the access code; validate it before touching anything else
    role = validate_access_code(access_code, session=session)
    require_non_blank({'dni': dni, 'firstName': first_name, 'lastName': last_name, 'email': email, 'password': password})
    email = email.strip().lower()
    try:
        if session.execute(select(User).where(User.email == email)).scalar_one_or_none():
            raise ValidationFailure('email already registered')
        user = User(dni=dni.strip(), email=email, first_name=first_name.strip(), last_name=last_name.strip(), role=role)
        user.set_password(password)
        session.add(user)
        session.commit()
    except IntegrityError:
        # lost a race with a concurrent registration of the same email
        session.rollback()
        raise ValidationFailure('email already registered')
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceFailure(f'Error registering user: {e}') from e
    logger.info('Registered user %s with role %s', user.id, role)
    return user


def authenticate(email: str, password: str, session=None) -> User:
    require_text({'email': email, 'password': password})
    if not email or not password:
        raise ValidationFailure('email & password required')
    session = session or get_db()
    try:
        user = session.execute(select(User).where(User.email == email.strip().lower())).scalar_one_or_none()
    except SQLAlchemyError as e:
        raise PersistenceFailure(f'Error signing in: {e}') from e
    if not user or not user.verify_password(password):
        raise AuthenticationFailure('invalid credentials')
    return user


def get_user(user_id: str, session=None) -> User:
    session = session or get_db()
    try:
        user = session.get(User, user_id)
    except SQLAlchemyError as e:
        raise PersistenceFailure(f'Error loading user: {e}') from e
    if not user:
        raise NotFound(f'User {user_id} not found')
    return user


def resolve_full_name(user_id: str, session=None) -> Optional[str]:
    """Best-effort display name: full name, else the email's local part, else None.

    Never raises; callers degrade to a placeholder.
    """
    session = session or get_db()
    try:
        user = session.get(User, user_id)
    except SQLAlchemyError:
        logger.warning('Name lookup failed for user %s', user_id, exc_info=True)
        return None
    if user is None:
        return None
    if user.full_name:
        return user.full_name
    if user.email:
        return user.email.split('@')[0]
    return None
