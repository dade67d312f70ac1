from __future__ import annotations
import logging
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from repairdesk import get_db
from repairdesk.constants.roles import ACCESS_CONFIG_ID, ROLE_ADMIN, ROLE_TECHNICIAN
from repairdesk.errors import InvalidAccessCode, PersistenceFailure
from repairdesk.models.access_config import AccessConfig

logger = logging.getLogger(__name__)


def validate_access_code(code: str, session=None) -> str:
    """Return the role unlocked by code: admin code first, then technician code.

    Raises InvalidAccessCode when nothing matches, including the empty string
    and a missing configuration row.
    """
    session = session or get_db()
    try:
        cfg = session.execute(select(AccessConfig).where(AccessConfig.id == ACCESS_CONFIG_ID)).scalar_one_or_none()
    except SQLAlchemyError as e:
        raise PersistenceFailure(f'Error validating access code: {e}') from e
    if cfg is None:
        logger.warning('Access code configuration %s missing', ACCESS_CONFIG_ID)
        raise InvalidAccessCode()
    if not code:
        raise InvalidAccessCode()
    if code == cfg.admin_code:
        return ROLE_ADMIN
    if code == cfg.tech_code:
        return ROLE_TECHNICIAN
    raise InvalidAccessCode()


def ensure_access_codes(admin_code: str, tech_code: str, session=None) -> AccessConfig:
    """Idempotently write the singleton configuration row (seed scripts and tests)."""
    session = session or get_db()
    cfg = session.get(AccessConfig, ACCESS_CONFIG_ID)
    if cfg is None:
        cfg = AccessConfig(id=ACCESS_CONFIG_ID, admin_code=admin_code, tech_code=tech_code)
        session.add(cfg)
    else:
        cfg.admin_code = admin_code
        cfg.tech_code = tech_code
    session.commit()
    return cfg
