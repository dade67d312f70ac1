from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String
from repairdesk.constants.roles import ACCESS_CONFIG_ID
from repairdesk.models.user import Base


class AccessConfig(Base):
    """Singleton row mapping the two registration codes to roles. Read-only at runtime."""
    __tablename__ = 'access_codes'
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=ACCESS_CONFIG_ID)
    admin_code: Mapped[str] = mapped_column(String(128), nullable=False)
    tech_code: Mapped[str] = mapped_column(String(128), nullable=False)
