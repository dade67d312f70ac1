from __future__ import annotations
from uuid import uuid4
from sqlalchemy.orm import declarative_base, Mapped, mapped_column
from sqlalchemy import String

Base = declarative_base()


def new_id() -> str:
    return uuid4().hex


class User(Base):
    __tablename__ = 'users'
    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    dni: Mapped[str] = mapped_column(String(32), nullable=False, default='')
    email: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(80), nullable=False, default='')
    last_name: Mapped[str] = mapped_column(String(80), nullable=False, default='')
    role: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False, default='')

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def set_password(self, raw: str):
        from werkzeug.security import generate_password_hash
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        from werkzeug.security import check_password_hash
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, raw)

    def to_json(self):
        return {
            'id': self.id,
            'dni': self.dni,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'fullName': self.full_name,
            'role': self.role,
        }
