from __future__ import annotations
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, BigInteger
from repairdesk.models.user import Base, new_id

class WorkOrder(Base):
    __tablename__ = 'work_orders'
    # Status constants (persisted values shared with the mobile clients)
    STATUS_PENDING = 'Pendiente'
    STATUS_WORKING = 'En Reparación'
    STATUS_FINISHED = 'Terminado'
    ALL_STATUSES = (STATUS_PENDING, STATUS_WORKING, STATUS_FINISHED)
    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    device_model: Mapped[str] = mapped_column(String(120), nullable=False)
    issue_description: Mapped[str] = mapped_column(Text, nullable=False)
    shelf_location: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=STATUS_PENDING, index=True)
    assigned_technician_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    assigned_technician_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_by_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    photo_base64: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Epoch milliseconds
    date_created: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    date_started: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    date_finished: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

# Status flow: Pendiente -> En Reparación -> Terminado; Admin may return either of the latter to Pendiente.
# Claims are guarded by a conditional update on status, see services/orders.py.
