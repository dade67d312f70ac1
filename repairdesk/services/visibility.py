from __future__ import annotations
import dataclasses
import logging
from typing import Dict, List, Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from repairdesk import get_db
from repairdesk.constants.roles import ALL_ROLES, ROLE_TECHNICIAN
from repairdesk.errors import Forbidden, PersistenceFailure
from repairdesk.models.work_order import WorkOrder
from repairdesk.services.identity import resolve_full_name
from repairdesk.services.orders import OrderView
from repairdesk.utils.validation import validate_status

logger = logging.getLogger(__name__)


def build_scoped_query(role: str, caller_id: str, status: str):
    """Pick the query a caller may issue for status.

    Admins and the pending pool see every order; technicians only see their own
    Working/Finished orders.
    """
    validate_status(status, WorkOrder.ALL_STATUSES)
    if role not in ALL_ROLES:
        raise Forbidden('Unknown role')
    stmt = select(WorkOrder).where(WorkOrder.status == status)
    if role == ROLE_TECHNICIAN and status != WorkOrder.STATUS_PENDING:
        stmt = stmt.where(WorkOrder.assigned_technician_id == caller_id)
    # id breaks ties between orders created in the same millisecond
    return stmt.order_by(WorkOrder.date_created.desc(), WorkOrder.id.desc())


def enrich_with_technician_names(orders: List[OrderView], session=None) -> List[OrderView]:
    """Attach display names, looking each distinct technician up once.

    A failed lookup leaves the name unset instead of failing the listing.
    """
    ids = []
    for o in orders:
        if o.assigned_technician_id and o.assigned_technician_id not in ids:
            ids.append(o.assigned_technician_id)
    if not ids:
        return orders
    names: Dict[str, Optional[str]] = {tid: resolve_full_name(tid, session=session) for tid in ids}
    return [
        dataclasses.replace(o, assigned_technician_name=names.get(o.assigned_technician_id))
        if o.assigned_technician_id else o
        for o in orders
    ]


def list_orders(role: str, caller_id: str, status: str, limit: Optional[int] = None, offset: int = 0, session=None) -> List[OrderView]:
    session = session or get_db()
    stmt = build_scoped_query(role, caller_id, status)
    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    try:
        rows = session.execute(stmt).scalars().all()
    except SQLAlchemyError as e:
        raise PersistenceFailure(f'Error loading orders: {e}') from e
    orders = [OrderView.from_model(o) for o in rows]
    logger.debug('%s %s listed %d %s orders', role, caller_id, len(orders), status)
    if status == WorkOrder.STATUS_PENDING:
        return orders
    return enrich_with_technician_names(orders, session=session)
