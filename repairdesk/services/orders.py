from __future__ import annotations
"""Order lifecycle engine.

Transitions are closed operations (create, claim, finish, return, edit) instead
of arbitrary field patches so the status invariants stay enforceable:

    Pendiente      <=> no technician <=> no date_started
    En Reparación  => technician, date_started, no date_finished
    Terminado      => date_finished

Status-changing writes are a single conditional UPDATE matching only the
statuses the FSM allows as sources, so two technicians racing for the same
pending order produce one winner and one AlreadyClaimed; the loser never
writes. Every operation takes an optional session (defaults to the request's
scoped session) and returns an immutable OrderView snapshot.
"""
import dataclasses
import logging
from dataclasses import dataclass
from typing import Optional
from sqlalchemy import case, select, update
from sqlalchemy.exc import SQLAlchemyError
from repairdesk import get_db
from repairdesk.constants.roles import UNKNOWN_NAME
from repairdesk.errors import AlreadyClaimed, Forbidden, InvalidTransition, OrderNotFound, PersistenceFailure, RepairDeskError
from repairdesk.models.photo import InlinePhoto, NoPhoto, Photo, PhotoReference, photo_from_columns, photo_json, photo_to_columns
from repairdesk.models.work_order import WorkOrder
from repairdesk.services.identity import resolve_full_name
from repairdesk.utils.fsm import TransitionValidator
from repairdesk.utils.validation import is_blank, now_ms, require_non_blank, require_text

logger = logging.getLogger(__name__)

ORDER_FSM = TransitionValidator({
    WorkOrder.STATUS_PENDING: {WorkOrder.STATUS_WORKING},
    WorkOrder.STATUS_WORKING: {WorkOrder.STATUS_FINISHED, WorkOrder.STATUS_PENDING},
    WorkOrder.STATUS_FINISHED: {WorkOrder.STATUS_PENDING},
})

UNCHANGED = object()


@dataclass(frozen=True)
class OrderView:
    id: str
    device_model: str
    issue_description: str
    shelf_location: Optional[str]
    status: str
    assigned_technician_id: Optional[str]
    assigned_technician_name: Optional[str]
    created_by: str
    created_by_name: Optional[str]
    photo: Photo
    date_created: int
    date_started: Optional[int]
    date_finished: Optional[int]

    @classmethod
    def from_model(cls, o: WorkOrder) -> 'OrderView':
        return cls(
            id=o.id,
            device_model=o.device_model,
            issue_description=o.issue_description,
            shelf_location=o.shelf_location,
            status=o.status,
            assigned_technician_id=o.assigned_technician_id,
            assigned_technician_name=o.assigned_technician_name,
            created_by=o.created_by,
            created_by_name=o.created_by_name,
            photo=photo_from_columns(o.photo_url, o.photo_base64),
            date_created=o.date_created,
            date_started=o.date_started,
            date_finished=o.date_finished,
        )

    def to_json(self):
        return {
            'id': self.id,
            'deviceModel': self.device_model,
            'issueDescription': self.issue_description,
            'shelfLocation': self.shelf_location,
            'status': self.status,
            'assignedTechnicianId': self.assigned_technician_id,
            'assignedTechnicianName': self.assigned_technician_name,
            'createdBy': self.created_by,
            'createdByName': self.created_by_name,
            'photo': photo_json(self.photo),
            'dateCreated': self.date_created,
            'dateStarted': self.date_started,
            'dateFinished': self.date_finished,
        }


def _clean_optional(value: Optional[str]) -> Optional[str]:
    return None if is_blank(value) else value.strip()


def _load(session, order_id: str) -> WorkOrder:
    o = session.get(WorkOrder, order_id, populate_existing=True)
    if o is None:
        raise OrderNotFound(order_id)
    return o


def create_order(device_model: str, issue_description: str, shelf_location: Optional[str], created_by: str,
                 created_by_name: Optional[str] = None, photo: Optional[Photo] = None, session=None) -> OrderView:
    require_non_blank({'deviceModel': device_model, 'issueDescription': issue_description})
    require_text({'shelfLocation': shelf_location})
    session = session or get_db()
    photo_url, photo_base64 = photo_to_columns(photo or NoPhoto())
    o = WorkOrder(
        device_model=device_model.strip(),
        issue_description=issue_description.strip(),
        shelf_location=_clean_optional(shelf_location),
        status=WorkOrder.STATUS_PENDING,
        assigned_technician_id=None,
        assigned_technician_name=None,
        created_by=created_by,
        created_by_name=_clean_optional(created_by_name),
        photo_url=photo_url,
        photo_base64=photo_base64,
        date_created=now_ms(),
        date_started=None,
        date_finished=None,
    )
    try:
        session.add(o)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceFailure(f'Error creating order: {e}') from e
    logger.info('Order %s created by %s', o.id, created_by)
    return OrderView.from_model(o)


def get_order(order_id: str, session=None) -> OrderView:
    session = session or get_db()
    try:
        return OrderView.from_model(_load(session, order_id))
    except SQLAlchemyError as e:
        raise PersistenceFailure(f'Error loading order: {e}') from e


def order_detail(order_id: str, session=None) -> OrderView:
    """Single order with the creator's display name resolved (stored name first)."""
    session = session or get_db()
    view = get_order(order_id, session=session)
    if view.created_by_name:
        return view
    name = resolve_full_name(view.created_by, session=session) or UNKNOWN_NAME
    return dataclasses.replace(view, created_by_name=name)


def _guarded_transition(session, order_id: str, target: str, values: dict, on_conflict=None,
                        assigned_to: Optional[str] = None) -> OrderView:
    """Apply values only if the stored status is an allowed source (and, with
    assigned_to, only if the order is assigned to that technician)."""
    allowed = ORDER_FSM.sources(target)
    conditions = [WorkOrder.id == order_id, WorkOrder.status.in_(allowed)]
    if assigned_to is not None:
        conditions.append(WorkOrder.assigned_technician_id == assigned_to)
    try:
        result = session.execute(
            update(WorkOrder)
            .where(*conditions)
            .values(status=target, **values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            row = session.execute(
                select(WorkOrder.status, WorkOrder.assigned_technician_id).where(WorkOrder.id == order_id)
            ).one_or_none()
            session.rollback()
            if row is None:
                raise OrderNotFound(order_id)
            current, assignee = row
            if on_conflict is not None:
                raise on_conflict(order_id)
            ORDER_FSM.assert_can_transition(current, target)
            if assigned_to is not None and assignee != assigned_to:
                raise Forbidden('Order is assigned to another technician')
            raise InvalidTransition(f'Order {order_id} changed concurrently')
        session.commit()
        return OrderView.from_model(_load(session, order_id))
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceFailure(f'Error updating order: {e}') from e


def claim_order(order_id: str, technician_id: str, session=None) -> OrderView:
    """Pendiente -> En Reparación for exactly one technician."""
    session = session or get_db()
    # Resolved before the transaction; a missing name never fails the claim
    tech_name = resolve_full_name(technician_id, session=session) or UNKNOWN_NAME
    now = now_ms()
    try:
        view = _guarded_transition(session, order_id, WorkOrder.STATUS_WORKING, {
            'assigned_technician_id': technician_id,
            'assigned_technician_name': tech_name,
            'date_started': case((WorkOrder.date_created > now, WorkOrder.date_created), else_=now),
            'date_finished': None,
        }, on_conflict=AlreadyClaimed)
    except AlreadyClaimed:
        logger.warning('Technician %s lost claim on order %s', technician_id, order_id)
        raise
    logger.info('Order %s claimed by %s', order_id, technician_id)
    return view


def finish_order(order_id: str, technician_id: Optional[str] = None, session=None) -> OrderView:
    """En Reparación -> Terminado; date_finished never precedes date_started.

    With technician_id the order must still be assigned to that technician when
    the update runs; otherwise Forbidden.
    """
    session = session or get_db()
    now = now_ms()
    view = _guarded_transition(session, order_id, WorkOrder.STATUS_FINISHED, {
        'date_finished': case((WorkOrder.date_started > now, WorkOrder.date_started), else_=now),
    }, assigned_to=technician_id)
    logger.info('Order %s finished', order_id)
    return view

def return_to_pending(order_id: str, session=None) -> OrderView:
    """Back to the claimable pool, clearing assignment and both work dates."""
    session = session or get_db()
    view = _guarded_transition(session, order_id, WorkOrder.STATUS_PENDING, {
        'assigned_technician_id': None,
        'assigned_technician_name': None,
        'date_started': None,
        'date_finished': None,
    })
    logger.info('Order %s returned to pending', order_id)
    return view


def edit_order_fields(order_id: str, device_model=UNCHANGED, issue_description=UNCHANGED, shelf_location=UNCHANGED,
                      photo=UNCHANGED, session=None) -> OrderView:
    """Replace descriptive fields and/or the photo; never touches status, assignment or dates."""
    to_check = {}
    if device_model is not UNCHANGED:
        to_check['deviceModel'] = device_model
    if issue_description is not UNCHANGED:
        to_check['issueDescription'] = issue_description
    require_non_blank(to_check)
    if shelf_location is not UNCHANGED:
        require_text({'shelfLocation': shelf_location})
    session = session or get_db()
    try:
        o = _load(session, order_id)
        if device_model is not UNCHANGED:
            o.device_model = device_model.strip()
        if issue_description is not UNCHANGED:
            o.issue_description = issue_description.strip()
        if shelf_location is not UNCHANGED:
            o.shelf_location = _clean_optional(shelf_location)
        if photo is not UNCHANGED:
            o.photo_url, o.photo_base64 = photo_to_columns(photo or NoPhoto())
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceFailure(f'Error updating order: {e}') from e
    except RepairDeskError:
        session.rollback()
        raise
    logger.info('Order %s fields updated', order_id)
    return OrderView.from_model(o)


def attach_photo(order_id: str, image_bytes: bytes, inline: bool = True, session=None) -> OrderView:
    """Store a photo inline (base64 in the record) or via the blob store as a URL reference."""
    session = session or get_db()
    get_order(order_id, session=session)
    if inline:
        photo = InlinePhoto(image_bytes)
    else:
        from repairdesk.services.blobs import upload_order_image
        photo = PhotoReference(upload_order_image(order_id, image_bytes))
    return edit_order_fields(order_id, photo=photo, session=session)
