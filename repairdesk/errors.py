from __future__ import annotations
"""Error taxonomy for the repair desk.

Every error carries the HTTP status and title the application error handler
renders, so routes and services simply raise and let the handler shape the
response:

    {"error": {"status": 409, "title": "Already Claimed", "detail": "..."}}
"""
from typing import Optional


def error_payload(status: int, title: str, detail) -> dict:
    return {'error': {'status': status, 'title': title, 'detail': detail}}


class RepairDeskError(Exception):
    status_code = 500
    title = 'Internal Server Error'

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.title)
        self.detail = detail or self.title

    def to_payload(self):
        return error_payload(self.status_code, self.title, self.detail)


class ValidationFailure(RepairDeskError):
    status_code = 400
    title = 'Bad Request'


class InvalidAccessCode(ValidationFailure):
    title = 'Invalid Access Code'

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or 'Invalid access code')


class AuthenticationFailure(RepairDeskError):
    status_code = 401
    title = 'Unauthorized'


class Forbidden(RepairDeskError):
    status_code = 403
    title = 'Forbidden'


class NotFound(RepairDeskError):
    status_code = 404
    title = 'Not Found'


class OrderNotFound(NotFound):
    def __init__(self, order_id: str):
        super().__init__(f'Order {order_id} not found')
        self.order_id = order_id


class AlreadyClaimed(RepairDeskError):
    status_code = 409
    title = 'Already Claimed'

    def __init__(self, order_id: str):
        super().__init__('This order was already taken by another technician')
        self.order_id = order_id


class InvalidTransition(RepairDeskError):
    status_code = 409
    title = 'Invalid Transition'


class PersistenceFailure(RepairDeskError):
    status_code = 503
    title = 'Persistence Failure'


__all__ = [
    'RepairDeskError', 'ValidationFailure', 'InvalidAccessCode', 'AuthenticationFailure', 'Forbidden',
    'NotFound', 'OrderNotFound', 'AlreadyClaimed', 'InvalidTransition', 'PersistenceFailure',
]
