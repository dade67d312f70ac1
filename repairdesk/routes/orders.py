from __future__ import annotations
import base64
import binascii
from flask import Blueprint, request
from repairdesk.config.pagination import normalize_pagination, pagination_meta
from repairdesk.constants.roles import ROLE_ADMIN, ROLE_TECHNICIAN
from repairdesk.decorators.auth import require_roles
from repairdesk.errors import ValidationFailure
from repairdesk.models.photo import photo_from_payload
from repairdesk.services import orders as engine
from repairdesk.services.identity import resolve_full_name
from repairdesk.services.policy import current_role, current_user_id, is_technician
from repairdesk.services.visibility import list_orders
from repairdesk.utils.validation import parse_status, require_text

orders_bp = Blueprint('orders', __name__)

EDITABLE_FIELDS = {
    'deviceModel': 'device_model',
    'issueDescription': 'issue_description',
    'shelfLocation': 'shelf_location',
}


@orders_bp.get('')
@require_roles()
def list_by_status():
    status = parse_status(request.args.get('status'))
    limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    rows = list_orders(current_role(), current_user_id(), status, limit=limit, offset=offset)
    return {
        'data': [o.to_json() for o in rows],
        'pagination': pagination_meta(len(rows), limit, offset),
    }


@orders_bp.get('/<order_id>')
@require_roles()
def get_order(order_id: str):
    return engine.order_detail(order_id).to_json()


@orders_bp.post('')
@require_roles(ROLE_ADMIN)
def create_order():
    data = request.json or {}
    user_id = current_user_id()
    view = engine.create_order(
        device_model=data.get('deviceModel'),
        issue_description=data.get('issueDescription'),
        shelf_location=data.get('shelfLocation'),
        created_by=user_id,
        created_by_name=resolve_full_name(user_id),
        photo=photo_from_payload(data),
    )
    return view.to_json(), 201


@orders_bp.patch('/<order_id>')
@require_roles(ROLE_ADMIN)
def edit_order(order_id: str):
    data = request.json or {}
    unknown = set(data) - set(EDITABLE_FIELDS) - {'photoUrl', 'photoBase64'}
    if unknown:
        raise ValidationFailure(f'fields not editable: {sorted(unknown)}')
    kwargs = {EDITABLE_FIELDS[k]: data[k] for k in EDITABLE_FIELDS if k in data}
    photo = photo_from_payload(data)
    if photo is not None:
        kwargs['photo'] = photo
    return engine.edit_order_fields(order_id, **kwargs).to_json()


@orders_bp.post('/<order_id>/claim')
@require_roles(ROLE_TECHNICIAN)
def claim(order_id: str):
    return engine.claim_order(order_id, current_user_id()).to_json()


@orders_bp.post('/<order_id>/finish')
@require_roles(ROLE_TECHNICIAN, ROLE_ADMIN)
def finish(order_id: str):
    # Technicians may only finish their own assignment; admins finish any
    technician_id = current_user_id() if is_technician() else None
    return engine.finish_order(order_id, technician_id=technician_id).to_json()


@orders_bp.post('/<order_id>/return')
@require_roles(ROLE_ADMIN)
def return_to_pending(order_id: str):
    return engine.return_to_pending(order_id).to_json()


@orders_bp.post('/<order_id>/photo')
@require_roles(ROLE_ADMIN)
def upload_photo(order_id: str):
    """Accept multipart `image` or JSON `{"imageBase64": ...}`; `inline=false` stores via the blob store."""
    inline = request.args.get('inline', 'true').lower() not in ('0', 'false', 'no')
    upload = request.files.get('image')
    if upload is not None:
        data = upload.read()
    else:
        encoded = (request.get_json(silent=True) or {}).get('imageBase64')
        if not encoded:
            raise ValidationFailure('image required')
        require_text({'imageBase64': encoded})
        try:
            data = base64.b64decode(encoded)
        except (binascii.Error, ValueError):
            raise ValidationFailure('imageBase64 is not valid base64')
    if not data:
        raise ValidationFailure('image required')
    return engine.attach_photo(order_id, data, inline=inline).to_json()
