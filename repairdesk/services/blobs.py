from __future__ import annotations
"""Local blob store for the legacy image path.

Images land at ``{BLOB_ROOT}/orders/{orderId}/{randomId}.jpg`` and are
addressed as ``{BLOB_BASE_URL}/orders/{orderId}/{randomId}.jpg``.
"""
import logging
import os
from uuid import uuid4
from flask import current_app
from werkzeug.utils import secure_filename
from repairdesk.constants.roles import BLOB_IMAGE_EXT, BLOB_ORDER_PREFIX
from repairdesk.errors import PersistenceFailure, ValidationFailure

logger = logging.getLogger(__name__)


def blob_path(order_id: str, image_id: str) -> str:
    return '/'.join([BLOB_ORDER_PREFIX, secure_filename(order_id), f'{image_id}{BLOB_IMAGE_EXT}'])


def upload_order_image(order_id: str, data: bytes) -> str:
    if not data:
        raise ValidationFailure('image required')
    rel = blob_path(order_id, str(uuid4()))
    root = current_app.config['BLOB_ROOT']
    target = os.path.join(root, *rel.split('/'))
    try:
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, 'wb') as fh:
            fh.write(data)
    except OSError as e:
        raise PersistenceFailure(f'Error uploading image: {e}') from e
    logger.info('Stored image for order %s at %s', order_id, rel)
    return f"{current_app.config['BLOB_BASE_URL'].rstrip('/')}/{rel}"
