from __future__ import annotations
"""Order photo as a tagged union.

Stored records carry two optional columns (``photo_url`` and ``photo_base64``).
Older clients uploaded to the blob store and saved the URL; newer ones inline a
compressed JPEG as base64. When both are populated the inline image wins.
"""
import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union
from repairdesk.errors import ValidationFailure
from repairdesk.utils.validation import require_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoPhoto:
    kind = 'none'


@dataclass(frozen=True)
class PhotoReference:
    url: str
    kind = 'reference'


@dataclass(frozen=True)
class InlinePhoto:
    data: bytes
    kind = 'inline'

    @property
    def encoded(self) -> str:
        return base64.b64encode(self.data).decode('ascii')


Photo = Union[NoPhoto, PhotoReference, InlinePhoto]


def photo_from_columns(photo_url: Optional[str], photo_base64: Optional[str]) -> Photo:
    if photo_base64:
        try:
            # Android's Base64.DEFAULT wraps lines; non-alphabet characters are discarded
            return InlinePhoto(base64.b64decode(photo_base64))
        except (binascii.Error, ValueError):
            logger.warning('Discarding undecodable inline photo')
    if photo_url:
        return PhotoReference(photo_url)
    return NoPhoto()


def photo_to_columns(photo: Photo) -> Tuple[Optional[str], Optional[str]]:
    """Return (photo_url, photo_base64); at most one is populated."""
    if isinstance(photo, InlinePhoto):
        return None, photo.encoded
    if isinstance(photo, PhotoReference):
        return photo.url, None
    return None, None


def photo_json(photo: Photo):
    if isinstance(photo, InlinePhoto):
        return {'kind': photo.kind, 'base64': photo.encoded}
    if isinstance(photo, PhotoReference):
        return {'kind': photo.kind, 'url': photo.url}
    return {'kind': NoPhoto.kind}


def photo_from_payload(data: dict) -> Optional[Photo]:
    """Parse an incoming JSON body; None when the body does not mention a photo."""
    if 'photoBase64' not in data and 'photoUrl' not in data:
        return None
    encoded = data.get('photoBase64')
    url = data.get('photoUrl')
    require_text({'photoBase64': encoded, 'photoUrl': url})
    if encoded:
        try:
            return InlinePhoto(base64.b64decode(encoded))
        except (binascii.Error, ValueError):
            raise ValidationFailure('photoBase64 is not valid base64')
    if url:
        return PhotoReference(url)
    return NoPhoto()


__all__ = ['NoPhoto', 'PhotoReference', 'InlinePhoto', 'Photo', 'photo_from_columns', 'photo_to_columns', 'photo_json', 'photo_from_payload']
