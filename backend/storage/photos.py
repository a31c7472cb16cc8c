"""Photo blob storage on the local filesystem."""

import base64
import binascii
import logging
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from backend.core import config
from backend.core.exceptions import ValidationFailure

logger = logging.getLogger(__name__)

MIME_EXTENSIONS = {
    'image/jpeg': '.jpg',
    'image/jpg': '.jpg',
    'image/png': '.png',
    'image/webp': '.webp',
}
MEDIA_TYPES = {'.jpg': 'image/jpeg', '.png': 'image/png', '.webp': 'image/webp'}
_PHOTO_ID_PATTERN = re.compile(r'^[0-9a-f]{32}$')


@dataclass(frozen=True)
class StoredPhoto:
    photo_id: str
    url: str


def decode_photo_data(file_data: Any) -> bytes:
    if not file_data:
        raise ValidationFailure('Photo data is empty.')
    file_data = str(file_data)
    if 'base64,' in file_data:
        file_data = file_data.split('base64,', 1)[1]
    try:
        return base64.b64decode(file_data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationFailure('Photo data is not valid base64.') from exc


def is_valid_photo_id(photo_id: str | None) -> bool:
    return bool(photo_id) and _PHOTO_ID_PATTERN.match(photo_id) is not None


class PhotoStore:
    def __init__(self, root: str | Path | None = None, base_url: str | None = None):
        self.root = Path(root or config.PHOTO_DIR)
        self.base_url = (base_url or config.PHOTO_BASE_URL).rstrip('/')

    def save(self, data: bytes, mime_type: str = 'image/jpeg') -> StoredPhoto:
        extension = MIME_EXTENSIONS.get(str(mime_type or '').strip().lower())
        if extension is None:
            raise ValidationFailure(f'Unsupported photo type: {mime_type}.')
        if not data:
            raise ValidationFailure('Photo data is empty.')
        if len(data) > config.PHOTO_MAX_BYTES:
            raise ValidationFailure('Photo is too large.')

        photo_id = uuid.uuid4().hex
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / f'{photo_id}{extension}').write_bytes(data)
        logger.info('Stored photo %s (%d bytes)', photo_id, len(data))
        return StoredPhoto(photo_id=photo_id, url=self.url_for(photo_id))

    def url_for(self, photo_id: str | None) -> str:
        if not is_valid_photo_id(photo_id):
            return ''
        return f'{self.base_url}/{photo_id}'

    def path_for(self, photo_id: str) -> Path | None:
        if not is_valid_photo_id(photo_id):
            return None
        for extension in MEDIA_TYPES:
            candidate = self.root / f'{photo_id}{extension}'
            if candidate.is_file():
                return candidate
        return None
