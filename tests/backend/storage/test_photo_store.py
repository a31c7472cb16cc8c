import base64

import pytest

from backend.core.exceptions import ValidationFailure
from backend.storage.photos import decode_photo_data, is_valid_photo_id


def test_save_writes_file_and_returns_url(photo_store) -> None:
    stored = photo_store.save(b'\xff\xd8jpeg-bytes', 'image/jpeg')

    assert is_valid_photo_id(stored.photo_id)
    assert stored.url == f'http://testserver/photos/{stored.photo_id}'
    assert photo_store.path_for(stored.photo_id).read_bytes() == b'\xff\xd8jpeg-bytes'


def test_save_rejects_unsupported_type(photo_store) -> None:
    with pytest.raises(ValidationFailure):
        photo_store.save(b'gif', 'image/gif')


def test_url_for_ignores_invalid_ids(photo_store) -> None:
    assert photo_store.url_for('') == ''
    assert photo_store.url_for('undefined') == ''
    assert photo_store.path_for('../../etc/passwd') is None


def test_decode_photo_data_strips_data_url_prefix() -> None:
    encoded = base64.b64encode(b'hello').decode()

    assert decode_photo_data(f'data:image/png;base64,{encoded}') == b'hello'
    assert decode_photo_data(encoded) == b'hello'


@pytest.mark.parametrize('file_data', ['', None, 'not base64!!'])
def test_decode_photo_data_rejects_bad_input(file_data) -> None:
    with pytest.raises(ValidationFailure):
        decode_photo_data(file_data)
