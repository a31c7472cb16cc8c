import uuid

from backend.auth.passwords import generate_token, hash_password, verify_password


def test_hash_password_is_deterministic() -> None:
    assert hash_password('rahasia') == hash_password('rahasia')


def test_hash_password_differs_for_different_inputs() -> None:
    assert hash_password('rahasia') != hash_password('Rahasia')
    assert hash_password('') != hash_password(' ')


def test_hash_password_accepts_empty_and_none() -> None:
    assert hash_password('') == hash_password(None)
    assert len(hash_password('')) == 64


def test_verify_password() -> None:
    stored = hash_password('123456')

    assert verify_password('123456', stored)
    assert not verify_password('654321', stored)
    assert not verify_password('123456', None)


def test_generate_token_is_unique_uuid() -> None:
    tokens = {generate_token() for _ in range(100)}

    assert len(tokens) == 100
    for token in tokens:
        assert uuid.UUID(token).version == 4


def test_numeric_passwords_hash_like_their_text() -> None:
    assert hash_password(123456) == hash_password('123456')
    assert verify_password(123456, hash_password('123456'))
