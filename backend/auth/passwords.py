import hashlib
import hmac
import uuid
from typing import Any


def hash_password(password: Any) -> str:
    text = '' if password is None else str(password)
    return hashlib.sha256(text.encode('utf-8')).hexdigest()


def verify_password(password: Any, password_hash: str | None) -> bool:
    return hmac.compare_digest(hash_password(password), str(password_hash or ''))


def generate_token() -> str:
    return str(uuid.uuid4())
