from typing import Any

from backend.core import config
from backend.core.exceptions import ValidationFailure
from backend.storage.tabular import SheetStore


def is_department(name: Any) -> bool:
    """Only configured department sheets hold profiles; ``users`` never does."""
    if not isinstance(name, str) or not name:
        return False
    return name != config.USERS_SHEET and name in config.DEPARTMENTS


def department_exists(store: SheetStore, name: Any) -> bool:
    return is_department(name) and store.sheet_exists(name)


def require_department(store: SheetStore, name: Any, message: str = 'Department sheet not found.') -> str:
    if not department_exists(store, name):
        raise ValidationFailure(message)
    return name
