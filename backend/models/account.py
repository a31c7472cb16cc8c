"""Login account records stored in the ``users`` sheet."""

from dataclasses import dataclass
from typing import Any, Sequence

from backend.core import config
from backend.models.rows import cell_text, normalize_identifier, with_text_marker

ACCOUNT_SCHEMA_VERSION = 1
ACCOUNT_HEADER = ['identifier', 'password_hash', 'role', 'department', 'name', 'token']

IDENTIFIER_COLUMN = 0
PASSWORD_HASH_COLUMN = 1
ROLE_COLUMN = 2
DEPARTMENT_COLUMN = 3
NAME_COLUMN = 4
TOKEN_COLUMN = 5

ROLE_ADMIN = 'ADMIN'
ROLE_STUDENT = 'STUDENT'


@dataclass
class Account:
    """Represents one login row."""
    identifier: str
    password_hash: str = ''
    role: str = ROLE_STUDENT
    department: str = ''
    name: str = ''
    token: str = ''

    def summary(self) -> 'AccountSummary':
        return AccountSummary(
            identifier=self.identifier,
            role=self.role,
            department=self.department,
            name=self.name,
        )


@dataclass(frozen=True)
class AccountSummary:
    """The validated caller of a request, passed explicitly into operations."""
    identifier: str
    role: str
    department: str
    name: str = ''

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_super_admin(self) -> bool:
        return self.is_admin and self.department == config.SUPER_ADMIN_DEPARTMENT

    def to_dict(self) -> dict:
        return {
            'identifier': self.identifier,
            'role': self.role,
            'department': self.department,
            'name': self.name,
        }


def row_to_account(row: Sequence[Any]) -> Account:
    return Account(
        identifier=normalize_identifier(cell_text(row, IDENTIFIER_COLUMN)),
        password_hash=cell_text(row, PASSWORD_HASH_COLUMN),
        role=cell_text(row, ROLE_COLUMN),
        department=cell_text(row, DEPARTMENT_COLUMN),
        name=cell_text(row, NAME_COLUMN),
        token=cell_text(row, TOKEN_COLUMN),
    )


def account_to_row(account: Account) -> list[str]:
    return [
        with_text_marker(account.identifier),
        account.password_hash,
        account.role,
        account.department,
        account.name,
        account.token,
    ]
