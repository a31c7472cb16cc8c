"""Create the users/department sheets and the default admin accounts.

Usage:
    python -m backend.seed_accounts

Existing accounts are left untouched. Every created admin gets the default
password and should change it after the first login.
"""
import sys

from backend.auth.passwords import hash_password
from backend.core import config
from backend.database import bootstrap_sheets, engine
from backend.models import sheet
from backend.models.account import ROLE_ADMIN, Account, account_to_row
from backend.models.rows import find_row_index
from backend.storage.tabular import SheetStore

DEFAULT_ADMINS = [
    ('admin', 'Super Admin', config.SUPER_ADMIN_DEPARTMENT),
    ('admin_tjkt', 'Admin TJKT', 'tjkt'),
    ('admin_perhotelan', 'Admin Perhotelan', 'perhotelan'),
    ('admin_boga', 'Admin Tata Boga', 'tata_boga'),
    ('admin_busana', 'Admin Tata Busana', 'tata_busana'),
    ('admin_kecantikan', 'Admin Tata Kecantikan', 'tata_kecantikan'),
]


def seed_admins(store: SheetStore, admins=DEFAULT_ADMINS) -> list[str]:
    """Append missing admin accounts. Returns the identifiers that were created."""
    bootstrap_sheets(store)
    password_hash = hash_password(config.DEFAULT_PASSWORD)
    created = []
    for identifier, name, department in admins:
        if find_row_index(store.get_all_rows(config.USERS_SHEET), identifier) is not None:
            continue
        account = Account(
            identifier=identifier,
            password_hash=password_hash,
            role=ROLE_ADMIN,
            department=department,
            name=name,
        )
        store.append_row(config.USERS_SHEET, account_to_row(account))
        created.append(identifier)
    return created


def main() -> None:
    sheet.Base.metadata.create_all(bind=engine)
    created = seed_admins(SheetStore())
    if created:
        print(f"Created {len(created)} admin account(s): {', '.join(created)}")
    else:
        print("All admin accounts already exist.", file=sys.stderr)


if __name__ == "__main__":
    main()
