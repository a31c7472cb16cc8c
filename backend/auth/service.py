import logging

from backend.auth.passwords import generate_token, verify_password
from backend.core import config
from backend.core.exceptions import failure, reports_failure
from backend.core.locking import write_lock
from backend.models.account import TOKEN_COLUMN, AccountSummary, row_to_account
from backend.models.rows import normalize_identifier
from backend.schemas.forms import NewStudentForm
from backend.services.accounts import provision_student
from backend.storage.tabular import SheetStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = 'Identifier or password incorrect.'


@reports_failure('Login error')
def login(store: SheetStore, identifier: str | None, password: str | None) -> dict:
    target = normalize_identifier(identifier)
    if not target:
        return failure(INVALID_CREDENTIALS)

    for index, row in enumerate(store.get_all_rows(config.USERS_SHEET)):
        account = row_to_account(row)
        if account.identifier != target or not verify_password(password, account.password_hash):
            continue

        # One token slot per account: a new login ends any previous session.
        token = generate_token()
        store.write_cell(config.USERS_SHEET, index, TOKEN_COLUMN, token, key=account.identifier)
        logger.info('Login succeeded for %s', account.identifier)
        return {
            'success': True,
            'token': token,
            'role': account.role,
            'department': account.department,
        }

    logger.info('Login failed for %s', target)
    return failure(INVALID_CREDENTIALS)


def validate_token(store: SheetStore, token: str | None) -> AccountSummary | None:
    if not token or not store.sheet_exists(config.USERS_SHEET):
        return None

    token = str(token)
    for row in store.get_all_rows(config.USERS_SHEET):
        account = row_to_account(row)
        if account.token and account.token == token:
            return account.summary()
    return None


@reports_failure('Register error')
def register(store: SheetStore, form_data: dict) -> dict:
    form = NewStudentForm.model_validate(form_data)
    with write_lock(config.LOCK_TIMEOUT_SECONDS):
        provision_student(store, form)
    logger.info('Self-registration for %s', form.identifier)
    return {'success': True, 'message': 'Registration successful. Please log in.'}
