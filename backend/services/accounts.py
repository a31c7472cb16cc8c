"""Login account management and the account + profile dual writes."""

import logging
from datetime import date

from sqlalchemy.exc import SQLAlchemyError

from backend.auth.passwords import hash_password
from backend.core import config
from backend.core.exceptions import (
    NotFoundError,
    PartialFailure,
    ServiceError,
    ValidationFailure,
    reports_failure,
)
from backend.core.locking import write_lock
from backend.models import account as account_columns
from backend.models.account import ROLE_STUDENT, Account, AccountSummary, account_to_row, row_to_account
from backend.models.rows import as_text, find_row_index, normalize_identifier, title_case, with_text_marker
from backend.models.student_profile import StudentProfile, profile_to_row
from backend.schemas.forms import NewStudentForm
from backend.services.departments import department_exists, require_department
from backend.storage.tabular import SheetStore

logger = logging.getLogger(__name__)

DUPLICATE_IDENTIFIER = 'This identifier is already registered. Please log in.'


def provision_student(store: SheetStore, form: NewStudentForm) -> None:
    """Append the login row and the profile row for a new student.

    Callers must hold the write lock. The two appends are not atomic: when the
    profile append fails the login row stays and ``PartialFailure`` is raised.
    """
    require_department(store, form.department, 'Department not found.')

    users = store.get_all_rows(config.USERS_SHEET)
    if find_row_index(users, form.identifier) is not None:
        raise ValidationFailure(DUPLICATE_IDENTIFIER)

    name = title_case(form.name)
    store.append_row(
        config.USERS_SHEET,
        account_to_row(
            Account(
                identifier=form.identifier,
                password_hash=hash_password(form.password),
                role=ROLE_STUDENT,
                department=form.department,
                name=name,
                token='',
            )
        ),
    )

    profile = StudentProfile(identifier=form.identifier, name=name, year=form.internship_year())
    try:
        store.append_row(form.department, profile_to_row(profile))
    except (SQLAlchemyError, ServiceError) as exc:
        logger.exception('Profile row for %s could not be created in %s', form.identifier, form.department)
        raise PartialFailure(
            f'Login account created, but the profile in {form.department} could not be saved: {exc}'
        ) from exc

    logger.info('Provisioned student %s in %s', form.identifier, form.department)


@reports_failure('Create account error')
def create_account(store: SheetStore, form_data: dict) -> dict:
    form = NewStudentForm.model_validate(form_data)
    with write_lock(config.LOCK_TIMEOUT_SECONDS):
        provision_student(store, form)
    return {'success': True, 'message': 'Account created.'}


@reports_failure('List accounts error')
def list_accounts(store: SheetStore, scope_department: str) -> dict:
    accounts = []
    for row in store.get_all_rows(config.USERS_SHEET):
        account = row_to_account(row)
        if not account.identifier:
            continue
        if scope_department == config.SUPER_ADMIN_DEPARTMENT or account.department == scope_department:
            accounts.append(
                {
                    'identifier': account.identifier,
                    'role': account.role,
                    'department': account.department,
                    'name': account.name,
                }
            )
    accounts.reverse()
    return {'success': True, 'users': accounts}


def _visible(account: Account, scope_department: str) -> bool:
    return scope_department == config.SUPER_ADMIN_DEPARTMENT or account.department == scope_department


@reports_failure('Reset password error')
def reset_password(
    store: SheetStore,
    identifier: str,
    scope_department: str = config.SUPER_ADMIN_DEPARTMENT,
) -> dict:
    users = store.get_all_rows(config.USERS_SHEET)
    index = find_row_index(users, identifier)
    if index is None or not _visible(row_to_account(users[index]), scope_department):
        raise NotFoundError('User not found.')

    store.write_cell(
        config.USERS_SHEET,
        index,
        account_columns.PASSWORD_HASH_COLUMN,
        hash_password(config.DEFAULT_PASSWORD),
        key=identifier,
    )
    logger.info('Password reset for %s', normalize_identifier(identifier))
    return {'success': True, 'message': f'Password reset to {config.DEFAULT_PASSWORD}.'}


@reports_failure('Delete account error')
def delete_account(
    store: SheetStore,
    identifier: str,
    department: str,
    scope_department: str = config.SUPER_ADMIN_DEPARTMENT,
) -> dict:
    target = normalize_identifier(identifier)
    if not target:
        raise ValidationFailure('Identifier is required.')

    with write_lock(config.LOCK_TIMEOUT_SECONDS):
        profile_removed = False
        if department_exists(store, department):
            index = find_row_index(store.get_all_rows(department), target)
            if index is not None:
                store.delete_row(department, index, key=target)
                profile_removed = True

        account_removed = False
        users = store.get_all_rows(config.USERS_SHEET)
        index = find_row_index(users, target)
        if index is not None and _visible(row_to_account(users[index]), scope_department):
            store.delete_row(config.USERS_SHEET, index, key=target)
            account_removed = True

    if not profile_removed and not account_removed:
        raise NotFoundError('Student not found.')

    logger.info(
        'Deleted student %s (profile removed: %s, account removed: %s)',
        target,
        profile_removed,
        account_removed,
    )
    return {
        'success': True,
        'message': 'Student data permanently deleted.',
        'profileRemoved': profile_removed,
        'accountRemoved': account_removed,
    }


def _move_profile(store: SheetStore, account: Account, old_department: str, new_department: str) -> bool:
    """Move the profile row. Returns True when a missing row had to be recreated.

    A profile already present in the new department is kept as is, so a
    transfer never leaves two rows for one student.
    """
    already_moved = find_row_index(store.get_all_rows(new_department), account.identifier) is not None

    if department_exists(store, old_department):
        old_rows = store.get_all_rows(old_department)
        index = find_row_index(old_rows, account.identifier)
        if index is not None:
            if not already_moved:
                store.append_row(new_department, old_rows[index])
            store.delete_row(old_department, index, key=account.identifier)
            return False

    if already_moved:
        logger.info('Profile for %s is already in %s', account.identifier, new_department)
        return False

    repaired = StudentProfile(
        identifier=account.identifier,
        name=account.name,
        year=str(date.today().year),
    )
    store.append_row(new_department, profile_to_row(repaired))
    logger.warning(
        'No profile for %s in %s; created a new one in %s',
        account.identifier,
        old_department,
        new_department,
    )
    return True


@reports_failure('Transfer error')
def transfer_department(store: SheetStore, identifier: str, old_department: str, new_department: str) -> dict:
    new_department = as_text(new_department)
    old_department = as_text(old_department)
    require_department(store, new_department, 'New department not found.')
    if new_department == old_department:
        raise ValidationFailure('The student is already in that department.')

    with write_lock(config.LOCK_TIMEOUT_SECONDS):
        users = store.get_all_rows(config.USERS_SHEET)
        index = find_row_index(users, identifier)
        if index is None:
            raise NotFoundError('User not found.')
        account = row_to_account(users[index])

        store.write_cell(
            config.USERS_SHEET,
            index,
            account_columns.DEPARTMENT_COLUMN,
            new_department,
            key=account.identifier,
        )

        try:
            repaired = _move_profile(store, account, old_department, new_department)
        except (SQLAlchemyError, ServiceError) as exc:
            logger.exception('Profile move for %s failed after the account was updated', account.identifier)
            raise PartialFailure(
                f'Account moved to {new_department}, but the profile row could not be moved: {exc}'
            ) from exc

    logger.info('Moved %s from %s to %s', account.identifier, old_department, new_department)
    return {
        'success': True,
        'message': f'Moved to {new_department.upper()}.',
        'profileRepaired': repaired,
    }


@reports_failure('Change password error')
def change_password(store: SheetStore, user: AccountSummary, new_password: str) -> dict:
    new_password = '' if new_password is None else str(new_password)
    if not new_password:
        raise ValidationFailure('New password is required.')

    users = store.get_all_rows(config.USERS_SHEET)
    index = find_row_index(users, user.identifier)
    if index is None:
        raise NotFoundError('User not found in the database.')

    store.write_cell(
        config.USERS_SHEET,
        index,
        account_columns.PASSWORD_HASH_COLUMN,
        hash_password(new_password),
        key=user.identifier,
    )
    return {'success': True}


@reports_failure('Admin profile update error')
def update_admin_credentials(
    store: SheetStore,
    user: AccountSummary,
    new_username: str | None,
    new_password: str | None,
) -> dict:
    new_username = normalize_identifier(new_username)
    new_password = '' if new_password is None else str(new_password)

    with write_lock(config.ADMIN_LOCK_TIMEOUT_SECONDS):
        users = store.get_all_rows(config.USERS_SHEET)

        if new_username and new_username != user.identifier:
            if find_row_index(users, new_username) is not None:
                raise ValidationFailure(f'Username "{new_username}" is already in use.')

        index = find_row_index(users, user.identifier)
        if index is None:
            raise NotFoundError('Admin account not found.')

        # Password first: the rename changes the key the row is found by.
        if new_password:
            store.write_cell(
                config.USERS_SHEET,
                index,
                account_columns.PASSWORD_HASH_COLUMN,
                hash_password(new_password),
                key=user.identifier,
            )
        if new_username:
            store.write_cell(
                config.USERS_SHEET,
                index,
                account_columns.IDENTIFIER_COLUMN,
                with_text_marker(new_username),
                key=user.identifier,
            )

    logger.info('Admin %s updated own credentials', user.identifier)
    return {'success': True, 'message': 'Admin profile updated. Please log in again.'}
