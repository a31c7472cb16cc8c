from backend.auth.passwords import hash_password
from backend.core import config
from backend.core.exceptions import failure, reports_failure
from backend.models.account import AccountSummary, row_to_account
from backend.models.rows import find_row_index
from backend.models.student_profile import row_to_profile
from backend.services.departments import department_exists
from backend.services.profiles import matches_year
from backend.storage.tabular import SheetStore


def _years(store: SheetStore, department: str) -> set[str]:
    if not department_exists(store, department):
        return set()
    return {profile.year for profile in map(row_to_profile, store.get_all_rows(department)) if profile.year}


@reports_failure('Dashboard error')
def dashboard_data(store: SheetStore, user: AccountSummary) -> dict:
    users = store.get_all_rows(config.USERS_SHEET)
    index = find_row_index(users, user.identifier)
    is_default_password = (
        index is not None
        and row_to_account(users[index]).password_hash == hash_password(config.DEFAULT_PASSWORD)
    )

    return {
        'success': True,
        'data': {
            'user': {
                **user.to_dict(),
                'isDefaultPassword': is_default_password,
            },
            'isAdmin': user.is_admin,
        },
    }


@reports_failure('Statistics error')
def stats(store: SheetStore, filter_year: str | None = None, scope_department: str | None = None) -> dict:
    counts = {}
    total = 0
    for department in config.DEPARTMENTS:
        if scope_department and scope_department not in (config.SUPER_ADMIN_DEPARTMENT, department):
            counts[department] = 0
            continue

        count = 0
        if store.sheet_exists(department):
            for row in store.get_all_rows(department):
                profile = row_to_profile(row)
                if not profile.identifier:
                    continue
                if matches_year(profile.year, filter_year):
                    count += 1

        counts[department] = count
        total += count

    return {'success': True, 'stats': counts, 'total': total}


@reports_failure('Dashboard years error')
def dashboard_years(store: SheetStore) -> dict:
    years = set()
    for department in config.DEPARTMENTS:
        years |= _years(store, department)
    return {'success': True, 'years': sorted(years, reverse=True)}


@reports_failure('Available years error')
def available_years(store: SheetStore, department: str) -> dict:
    if not department_exists(store, department):
        return failure('Department sheet not found.', years=[])
    return {'success': True, 'years': sorted(_years(store, department), reverse=True)}
