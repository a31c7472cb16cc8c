"""Student profile reads and writes, for the student and for admins."""

import logging

from backend.core.exceptions import NotFoundError, PartialFailure, ServiceError, reports_failure
from backend.models import student_profile as profile_columns
from backend.models.account import AccountSummary
from backend.models.rows import find_row_index, title_case, upper_case, with_text_marker
from backend.models.student_profile import (
    StudentProfile,
    photo_preview_formula,
    profile_to_row,
    row_to_profile,
)
from backend.schemas.forms import ProfileForm, StudentDetailForm
from backend.services.departments import require_department
from backend.storage.photos import PhotoStore, decode_photo_data
from backend.storage.tabular import SheetStore

logger = logging.getLogger(__name__)

ALL_YEARS = 'All'


def _write_text_fields(store: SheetStore, department: str, index: int, key: str, form: ProfileForm) -> None:
    values = {
        profile_columns.NAME_COLUMN: title_case(form.name),
        profile_columns.ADDRESS_COLUMN: upper_case(form.address),
        profile_columns.STUDENT_PHONE_COLUMN: with_text_marker(form.student_phone),
        profile_columns.GUARDIAN_PHONE_COLUMN: with_text_marker(form.guardian_phone),
    }
    if form.year:
        values[profile_columns.YEAR_COLUMN] = form.year
    for column, value in values.items():
        store.write_cell(department, index, column, value, key=key)


def _write_photo(store: SheetStore, department: str, index: int, key: str, photo_id: str, photo_url: str) -> None:
    store.write_cell(department, index, profile_columns.PHOTO_ID_COLUMN, photo_id, key=key)
    store.write_cell(department, index, profile_columns.PHOTO_PREVIEW_COLUMN, photo_preview_formula(photo_url), key=key)


@reports_failure('Profile error')
def get_profile(store: SheetStore, photos: PhotoStore, user: AccountSummary) -> dict:
    require_department(store, user.department)

    rows = store.get_all_rows(user.department)
    index = find_row_index(rows, user.identifier)
    if index is None:
        return {'success': True, 'profile': None}

    profile = row_to_profile(rows[index])
    return {
        'success': True,
        'profile': {
            'name': profile.name,
            'address': profile.address,
            'student_phone': profile.student_phone,
            'guardian_phone': profile.guardian_phone,
            'photo_id': profile.photo_id,
            'photo_url': photos.url_for(profile.photo_id) or None,
            'year': profile.year,
        },
    }


@reports_failure('Profile save error')
def save_profile(store: SheetStore, photos: PhotoStore, user: AccountSummary, form_data: dict | None) -> dict:
    form = ProfileForm.model_validate(form_data or {})
    department = user.department
    require_department(store, department)

    photo_url = form.photo_url or photos.url_for(form.photo_id)
    rows = store.get_all_rows(department)
    index = find_row_index(rows, user.identifier)

    if index is None:
        profile = StudentProfile(
            identifier=user.identifier,
            name=title_case(form.name),
            address=upper_case(form.address),
            student_phone=form.student_phone,
            guardian_phone=form.guardian_phone,
            photo_id=form.photo_id,
            photo_preview=photo_preview_formula(photo_url) if form.photo_id else '',
            year=form.year,
        )
        store.append_row(department, profile_to_row(profile))
        logger.info('Created profile for %s in %s', user.identifier, department)
    else:
        _write_text_fields(store, department, index, user.identifier, form)
        if form.photo_id:
            _write_photo(store, department, index, user.identifier, form.photo_id, photo_url)

    return {'success': True, 'message': 'Profile saved.'}


@reports_failure('Photo upload error')
def upload_photo(photos: PhotoStore, user: AccountSummary, payload: dict) -> dict:
    data = decode_photo_data(payload.get('file_data'))
    stored = photos.save(data, payload.get('file_type') or 'image/jpeg')
    logger.info('Photo %s uploaded by %s', stored.photo_id, user.identifier)
    return {'success': True, 'photoId': stored.photo_id, 'photoUrl': stored.url}


@reports_failure('Student detail error')
def get_detail(store: SheetStore, photos: PhotoStore, identifier: str, department: str) -> dict:
    require_department(store, department)

    rows = store.get_all_rows(department)
    index = find_row_index(rows, identifier)
    if index is None:
        raise NotFoundError('Student not found.')

    profile = row_to_profile(rows[index])
    return {
        'success': True,
        'data': {
            'identifier': profile.identifier,
            'name': profile.name,
            'address': profile.address,
            'student_phone': profile.student_phone,
            'guardian_phone': profile.guardian_phone,
            'photo_id': profile.photo_id,
            'photo_url': photos.url_for(profile.photo_id),
            'year': profile.year,
        },
    }


@reports_failure('Student detail save error')
def save_detail(store: SheetStore, photos: PhotoStore, form_data: dict) -> dict:
    form = StudentDetailForm.model_validate(form_data)
    require_department(store, form.department)

    rows = store.get_all_rows(form.department)
    index = find_row_index(rows, form.identifier)
    if index is None:
        raise NotFoundError('Student data not found.')

    _write_text_fields(store, form.department, index, form.identifier, form)

    if form.photo_data is not None and form.photo_data.data:
        try:
            stored = photos.save(decode_photo_data(form.photo_data.data), form.photo_data.mime_type)
            _write_photo(store, form.department, index, form.identifier, stored.photo_id, stored.url)
        except (ServiceError, OSError) as exc:
            message = exc.message if isinstance(exc, ServiceError) else str(exc)
            raise PartialFailure(f'Student data saved, but the photo upload failed: {message}') from exc
    elif form.photo_id:
        _write_photo(
            store,
            form.department,
            index,
            form.identifier,
            form.photo_id,
            form.photo_url or photos.url_for(form.photo_id),
        )

    logger.info('Admin updated profile %s in %s', form.identifier, form.department)
    return {'success': True, 'message': 'Student data updated.'}


def matches_year(year: str, filter_year: str | None) -> bool:
    if not filter_year or filter_year == ALL_YEARS:
        return True
    return str(year) == str(filter_year)


@reports_failure('Student list error')
def list_students(store: SheetStore, photos: PhotoStore, department: str, filter_year: str | None = None) -> dict:
    require_department(store, department)

    students = []
    for row in store.get_display_values(department):
        profile = row_to_profile(row)
        if not profile.identifier or not matches_year(profile.year, filter_year):
            continue
        students.append(
            {
                'identifier': profile.identifier,
                'name': profile.name,
                'address': profile.address,
                'student_phone': profile.student_phone,
                'guardian_phone': profile.guardian_phone,
                'photo_url': photos.url_for(profile.photo_id),
                'year': profile.year,
            }
        )

    students.sort(key=lambda student: student['name'].lower())
    return {'success': True, 'students': students}


def normalize_department_profiles(store: SheetStore, department: str) -> int:
    """Re-apply name/address formatting to every row. Returns rows changed."""
    changed = 0
    for index, row in enumerate(store.get_all_rows(department)):
        profile = row_to_profile(row)
        name, address = title_case(profile.name), upper_case(profile.address)
        if name != profile.name:
            store.write_cell(department, index, profile_columns.NAME_COLUMN, name, key=profile.identifier or None)
        if address != profile.address:
            store.write_cell(department, index, profile_columns.ADDRESS_COLUMN, address, key=profile.identifier or None)
        if name != profile.name or address != profile.address:
            changed += 1
    return changed
