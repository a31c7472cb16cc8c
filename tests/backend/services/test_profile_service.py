import base64

from backend.models.account import AccountSummary
from backend.models.student_profile import row_to_profile
from backend.services import profiles

STUDENT = AccountSummary(identifier='00123', role='STUDENT', department='tjkt', name='Budi Santoso')
PNG_DATA_URL = 'data:image/png;base64,' + base64.b64encode(b'\x89PNG-bytes').decode()


def test_get_profile_returns_none_before_any_row_exists(sheet_store, photo_store) -> None:
    result = profiles.get_profile(sheet_store, photo_store, STUDENT)

    assert result == {'success': True, 'profile': None}


def test_save_profile_creates_then_updates_row(sheet_store, photo_store) -> None:
    form = {
        'name': 'budi SANTOSO',
        'address': 'jl. mawar 3',
        'student_phone': '0812',
        'guardian_phone': 81399,
        'year': '2025',
    }

    assert profiles.save_profile(sheet_store, photo_store, STUDENT, form)['success'] is True
    assert profiles.save_profile(sheet_store, photo_store, STUDENT, form)['success'] is True

    rows = sheet_store.get_all_rows('tjkt')
    assert rows == [["'00123", 'Budi Santoso', 'JL. MAWAR 3', "'0812", "'81399", '', '', '2025']]

    profile = profiles.get_profile(sheet_store, photo_store, STUDENT)['profile']
    assert profile['student_phone'] == '0812'
    assert profile['guardian_phone'] == '81399'
    assert profile['photo_url'] is None


def test_save_profile_keeps_year_when_form_leaves_it_blank(sheet_store, photo_store, register_student) -> None:
    register_student(identifier='00123', year=2023)

    profiles.save_profile(sheet_store, photo_store, STUDENT, {'name': 'budi'})

    assert row_to_profile(sheet_store.get_all_rows('tjkt')[0]).year == '2023'


def test_upload_photo_then_save_profile_links_preview(sheet_store, photo_store, register_student) -> None:
    register_student(identifier='00123')

    uploaded = profiles.upload_photo(photo_store, STUDENT, {'file_data': PNG_DATA_URL, 'file_type': 'image/png'})
    assert uploaded['success'] is True

    profiles.save_profile(sheet_store, photo_store, STUDENT, {'name': 'budi', 'photo_id': uploaded['photoId']})

    profile = row_to_profile(sheet_store.get_all_rows('tjkt')[0])
    assert profile.photo_id == uploaded['photoId']
    assert profile.photo_preview == f'=IMAGE("{uploaded["photoUrl"]}")'


def test_upload_photo_rejects_garbage(photo_store) -> None:
    result = profiles.upload_photo(photo_store, STUDENT, {'file_data': '', 'file_type': 'image/png'})

    assert result['success'] is False


def test_get_detail_and_missing_student(sheet_store, photo_store, register_student) -> None:
    register_student(identifier='00123', department='tjkt')

    found = profiles.get_detail(sheet_store, photo_store, '00123', 'tjkt')
    missing = profiles.get_detail(sheet_store, photo_store, '555', 'tjkt')

    assert found['data']['name'] == 'Budi Santoso'
    assert missing == {'success': False, 'error': 'Student not found.', 'notFound': True}


def test_save_detail_updates_existing_row_only(sheet_store, photo_store, register_student) -> None:
    register_student(identifier='00123', department='tjkt')

    missing = profiles.save_detail(
        sheet_store,
        photo_store,
        {'identifier': '555', 'department': 'tjkt', 'name': 'x'},
    )
    saved = profiles.save_detail(
        sheet_store,
        photo_store,
        {
            'identifier': '00123',
            'department': 'tjkt',
            'name': 'budi s',
            'address': 'solo',
            'photo_data': {'data': PNG_DATA_URL, 'mime_type': 'image/png'},
        },
    )

    assert missing['notFound'] is True
    assert saved == {'success': True, 'message': 'Student data updated.'}
    rows = sheet_store.get_all_rows('tjkt')
    assert len(rows) == 1
    profile = row_to_profile(rows[0])
    assert profile.name == 'Budi S'
    assert profile.address == 'SOLO'
    assert photo_store.path_for(profile.photo_id) is not None


def test_save_detail_reports_partial_failure_for_bad_photo(sheet_store, photo_store, register_student) -> None:
    register_student(identifier='00123', department='tjkt')

    result = profiles.save_detail(
        sheet_store,
        photo_store,
        {
            'identifier': '00123',
            'department': 'tjkt',
            'name': 'budi baru',
            'photo_data': {'data': 'R0lGODlh', 'mime_type': 'image/gif'},
        },
    )

    assert result['success'] is False
    assert result['partial'] is True
    assert row_to_profile(sheet_store.get_all_rows('tjkt')[0]).name == 'Budi Baru'


def test_save_detail_requires_keys(sheet_store, photo_store) -> None:
    result = profiles.save_detail(sheet_store, photo_store, {'name': 'x'})

    assert result == {'success': False, 'error': 'Identifier and department are required.'}


def test_list_students_filters_by_year_and_sorts_by_name(sheet_store, photo_store, register_student) -> None:
    register_student(identifier='1', name='zaki', year=2024)
    register_student(identifier='2', name='ani', year=2025)
    register_student(identifier='3', name='Bayu', year=2025)

    everyone = profiles.list_students(sheet_store, photo_store, 'tjkt', profiles.ALL_YEARS)
    recent = profiles.list_students(sheet_store, photo_store, 'tjkt', '2025')

    assert [student['name'] for student in everyone['students']] == ['Ani', 'Bayu', 'Zaki']
    assert [student['identifier'] for student in recent['students']] == ['2', '3']


def test_list_students_unknown_department(sheet_store, photo_store) -> None:
    result = profiles.list_students(sheet_store, photo_store, 'astronomy')

    assert result == {'success': False, 'error': 'Department sheet not found.'}


def test_normalize_department_profiles_counts_changed_rows(sheet_store) -> None:
    sheet_store.append_row('tjkt', ["'1", 'budi', 'jl. mawar', '', '', '', '', '2025'])
    sheet_store.append_row('tjkt', ["'2", 'Ani', 'SOLO', '', '', '', '', '2025'])

    changed = profiles.normalize_department_profiles(sheet_store, 'tjkt')

    assert changed == 1
    assert sheet_store.get_all_rows('tjkt')[0][1:3] == ['Budi', 'JL. MAWAR']


def test_profile_actions_refuse_the_users_sheet(sheet_store, photo_store, register_student) -> None:
    register_student(identifier='00123', department='tjkt')
    before = sheet_store.get_all_rows('users')
    intruder = AccountSummary(identifier='00123', role='STUDENT', department='users')

    saved = profiles.save_profile(sheet_store, photo_store, intruder, {'name': 'x', 'address': 'admin'})
    detail = profiles.save_detail(
        sheet_store,
        photo_store,
        {'identifier': '00123', 'department': 'users', 'address': 'admin'},
    )

    assert saved == {'success': False, 'error': 'Department sheet not found.'}
    assert detail == {'success': False, 'error': 'Department sheet not found.'}
    assert sheet_store.get_all_rows('users') == before


def test_upload_photo_rejects_non_text_payload(photo_store) -> None:
    result = profiles.upload_photo(photo_store, STUDENT, {'file_data': 12345, 'file_type': 7})

    assert result['success'] is False
