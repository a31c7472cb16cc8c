from backend.models.account import (
    ACCOUNT_HEADER,
    ACCOUNT_SCHEMA_VERSION,
    ROLE_ADMIN,
    Account,
    account_to_row,
    row_to_account,
)
from backend.models.rows import find_row_index, title_case, upper_case, with_text_marker
from backend.models.student_profile import (
    PROFILE_HEADER,
    PROFILE_SCHEMA_VERSION,
    StudentProfile,
    photo_preview_formula,
    profile_to_row,
    row_to_profile,
)


def test_row_to_profile_fills_missing_cells_with_empty_strings() -> None:
    profile = row_to_profile(["'00123", 'Budi', None])

    assert profile == StudentProfile(identifier='00123', name='Budi')


def test_row_to_profile_coerces_numeric_identifier_and_year() -> None:
    profile = row_to_profile([123, 'Ani', 'JL. MAWAR', "'0812", "'0813", 'abc', '', 2025.0])

    assert profile.identifier == '123'
    assert profile.year == '2025'
    assert profile.student_phone == '0812'
    assert profile.guardian_phone == '0813'


def test_profile_to_row_marks_identifier_and_phones() -> None:
    row = profile_to_row(
        StudentProfile(identifier='00123', name='Budi', student_phone='0812', guardian_phone='', year='2025')
    )

    assert row == ["'00123", 'Budi', '', "'0812", '', '', '', '2025']


def test_account_row_keeps_identifier_as_text() -> None:
    row = account_to_row(Account(identifier='007', password_hash='h', role=ROLE_ADMIN, department='-', name='Bond'))

    assert row == ["'007", 'h', 'ADMIN', '-', 'Bond', '']
    assert row_to_account(row).identifier == '007'


def test_find_row_index_compares_marker_stripped_trimmed_identifiers() -> None:
    rows = [["'00999"], ["  '00123 "], ['00123']]

    assert find_row_index(rows, '00123') == 1
    assert find_row_index(rows, "'00999") == 0
    assert find_row_index(rows, '123') is None
    assert find_row_index(rows, '   ') is None


def test_with_text_marker_is_idempotent() -> None:
    assert with_text_marker('0812') == "'0812"
    assert with_text_marker("'0812") == "'0812"
    assert with_text_marker('') == ''


def test_title_case_and_upper_case() -> None:
    assert title_case('budi SANTOSO') == 'Budi Santoso'
    assert title_case('siti nur-aini') == 'Siti Nur-Aini'
    assert title_case(None) == ''
    assert upper_case('jl. mawar no. 3') == 'JL. MAWAR NO. 3'


def test_photo_preview_formula() -> None:
    assert photo_preview_formula('http://x/1') == '=IMAGE("http://x/1")'
    assert photo_preview_formula('') == ''


def test_row_layouts_match_headers() -> None:
    assert ACCOUNT_SCHEMA_VERSION == 1
    assert PROFILE_SCHEMA_VERSION == 1
    assert len(account_to_row(Account(identifier='x'))) == len(ACCOUNT_HEADER)
    assert len(profile_to_row(StudentProfile(identifier='x'))) == len(PROFILE_HEADER)
