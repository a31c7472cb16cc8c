"""Student profile records stored in one sheet per department."""

from dataclasses import dataclass
from typing import Any, Sequence

from backend.models.rows import cell_text, normalize_identifier, strip_text_marker, with_text_marker

PROFILE_SCHEMA_VERSION = 1
PROFILE_HEADER = [
    'identifier',
    'name',
    'address',
    'student_phone',
    'guardian_phone',
    'photo_id',
    'photo_preview',
    'year',
]

IDENTIFIER_COLUMN = 0
NAME_COLUMN = 1
ADDRESS_COLUMN = 2
STUDENT_PHONE_COLUMN = 3
GUARDIAN_PHONE_COLUMN = 4
PHOTO_ID_COLUMN = 5
PHOTO_PREVIEW_COLUMN = 6
YEAR_COLUMN = 7


@dataclass
class StudentProfile:
    """Represents one student's internship profile row."""
    identifier: str
    name: str = ''
    address: str = ''
    student_phone: str = ''
    guardian_phone: str = ''
    photo_id: str = ''
    photo_preview: str = ''
    year: str = ''


def row_to_profile(row: Sequence[Any]) -> StudentProfile:
    return StudentProfile(
        identifier=normalize_identifier(cell_text(row, IDENTIFIER_COLUMN)),
        name=cell_text(row, NAME_COLUMN),
        address=cell_text(row, ADDRESS_COLUMN),
        student_phone=strip_text_marker(cell_text(row, STUDENT_PHONE_COLUMN)),
        guardian_phone=strip_text_marker(cell_text(row, GUARDIAN_PHONE_COLUMN)),
        photo_id=cell_text(row, PHOTO_ID_COLUMN).strip(),
        photo_preview=cell_text(row, PHOTO_PREVIEW_COLUMN),
        year=cell_text(row, YEAR_COLUMN).strip(),
    )


def profile_to_row(profile: StudentProfile) -> list[str]:
    return [
        with_text_marker(profile.identifier),
        profile.name,
        profile.address,
        with_text_marker(profile.student_phone),
        with_text_marker(profile.guardian_phone),
        profile.photo_id,
        profile.photo_preview,
        str(profile.year),
    ]


def photo_preview_formula(url: str) -> str:
    if not url:
        return ''
    return f'=IMAGE("{url}")'
