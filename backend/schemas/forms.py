from datetime import date
from typing import Any

from pydantic import BaseModel, Field, field_validator

from backend.models.rows import as_text


class NewStudentForm(BaseModel):
    identifier: str = Field(default='', validate_default=True)
    password: str = Field(default='', validate_default=True)
    name: str = ''
    department: str = Field(default='', validate_default=True)
    year: str = ''

    @field_validator('identifier', 'name', 'department', 'year', mode='before')
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return as_text(value)

    @field_validator('password', mode='before')
    @classmethod
    def coerce_password(cls, value: Any) -> str:
        return '' if value is None else str(value)

    @field_validator('identifier')
    @classmethod
    def validate_identifier(cls, value: str) -> str:
        normalized = value.lstrip("'").strip()
        if not normalized:
            raise ValueError('Identifier is required.')
        return normalized

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError('Password is required.')
        return value

    @field_validator('department')
    @classmethod
    def validate_department(cls, value: str) -> str:
        if not value:
            raise ValueError('Department is required.')
        return value

    def internship_year(self) -> str:
        return self.year or str(date.today().year)


class ProfileForm(BaseModel):
    name: str = ''
    address: str = ''
    student_phone: str = ''
    guardian_phone: str = ''
    photo_id: str = ''
    photo_url: str = ''
    year: str = ''

    @field_validator(
        'name',
        'address',
        'student_phone',
        'guardian_phone',
        'photo_id',
        'photo_url',
        'year',
        mode='before',
    )
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return as_text(value)


class PhotoUpload(BaseModel):
    data: str
    mime_type: str = 'image/jpeg'


class StudentDetailForm(ProfileForm):
    identifier: str = Field(default='', validate_default=True)
    department: str = Field(default='', validate_default=True)
    photo_data: PhotoUpload | None = None

    @field_validator('identifier', 'department', mode='before')
    @classmethod
    def coerce_key(cls, value: Any) -> str:
        return as_text(value)

    @field_validator('identifier', 'department')
    @classmethod
    def validate_required(cls, value: str) -> str:
        if not value:
            raise ValueError('Identifier and department are required.')
        return value
