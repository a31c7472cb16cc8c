"""Name-addressed two-dimensional sheets on top of SQLAlchemy.

Rows are addressed by their 0-based position among a sheet's data rows (the
header is stored separately and never returned). Positions are recomputed on
every call, so a position is only meaningful until the next append/delete.
Writes and deletes that pass the row's identifier as ``key`` re-resolve the
row inside their own session when the position has gone stale.
"""

import logging
from typing import Any, Sequence

from sqlalchemy.orm import Session, sessionmaker

from backend.core.exceptions import SheetNotFoundError, StoreError
from backend.database import SessionLocal
from backend.models.rows import TEXT_MARKER, normalize_identifier
from backend.models.sheet import Sheet, SheetRow

logger = logging.getLogger(__name__)

FORMULA_PREFIX = '='


def display_value(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value)
    if text.startswith(FORMULA_PREFIX):
        return ''
    if text.startswith(TEXT_MARKER):
        return text[len(TEXT_MARKER):]
    return text


class SheetStore:
    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory

    def sheet_exists(self, name: str) -> bool:
        if not name:
            return False
        with self._session_factory() as db:
            return db.get(Sheet, name) is not None

    def create_sheet(self, name: str, header: Sequence[str]) -> bool:
        """Create ``name`` if missing. Returns True when a sheet was created."""
        with self._session_factory() as db:
            if db.get(Sheet, name) is not None:
                return False
            db.add(Sheet(name=name, header=list(header)))
            db.commit()
        logger.info('Created sheet %s', name)
        return True

    def get_header(self, name: str) -> list[str]:
        with self._session_factory() as db:
            return list(self._require_sheet(db, name).header or [])

    def get_all_rows(self, name: str) -> list[list[Any]]:
        with self._session_factory() as db:
            self._require_sheet(db, name)
            return [list(row.cells or []) for row in self._ordered_rows(db, name)]

    def get_display_values(self, name: str) -> list[list[str]]:
        return [[display_value(value) for value in row] for row in self.get_all_rows(name)]

    def write_cell(self, name: str, row_index: int, column_index: int, value: Any, key: Any = None) -> None:
        if column_index < 0:
            raise StoreError(f'Invalid column {column_index} for sheet {name}.')
        with self._session_factory() as db:
            row = self._row_at(db, name, row_index, key)
            cells = list(row.cells or [])
            if column_index >= len(cells):
                cells.extend([''] * (column_index + 1 - len(cells)))
            cells[column_index] = value
            row.cells = cells
            db.commit()

    def append_row(self, name: str, values: Sequence[Any]) -> int:
        """Append a row and return its position."""
        with self._session_factory() as db:
            self._require_sheet(db, name)
            db.add(SheetRow(sheet_name=name, cells=list(values)))
            db.commit()
            return db.query(SheetRow).filter(SheetRow.sheet_name == name).count() - 1

    def delete_row(self, name: str, row_index: int, key: Any = None) -> None:
        with self._session_factory() as db:
            row = self._row_at(db, name, row_index, key)
            db.delete(row)
            db.commit()

    def _require_sheet(self, db: Session, name: str) -> Sheet:
        sheet = db.get(Sheet, name) if name else None
        if sheet is None:
            raise SheetNotFoundError(f'Sheet "{name}" not found.')
        return sheet

    def _ordered_rows(self, db: Session, name: str):
        return db.query(SheetRow).filter(SheetRow.sheet_name == name).order_by(SheetRow.id.asc())

    def _row_at(self, db: Session, name: str, row_index: int, key: Any = None) -> SheetRow:
        self._require_sheet(db, name)
        if row_index < 0:
            raise StoreError(f'Row {row_index} does not exist in sheet {name}.')
        row = self._ordered_rows(db, name).offset(row_index).first()
        if key is None:
            if row is None:
                raise StoreError(f'Row {row_index} does not exist in sheet {name}.')
            return row

        target = normalize_identifier(key)
        if row is not None and _row_key(row) == target:
            return row
        # The sheet shifted since the caller read it.
        for candidate in self._ordered_rows(db, name):
            if _row_key(candidate) == target:
                logger.info('Row for %s in %s moved from position %d', target, name, row_index)
                return candidate
        raise StoreError(f'Row for {target} no longer exists in sheet {name}.')


def _row_key(row: SheetRow) -> str:
    cells = row.cells or []
    return normalize_identifier(cells[0]) if cells else ''
