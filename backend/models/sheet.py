"""Sheet storage model definitions."""

from sqlalchemy import JSON, Column, ForeignKey, Integer, String
from backend.database import Base


class Sheet(Base):
    """A named two-dimensional table, e.g. ``users`` or a department."""
    __tablename__ = "sheets"

    name = Column(String, primary_key=True)
    header = Column(JSON, nullable=False, default=list)


class SheetRow(Base):
    """One data row of a sheet. Row order is insertion order (``id``)."""
    __tablename__ = "sheet_rows"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sheet_name = Column(String, ForeignKey("sheets.name", ondelete="CASCADE"), index=True, nullable=False)
    cells = Column(JSON, nullable=False, default=list)
