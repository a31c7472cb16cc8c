from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from backend.core import config


engine_kwargs = {}
if config.DATABASE_URL.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}

engine = create_engine(config.DATABASE_URL, **engine_kwargs)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_sheet_schema_checked = False


def ensure_sheet_schema(bind=None) -> None:
    global _sheet_schema_checked

    if _sheet_schema_checked and bind is None:
        return

    with _schema_lock:
        if _sheet_schema_checked and bind is None:
            return

        target = bind or engine
        inspector = inspect(target)

        if 'sheet_rows' not in inspector.get_table_names():
            return

        with target.begin() as connection:
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_sheet_rows_sheet_id ON sheet_rows(sheet_name, id)')
            )

        if bind is None:
            _sheet_schema_checked = True


def bootstrap_sheets(store) -> None:
    from backend.models.account import ACCOUNT_HEADER
    from backend.models.student_profile import PROFILE_HEADER

    store.create_sheet(config.USERS_SHEET, ACCOUNT_HEADER)
    for department in config.DEPARTMENTS:
        store.create_sheet(department, PROFILE_HEADER)
