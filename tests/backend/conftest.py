import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from backend.auth import service as auth_service  # noqa: E402
from backend.database import Base, bootstrap_sheets  # noqa: E402
from backend.models.sheet import Sheet, SheetRow  # noqa: E402
from backend.storage.photos import PhotoStore  # noqa: E402
from backend.storage.tabular import SheetStore  # noqa: E402


@pytest.fixture
def sheet_store():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine, tables=[Sheet.__table__, SheetRow.__table__])

    store = SheetStore(testing_session_local)
    bootstrap_sheets(store)
    try:
        yield store
    finally:
        Base.metadata.drop_all(bind=engine, tables=[SheetRow.__table__, Sheet.__table__])
        engine.dispose()


@pytest.fixture
def photo_store(tmp_path):
    return PhotoStore(root=tmp_path / 'photos', base_url='http://testserver/photos')


@pytest.fixture
def register_student(sheet_store):
    def _register(identifier='00123', name='budi santoso', department='tjkt', password='rahasia', **extra):
        result = auth_service.register(
            sheet_store,
            {
                'identifier': identifier,
                'name': name,
                'department': department,
                'password': password,
                **extra,
            },
        )
        assert result['success'] is True, result
        return result

    return _register
