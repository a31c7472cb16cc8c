import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.core.logging_config import setup_logging
from backend.database import bootstrap_sheets, engine, ensure_sheet_schema
from backend.models import sheet
from backend.routes import api_routes
from backend.routes.dependencies import get_sheet_store

setup_logging()

app = FastAPI(title='PKL Records API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        sheet.Base.metadata.create_all(bind=engine)
        ensure_sheet_schema()
        bootstrap_sheets(get_sheet_store())
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL.')


@app.get('/')
def root():
    return {'status': 'PKL Records API Running'}


app.include_router(api_routes.router, prefix='/api')
app.include_router(api_routes.photo_router, prefix='/photos')
