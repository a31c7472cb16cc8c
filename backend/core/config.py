import os

from dotenv import load_dotenv

load_dotenv()


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./pkl_records.db")

CORS_ALLOW_ORIGINS = _get_list(os.getenv("CORS_ALLOW_ORIGINS"), ["http://localhost:4200"])

USERS_SHEET = os.getenv("USERS_SHEET", "users")
SUPER_ADMIN_DEPARTMENT = "-"
DEPARTMENTS = _get_list(
    os.getenv("DEPARTMENTS"),
    ["tata_kecantikan", "tata_busana", "tata_boga", "perhotelan", "tjkt"],
)

DEFAULT_PASSWORD = os.getenv("DEFAULT_PASSWORD", "123456")

LOCK_TIMEOUT_SECONDS = float(os.getenv("LOCK_TIMEOUT_SECONDS", "5"))
ADMIN_LOCK_TIMEOUT_SECONDS = float(os.getenv("ADMIN_LOCK_TIMEOUT_SECONDS", "10"))

PHOTO_DIR = os.getenv("PHOTO_DIR", "./photos")
PHOTO_BASE_URL = os.getenv("PHOTO_BASE_URL", "http://localhost:8000/photos")
PHOTO_MAX_BYTES = int(os.getenv("PHOTO_MAX_BYTES", str(5 * 1024 * 1024)))


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and DATABASE_URL.startswith("sqlite"):
        raise RuntimeError("DATABASE_URL must point to a server database in production.")
