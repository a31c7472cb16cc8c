import logging
from functools import wraps

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for failures reported back to the caller as ``{success: False}``."""

    extra: dict = {}

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return failure(self.message, **self.extra)


class ValidationFailure(ServiceError):
    pass


class SheetNotFoundError(ValidationFailure):
    pass


class NotFoundError(ServiceError):
    extra = {'notFound': True}


class AccessDenied(ServiceError):
    pass


class PartialFailure(ServiceError):
    extra = {'partial': True}


class LockTimeoutError(ServiceError):
    pass


class StoreError(ServiceError):
    pass


def failure(message: str, **fields) -> dict:
    return {'success': False, 'error': message, **fields}


def validation_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return 'Invalid request.'
    message = str(errors[0].get('msg', 'Invalid request.'))
    return message.removeprefix('Value error, ')


def reports_failure(operation: str):
    """Convert exceptions raised by a service operation into a failure response.

    Domain errors keep their own message. Storage and filesystem errors are
    logged with a traceback and reported as ``"<operation>: <detail>"``.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ServiceError as exc:
                return exc.to_response()
            except ValidationError as exc:
                return failure(validation_message(exc))
            except (SQLAlchemyError, OSError) as exc:
                logger.exception('%s failed', operation)
                return failure(f'{operation}: {exc}')

        return wrapper

    return decorator
