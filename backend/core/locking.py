from contextlib import contextmanager
from threading import Lock

from backend.core.exceptions import LockTimeoutError

_write_lock = Lock()


@contextmanager
def write_lock(timeout_seconds: float):
    """Hold the process-wide write lock, waiting at most ``timeout_seconds``."""
    if not _write_lock.acquire(timeout=timeout_seconds):
        raise LockTimeoutError('The server is busy. Please try again in a moment.')
    try:
        yield
    finally:
        _write_lock.release()
