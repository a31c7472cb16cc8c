from backend.storage.photos import PhotoStore
from backend.storage.tabular import SheetStore

_sheet_store = SheetStore()
_photo_store = PhotoStore()


def get_sheet_store() -> SheetStore:
    return _sheet_store


def get_photo_store() -> PhotoStore:
    return _photo_store
