"""Re-apply name and address formatting to every stored student profile.

Usage:
    python -m backend.normalize_profiles
"""
import sys

from backend.core import config
from backend.services.profiles import normalize_department_profiles
from backend.storage.tabular import SheetStore


def main() -> None:
    store = SheetStore()
    total = 0
    for department in config.DEPARTMENTS:
        if not store.sheet_exists(department):
            print(f"{department}: sheet not found, skipped", file=sys.stderr)
            continue
        changed = normalize_department_profiles(store, department)
        print(f"{department}: {changed} profile(s) updated")
        total += changed
    print(f"Done. {total} profile(s) updated.")


if __name__ == "__main__":
    main()
