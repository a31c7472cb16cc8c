import logging
from dataclasses import dataclass
from typing import Any, Callable

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.responses import FileResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from backend.auth import service as auth_service
from backend.core.exceptions import AccessDenied, ServiceError, failure, validation_message
from backend.models.account import AccountSummary
from backend.routes.dependencies import get_photo_store, get_sheet_store
from backend.services import accounts, dashboard, profiles
from backend.storage.photos import MEDIA_TYPES, PhotoStore
from backend.storage.tabular import SheetStore

router = APIRouter(tags=['api'])
photo_router = APIRouter(tags=['photos'])

logger = logging.getLogger(__name__)

SESSION_EXPIRED = 'session expired'
ACCESS_DENIED = 'Access denied.'


@dataclass
class RequestContext:
    user: AccountSummary
    payload: dict
    store: SheetStore
    photos: PhotoStore


def _dashboard(ctx: RequestContext) -> dict:
    return dashboard.dashboard_data(ctx.store, ctx.user)


def _student_profile(ctx: RequestContext) -> dict:
    return profiles.get_profile(ctx.store, ctx.photos, ctx.user)


def _save_student_profile(ctx: RequestContext) -> dict:
    return profiles.save_profile(ctx.store, ctx.photos, ctx.user, ctx.payload.get('form_data'))


def _upload_photo(ctx: RequestContext) -> dict:
    return profiles.upload_photo(ctx.photos, ctx.user, ctx.payload)


def _change_password(ctx: RequestContext) -> dict:
    return accounts.change_password(ctx.store, ctx.user, ctx.payload.get('new_password'))


def _update_credentials(ctx: RequestContext) -> dict:
    return accounts.update_admin_credentials(
        ctx.store,
        ctx.user,
        ctx.payload.get('new_username'),
        ctx.payload.get('new_password'),
    )


def _student_detail(ctx: RequestContext) -> dict:
    return profiles.get_detail(ctx.store, ctx.photos, ctx.payload.get('identifier'), ctx.payload.get('department'))


def _save_student_detail(ctx: RequestContext) -> dict:
    return profiles.save_detail(ctx.store, ctx.photos, ctx.payload)


def _admin_stats(ctx: RequestContext) -> dict:
    return dashboard.stats(ctx.store, ctx.payload.get('year'), ctx.user.department)


def _dashboard_years(ctx: RequestContext) -> dict:
    return dashboard.dashboard_years(ctx.store)


def _admin_data(ctx: RequestContext) -> dict:
    return profiles.list_students(ctx.store, ctx.photos, ctx.payload.get('department'), ctx.payload.get('year'))


def _create_user(ctx: RequestContext) -> dict:
    if not ctx.payload.get('department'):
        return failure('A department must be selected.')
    return accounts.create_account(ctx.store, ctx.payload)


def _admin_users(ctx: RequestContext) -> dict:
    return accounts.list_accounts(ctx.store, ctx.user.department)


def _delete_user(ctx: RequestContext) -> dict:
    return accounts.delete_account(
        ctx.store,
        ctx.payload.get('identifier'),
        ctx.payload.get('department'),
        scope_department=ctx.user.department,
    )


def _reset_password(ctx: RequestContext) -> dict:
    return accounts.reset_password(ctx.store, ctx.payload.get('identifier'), scope_department=ctx.user.department)


def _change_department(ctx: RequestContext) -> dict:
    if not ctx.user.is_super_admin:
        raise AccessDenied('Only the super admin can move students between departments.')
    return accounts.transfer_department(
        ctx.store,
        ctx.payload.get('identifier'),
        ctx.payload.get('old_department'),
        ctx.payload.get('new_department'),
    )


def _available_years(ctx: RequestContext) -> dict:
    return dashboard.available_years(ctx.store, ctx.payload.get('department'))


SESSION_ACTIONS: dict[str, Callable[[RequestContext], dict]] = {
    'getDashboardData': _dashboard,
    'getStudentProfile': _student_profile,
    'saveStudentProfile': _save_student_profile,
    'uploadPhoto': _upload_photo,
    'changePassword': _change_password,
}

ADMIN_ACTIONS: dict[str, Callable[[RequestContext], dict]] = {
    'adminUpdateCredentials': _update_credentials,
    'adminGetStudentDetail': _student_detail,
    'adminSaveStudentDetail': _save_student_detail,
    'getAdminStats': _admin_stats,
    'getDashboardYears': _dashboard_years,
    'getAdminData': _admin_data,
    'adminCreateUser': _create_user,
    'getAdminUsers': _admin_users,
    'adminDeleteUser': _delete_user,
    'adminResetPassword': _reset_password,
    'adminChangeDepartment': _change_department,
    'getAvailableYears': _available_years,
}


def dispatch(action: str, payload: dict | None, *, store: SheetStore, photos: PhotoStore) -> dict:
    """Route one API call. Always returns a ``{success: ...}`` response."""
    payload = dict(payload or {})
    try:
        if action == 'login':
            return auth_service.login(store, payload.get('identifier'), payload.get('password'))
        if action == 'register':
            return auth_service.register(store, payload)

        user = auth_service.validate_token(store, payload.pop('sessionToken', None))
        if user is None:
            return failure(SESSION_EXPIRED, sessionExpired=True)

        if action in SESSION_ACTIONS:
            return SESSION_ACTIONS[action](RequestContext(user, payload, store, photos))

        if action in ADMIN_ACTIONS:
            if not user.is_admin:
                logger.warning('Non-admin %s attempted %s', user.identifier, action)
                raise AccessDenied(ACCESS_DENIED)
            # Department admins only ever see their own department.
            if not user.is_super_admin:
                payload['department'] = user.department
            return ADMIN_ACTIONS[action](RequestContext(user, payload, store, photos))

        return failure(f'Unknown action: {action}')
    except ServiceError as exc:
        return exc.to_response()
    except ValidationError as exc:
        return failure(validation_message(exc))
    except SQLAlchemyError as exc:
        logger.exception('Action %s failed', action)
        return failure(f'Request failed: {exc}')
    except Exception:
        logger.exception('Unexpected error in action %s', action)
        return failure(f'Unexpected error while handling {action}.')


@router.post('/{action}')
def call_action(
    action: str,
    payload: dict[str, Any] | None = Body(default=None),
    store: SheetStore = Depends(get_sheet_store),
    photos: PhotoStore = Depends(get_photo_store),
):
    return dispatch(action, payload, store=store, photos=photos)


@photo_router.get('/{photo_id}')
def get_photo(photo_id: str, photos: PhotoStore = Depends(get_photo_store)):
    path = photos.path_for(photo_id)
    if path is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Photo not found.')
    return FileResponse(path, media_type=MEDIA_TYPES.get(path.suffix, 'application/octet-stream'))
