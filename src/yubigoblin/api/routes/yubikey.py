from fastapi import APIRouter, Depends

from ...core.app import YubiGoblinApp
from ...models import ActionResponse, ErrorMessage, SuccessMessage, YubiKey, YubikeyInstallRequest, YubikeyStatusResponse
from ..consts import CHECK_YUBI_KEY_FOR_USER, REMOVE_YUBI_KEY_FOR_USER, YUBI_KEY_URL
from .context import get_context

router = APIRouter(tags=["YubiKey"])

_errors = {500: {"model": ErrorMessage}}


@router.get(YUBI_KEY_URL, response_model=list[YubiKey], responses=_errors, description="List the YubiKeys plugged into this machine")
def get_yubikeys(ctx: YubiGoblinApp = Depends(get_context)) -> list[YubiKey]:
    return ctx.devices.list_auth_tokens()


@router.post(YUBI_KEY_URL, response_model=SuccessMessage, responses=_errors, description="Register the plugged in YubiKey for a user")
def post_install_yubikey_for_user(body: YubikeyInstallRequest, ctx: YubiGoblinApp = Depends(get_context)) -> SuccessMessage:
    with ctx.lock:
        ctx.engine.enroll(body.username)
    return SuccessMessage(message=f"YubiKey installed for user {body.username}")


@router.get(CHECK_YUBI_KEY_FOR_USER, response_model=YubikeyStatusResponse, responses=_errors, description="Check if a YubiKey is installed for a user")
def get_check_yubikey_for_user(username: str, ctx: YubiGoblinApp = Depends(get_context)) -> YubikeyStatusResponse:
    return ctx.engine.status(username)


@router.delete(REMOVE_YUBI_KEY_FOR_USER, response_model=ActionResponse, responses=_errors, description="Remove the YubiKey requirement for a user")
def delete_yubikey_for_user(username: str, ctx: YubiGoblinApp = Depends(get_context)) -> ActionResponse:
    with ctx.lock:
        ctx.engine.revoke(username)
    return ActionResponse(username=username, removed=True)
