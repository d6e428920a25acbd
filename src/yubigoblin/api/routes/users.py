from fastapi import APIRouter, Depends

from ...core.app import YubiGoblinApp
from ...models import ErrorMessage
from ..consts import USERS_URL
from .context import get_context

router = APIRouter(tags=["Users"])


@router.get(USERS_URL, response_model=list[str], responses={500: {"model": ErrorMessage}}, description="Get all Users on the system")
def get_users(ctx: YubiGoblinApp = Depends(get_context)) -> list[str]:
    """Get all users on the system as a JSON array of strings."""
    return ctx.users.list_human_users()
