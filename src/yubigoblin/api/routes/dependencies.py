from fastapi import APIRouter, Depends

from ...core.app import YubiGoblinApp
from ...models import Dependencies, ErrorMessage
from ..consts import DEPENDENCY_URL
from .context import get_context

router = APIRouter(tags=["Dependencies"])

_errors = {500: {"model": ErrorMessage, "description": "Error checking, installing or removing dependencies"}}


@router.get(DEPENDENCY_URL, response_model=Dependencies, responses=_errors, description="Get a list of packages or dependencies")
def are_dependencies_installed(ctx: YubiGoblinApp = Depends(get_context)) -> Dependencies:
    return ctx.dependencies.current()


@router.post(DEPENDENCY_URL, response_model=Dependencies, responses=_errors, description="Install missing dependencies")
def install_missing_dependencies(desired: Dependencies, ctx: YubiGoblinApp = Depends(get_context)) -> Dependencies:
    with ctx.lock:
        return ctx.dependencies.install_desired(desired)


@router.delete(DEPENDENCY_URL, response_model=Dependencies, responses=_errors, description="Remove libpam-u2f and pamu2fcfg if they are installed")
def remove_unwanted_dependencies(ctx: YubiGoblinApp = Depends(get_context)) -> Dependencies:
    with ctx.lock:
        return ctx.dependencies.remove_optional()
