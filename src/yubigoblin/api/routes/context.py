"""Request-scoped access to the application context."""

from fastapi import Request

from ...core.app import YubiGoblinApp


def get_context(request: Request) -> YubiGoblinApp:
    return request.app.state.context
