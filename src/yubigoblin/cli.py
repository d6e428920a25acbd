"""Command line entry point for YubiGoblin."""

from __future__ import annotations

import argparse
import json
from typing import Optional, Sequence

from loguru import logger

from . import __version__
from .config import get_config_manager, setup_logging
from .core import create_app_context, elevate_with_pkexec, is_root
from .errors import PrivilegeError, YubiGoblinError
from .models import Dependencies

MUTATING_COMMANDS = {"enroll", "revoke", "serve"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="yubigoblin", description="Manage YubiKey second factor authentication for sudo and the login screen")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--elevate", action="store_true", help="Re-run through pkexec when not root")

    sub = parser.add_subparsers(dest="command", required=True)

    deps = sub.add_parser("deps", help="Check, install or remove the U2F packages")
    deps.add_argument("action", nargs="?", choices=["check", "install", "remove"], default="check")

    sub.add_parser("keys", help="List attached YubiKeys")
    sub.add_parser("users", help="List human accounts that can be enrolled")

    status = sub.add_parser("status", help="Show whether a user is enrolled")
    status.add_argument("username")

    enroll = sub.add_parser("enroll", help="Register the attached YubiKey for a user")
    enroll.add_argument("username")

    revoke = sub.add_parser("revoke", help="Remove the YubiKey requirement for a user")
    revoke.add_argument("username")

    serve = sub.add_parser("serve", help="Run the REST API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    return parser


def _needs_root(args: argparse.Namespace) -> bool:
    if args.command in MUTATING_COMMANDS:
        return True
    return args.command == "deps" and args.action != "check"


def _print_json(data) -> None:
    print(json.dumps(data, indent=2))


def run(args: argparse.Namespace) -> int:
    config = get_config_manager().load_config(
        host=getattr(args, "host", None),
        port=getattr(args, "port", None),
        log_level=args.log_level,
    )
    setup_logging(config.logging)

    if _needs_root(args) and not is_root():
        if args.elevate:
            return elevate_with_pkexec()
        raise PrivilegeError(f"Root privileges are required to run '{args.command}'. Re-run with sudo or --elevate.")

    ctx = create_app_context(config)

    if args.command == "deps":
        if args.action == "install":
            with ctx.lock:
                deps = ctx.dependencies.install_desired(Dependencies(apt=True, libpam_u2f=True, pamu2fcfg=True))
        elif args.action == "remove":
            with ctx.lock:
                deps = ctx.dependencies.remove_optional()
        else:
            deps = ctx.dependencies.current()
        _print_json(deps.model_dump(by_alias=True))

    elif args.command == "keys":
        _print_json([key.model_dump() for key in ctx.devices.list_auth_tokens()])

    elif args.command == "users":
        _print_json(ctx.users.list_human_users())

    elif args.command == "status":
        _print_json(ctx.engine.status(args.username).model_dump())

    elif args.command == "enroll":
        with ctx.lock:
            tx = ctx.engine.enroll(args.username)
        print(f"YubiKey installed for user {args.username}")
        logger.debug(f"Enrollment steps: {tx.steps()}")

    elif args.command == "revoke":
        with ctx.lock:
            ctx.engine.revoke(args.username)
        print(f"YubiKey removed for user {args.username}")

    elif args.command == "serve":
        import uvicorn

        from .api import create_api

        logger.info(f"Starting web server at '{config.server.host}:{config.server.port}'")
        uvicorn.run(create_api(ctx), host=config.server.host, port=config.server.port, log_config=None)

    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return run(args)
    except YubiGoblinError as e:
        if e.__cause__ is not None:
            logger.debug(f"Caused by: {e.__cause__!r}")
        logger.error(f"❌ {e}")
        return 1
