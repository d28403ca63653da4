"""Command line access to the dashboard aggregates.

Usage:
    homeplate earnings --email chef@example.com --password ...
    homeplate admin-stats --demo
    homeplate partner-stats --demo --tz Asia/Kolkata

Exit codes:
    0 success
    1 remote failure
    2 authorization failure (bad credentials or missing role)
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from datetime import tzinfo
from typing import Any, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from homeplate.application.auth.role_resolver import RoleResolver
from homeplate.application.dashboards.admin_stats import (
    GetAdminStatsQuery,
    GetAdminStatsQueryHandler,
)
from homeplate.application.dashboards.earnings import (
    GetChefEarningsQuery,
    GetChefEarningsQueryHandler,
)
from homeplate.application.dashboards.partner_stats import (
    GetPartnerStatsQuery,
    GetPartnerStatsQueryHandler,
)
from homeplate.application.fetchers.joins import JoinStrategy
from homeplate.application.fetchers.orders import OrderFetcher
from homeplate.application.session.session_store import (
    DEFAULT_SESSION_CHECK_TIMEOUT_S,
    SessionStore,
)
from homeplate.domain.session.roles import Role
from homeplate.domain.shared.errors import AuthorizationError, HomePlateError
from homeplate.domain.shared.ports.auth_provider import IAuthProvider
from homeplate.domain.shared.ports.data_service import IDataService
from homeplate.infrastructure import config
from homeplate.infrastructure.factory import (
    connect_access_token,
    create_auth_provider,
    create_data_service,
    create_join_strategy,
)
from homeplate.infrastructure.in_memory import demo

logger = logging.getLogger("homeplate.cli")

COMMANDS = ("earnings", "admin-stats", "partner-stats")

# Role checked against user_roles before a command runs
REQUIRED_ROLE = {
    "earnings": Role.CHEF,
    "admin-stats": Role.ADMIN,
    "partner-stats": Role.CHEF,
}

DEMO_ACCOUNT = {
    "earnings": demo.CHEF,
    "admin-stats": demo.ADMIN,
    "partner-stats": demo.CHEF,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="homeplate",
        description="Print HomePlate dashboard aggregates as JSON.",
    )
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--email", default=None)
    parser.add_argument("--password", default=None)
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Sign in with the seeded demo account (HOMEPLATE_BACKEND=inmemory only)",
    )
    parser.add_argument(
        "--tz",
        default=None,
        help="IANA timezone for earnings day grouping (default: system timezone)",
    )
    return parser


def _credentials(args: argparse.Namespace, parser: argparse.ArgumentParser) -> Tuple[str, str]:
    if args.demo:
        if config.get_backend() != "inmemory":
            parser.error("--demo requires HOMEPLATE_BACKEND=inmemory")
        account = DEMO_ACCOUNT[args.command]
        return args.email or account.email or "", args.password or demo.DEMO_PASSWORD
    if not args.email or not args.password:
        parser.error("--email and --password are required (or use --demo)")
    return args.email, args.password


def _to_json(value: Any) -> str:
    return json.dumps(dataclasses.asdict(value), indent=2, default=str)


async def run(
    command: str,
    email: str,
    password: str,
    data_service: IDataService,
    auth_provider: IAuthProvider,
    strategy: JoinStrategy = JoinStrategy.BATCH,
    tz: Optional[tzinfo] = None,
    session_check_timeout_s: float = DEFAULT_SESSION_CHECK_TIMEOUT_S,
) -> str:
    """
    Sign in, check the command's role and compute its aggregate.

    Returns:
        JSON document

    Raises:
        AuthorizationError: Bad credentials or missing role
        RemoteServiceError: Backend failure
    """
    session = SessionStore(auth_provider, session_check_timeout_s)
    try:
        identity = await session.sign_in(email, password)

        role = REQUIRED_ROLE[command]
        if not await RoleResolver(data_service).has_role(identity, role):
            raise AuthorizationError(f"You don't have {role.value} access")

        orders = OrderFetcher(data_service, strategy)
        if command == "admin-stats":
            result: Any = await GetAdminStatsQueryHandler(data_service).handle(
                GetAdminStatsQuery()
            )
        elif command == "partner-stats":
            result = await GetPartnerStatsQueryHandler(data_service, orders).handle(
                GetPartnerStatsQuery(chef_user_id=identity.id)
            )
        else:
            result = await GetChefEarningsQueryHandler(orders).handle(
                GetChefEarningsQuery(chef_user_id=identity.id, tz=tz)
            )
        return _to_json(result)
    finally:
        session.close()


def main(argv: Optional[List[str]] = None) -> int:
    config.load_environment()
    logging.basicConfig(
        level=getattr(logging, config.get_log_level(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    parser = build_parser()
    args = parser.parse_args(argv)
    email, password = _credentials(args, parser)

    tz: Optional[ZoneInfo] = None
    if args.tz:
        try:
            tz = ZoneInfo(args.tz)
        except ZoneInfoNotFoundError:
            parser.error(f"Unknown timezone: {args.tz}")

    try:
        data_service = create_data_service()
        auth_provider = create_auth_provider()
        strategy = create_join_strategy()
        session_check_timeout_s = config.get_session_check_timeout()
    except ValueError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    connect_access_token(auth_provider, data_service)

    try:
        output = asyncio.run(
            run(
                args.command,
                email,
                password,
                data_service,
                auth_provider,
                strategy,
                tz,
                session_check_timeout_s,
            )
        )
    except AuthorizationError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 2
    except HomePlateError as e:
        logger.error("Command failed", extra={"command": args.command, "error": str(e)})
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
