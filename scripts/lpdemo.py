"""Command-line demo for Keycloak and the Logipad identity API.

This module is a CLI wrapper around logipad.core services:
token acquisition, user creation and the user list.
"""
from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from logipad.config import AppConfig, load_settings
from logipad.core.keycloak import KeycloakClient, UserInfo, UserService
from logipad.core.keycloak.exceptions import KeycloakError
from logipad.core.identity import LogipadClient
from logipad.core.identity.exceptions import LogipadError


def _admin_client(args: argparse.Namespace, cfg: AppConfig) -> KeycloakClient:
    return KeycloakClient(
        args.kc_url,
        cfg.admin_realm,
        cfg.admin_client_id,
        args.admin_user,
        args.admin_pass,
        timeout=cfg.request_timeout,
    )


def _logipad_client(args: argparse.Namespace, cfg: AppConfig) -> LogipadClient:
    return LogipadClient(
        args.kc_url,
        args.api_url,
        realm=cfg.logipad_realm,
        client_id=cfg.logipad_client_id,
        username=args.lp_user,
        password=args.lp_pass,
        timeout=cfg.request_timeout,
    )


def cmd_token(args: argparse.Namespace, cfg: AppConfig) -> int:
    """Print an access token for the admin or the Logipad account."""
    if args.account == "logipad":
        client = _logipad_client(args, cfg).keycloak
    else:
        client = _admin_client(args, cfg)

    try:
        token = client.authenticate()
    except KeycloakError as e:
        print(f"Failed to authenticate: {e}", file=sys.stderr)
        return 1

    print(token)
    if args.claims:
        try:
            claims = client.token_claims()
        except KeycloakError as e:
            print(f"Failed to decode token: {e}", file=sys.stderr)
            return 1
        print(json.dumps(claims, indent=2, sort_keys=True))
    return 0


def cmd_create_user(args: argparse.Namespace, cfg: AppConfig) -> int:
    """Create one user in the target realm with the admin account."""
    user_info = UserInfo(
        username=args.username,
        email=args.email,
        first_name=args.first,
        last_name=args.last,
        password=args.password,
    )
    service = UserService(_admin_client(args, cfg))
    try:
        service.create_user(user_info, args.realm)
    except (ValueError, KeycloakError) as e:
        print(f"Failed to create user: {e}", file=sys.stderr)
        return 1

    print("User created successfully")
    return 0


def cmd_list_users(args: argparse.Namespace, cfg: AppConfig) -> int:
    """Print every user returned by the identity API."""
    client = _logipad_client(args, cfg)
    try:
        client.authenticate()
        users = client.get_all_users()
    except (KeycloakError, LogipadError) as e:
        print(f"Failed to retrieve users: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([user.to_dict() for user in users], indent=2))
        return 0

    print(f"Retrieved {len(users)} users")
    for user in users:
        print(user.display_line())
    return 0


def cmd_demo(args: argparse.Namespace, cfg: AppConfig) -> int:
    """Admin token, user creation, then the user list. Failures do not stop the run."""
    status = 0

    admin = _admin_client(args, cfg)
    try:
        print(f"Access Token: {admin.authenticate()}")
    except KeycloakError as e:
        print(f"Failed to authenticate: {e}", file=sys.stderr)
        status = 1
    else:
        user_info = UserInfo(args.username, args.email, args.first, args.last, args.password)
        try:
            UserService(admin).create_user(user_info, args.realm)
            print("User created successfully")
        except (ValueError, KeycloakError) as e:
            print(f"Failed to create user: {e}", file=sys.stderr)
            status = 1

    list_args = argparse.Namespace(**{**vars(args), "json": False})
    if cmd_list_users(list_args, cfg) != 0:
        status = 1
    return status


def build_parser(cfg: AppConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Keycloak / Logipad identity demo client")
    parser.add_argument("--kc-url", default=cfg.keycloak_url)
    parser.add_argument("--api-url", default=cfg.identity_api_url)
    parser.add_argument("--admin-user", default=cfg.admin_username)
    parser.add_argument("--admin-pass", default=cfg.admin_password)
    parser.add_argument("--lp-user", default=cfg.logipad_username)
    parser.add_argument("--lp-pass", default=cfg.logipad_password)
    parser.add_argument("--log-level", default=cfg.log_level,
                        help="Logging level (default: WARNING)")

    sub = parser.add_subparsers(dest="cmd")

    st = sub.add_parser("token", help="Print an access token")
    st.add_argument("--account", choices=["admin", "logipad"], default="admin")
    st.add_argument("--claims", action="store_true", help="Also print the decoded token claims")

    sc = sub.add_parser("create-user", help="Create a user in Keycloak")
    sc.add_argument("--realm", default=cfg.target_realm)
    sc.add_argument("--username", required=True)
    sc.add_argument("--email", required=True)
    sc.add_argument("--first", default="")
    sc.add_argument("--last", default="")
    sc.add_argument("--password", default="")

    sl = sub.add_parser("list-users", help="List users from the identity API")
    sl.add_argument("--json", action="store_true", help="Print records as JSON")

    sd = sub.add_parser("demo", help="Authenticate, create a test user and list users")
    sd.add_argument("--realm", default=cfg.target_realm)
    sd.add_argument("--username", default="testuser")
    sd.add_argument("--email", default="testuser@test.com")
    sd.add_argument("--first", default="Test")
    sd.add_argument("--last", default="User")
    sd.add_argument("--password", default="", help="Temporary password (no credential when empty)")

    return parser


COMMANDS = {
    "token": cmd_token,
    "create-user": cmd_create_user,
    "list-users": cmd_list_users,
    "demo": cmd_demo,
}


def main(argv: list[str] | None = None) -> None:
    """Command-line entry point."""
    cfg = load_settings()
    parser = build_parser(cfg)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.cmd:
        parser.print_help()
        return

    needs_admin = args.cmd in ("create-user", "demo") or (args.cmd == "token" and args.account == "admin")
    if needs_admin and not (args.admin_user and args.admin_pass):
        parser.error("Missing admin credentials (--admin-user/--admin-pass or KEYCLOAK_ADMIN/KEYCLOAK_ADMIN_PASSWORD)")
    needs_logipad = args.cmd in ("list-users", "demo") or (args.cmd == "token" and args.account == "logipad")
    if needs_logipad and not (args.lp_user and args.lp_pass):
        parser.error("Missing Logipad credentials (--lp-user/--lp-pass or LOGIPAD_USERNAME/LOGIPAD_PASSWORD)")

    status = COMMANDS[args.cmd](args, cfg)
    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
