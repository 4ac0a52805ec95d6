"""SSO client command-line tool. Use --help for usage."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from core.errors.exceptions import SsoError
from core.logging.setup import setup_logging
from sso_client.client import SsoClient
from sso_client.config import SsoClientConfig, load_config

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sso_client",
        description="SSO Client Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate configuration
  python -m sso_client --validate

  # Fetch a client-credentials token
  python -m sso_client --token

  # Fetch a token for a user
  python -m sso_client --token --username ann --password secret

  # JSON output for automation
  python -m sso_client --validate --token --json
        """,
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config.yaml file (default: ./config.yaml)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=Path(".env"),
        help="Environment file to load before reading config (default: ./.env)",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration",
    )
    parser.add_argument(
        "--token",
        action="store_true",
        help="Obtain an access token from the token endpoint",
    )
    parser.add_argument("--username", help="User for the password grant")
    parser.add_argument("--password", help="Password for the password grant")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format instead of human-readable",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


async def fetch_token(config: SsoClientConfig, username: str | None, password: str | None) -> dict:
    """Obtain a token and describe it without exposing its value."""
    async with SsoClient(config) as client:
        if username:
            token = await client.get_token(username, password or "")
            grant = "password"
        else:
            token = await client.setup_client_token(force=True)
            grant = "client_credentials"

    if token is None:
        return {"obtained": False, "grant_type": grant}
    return {
        "obtained": True,
        "grant_type": grant,
        "token_type": token.token_type,
        "expires_at": token.expires_at.isoformat() if token.expires_at else None,
        "scope": sorted(token.scope),
    }


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.env_file and args.env_file.exists():
        load_dotenv(args.env_file)

    setup_logging(console_level=logging.DEBUG if args.verbose else logging.WARNING)

    if not args.validate and not args.token:
        parser.print_help()
        return 0

    output: dict = {}
    success = True
    try:
        config = load_config(config_path=args.config)

        if args.validate:
            # Validation happens during load_config(), if we got here it passed
            if args.json:
                output["validation"] = {"passed": True, "errors": []}
            else:
                print("✓ Configuration validation passed")
                print(f"  - Server: {config.base_url}")
                print(f"  - Token endpoint: {config.token_endpoint_url}")
                print(f"  - Client: {config.client_id}")

        if args.token:
            result = asyncio.run(fetch_token(config, args.username, args.password))
            success = result["obtained"]
            if args.json:
                output["token"] = result
            elif result["obtained"]:
                print(f"✓ Obtained {result['token_type']} token ({result['grant_type']})")
                if result["expires_at"]:
                    print(f"  - Expires at: {result['expires_at']}")
            else:
                print("✗ No token obtained", file=sys.stderr)

        if args.json:
            print(json.dumps(output, indent=2))

        return 0 if success else 1

    except FileNotFoundError as e:
        if args.json:
            print(json.dumps({"error": str(e)}))
        else:
            print(f"✗ Error: {e}", file=sys.stderr)
        return 1

    except SsoError as e:
        if args.json:
            print(json.dumps({"error": str(e), "category": e.category.value}))
        else:
            print(f"✗ {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    except Exception as e:
        if args.json:
            print(json.dumps({"error": f"Unexpected error: {e}"}))
        else:
            print(f"✗ Unexpected error: {e}", file=sys.stderr)
            if args.verbose:
                import traceback

                traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
