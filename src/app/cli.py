"""Admin CLI for preparing the database and granting permissions to existing users."""

import argparse
import asyncio
import sys

from src.app.containers import Container
from src.app.logging import configure_logging
from src.shared.exceptions import EntityNotFound, IdentityError


async def create_schema(container: Container, args: argparse.Namespace) -> int:
    db = container.database()
    await db.create_tables()
    print("Schema created")
    return 0


async def grant_claim(container: Container, args: argparse.Namespace) -> int:
    identity_service = container.identity_service()
    try:
        await identity_service.add_claim(args.email, args.type, args.value)
    except EntityNotFound:
        print(f"Error: no user with email {args.email}")
        return 1
    print(f"Granted claim {args.type}={args.value!r} to {args.email}")
    return 0


async def add_role(container: Container, args: argparse.Namespace) -> int:
    identity_service = container.identity_service()
    try:
        await identity_service.add_to_role(args.email, args.role)
    except EntityNotFound:
        print(f"Error: no user with email {args.email}")
        return 1
    except IdentityError as e:
        print(f"Error: {e}")
        return 1
    print(f"Added {args.email} to role {args.role}")
    return 0


COMMANDS = {
    "create-schema": create_schema,
    "grant-claim": grant_claim,
    "add-role": add_role,
}


async def run_command(container: Container, args: argparse.Namespace) -> int:
    """
    Run one admin command and release the connection pool afterwards.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        return await COMMANDS[args.command](container, args)
    finally:
        await container.database().dispose()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="Administer the Minimal Client API database and users",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create every table
  python -m src.app.cli create-schema

  # Allow a user to delete clients
  python -m src.app.cli grant-claim --email admin@example.com --type ExcluirCliente

  # Put a user in a role
  python -m src.app.cli add-role --email admin@example.com --role Admin
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("create-schema", help="Create all tables")

    grant = subparsers.add_parser("grant-claim", help="Grant a claim to an existing user")
    grant.add_argument("--email", required=True, help="Email of the user")
    grant.add_argument("--type", required=True, help="Claim type (e.g., ExcluirCliente)")
    grant.add_argument("--value", default="", help="Claim value (default: empty)")

    role = subparsers.add_parser("add-role", help="Add an existing user to a role")
    role.add_argument("--email", required=True, help="Email of the user")
    role.add_argument("--role", required=True, help="Role name")

    return parser


def main(argv: list[str] | None = None, container: Container | None = None) -> int:
    """Main entry point for the CLI."""
    args = create_parser().parse_args(argv)
    container = container or Container()
    configure_logging(container.config().log_level)
    return asyncio.run(run_command(container, args))


if __name__ == "__main__":
    sys.exit(main())
