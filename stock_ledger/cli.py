"""CLI commands for database operations."""

import argparse
import sys
from typing import NoReturn

from flask import Flask

from stock_ledger import create_app
from stock_ledger.database import (
    check_db_connection,
    get_current_revision,
    get_pending_migrations,
    upgrade_database,
)


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        description="Stock Ledger CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    upgrade_parser = subparsers.add_parser(
        "upgrade-db",
        help="Apply database migrations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Apply pending database migrations using Alembic.

Examples:
  stock-ledger-cli upgrade-db                                   Apply pending migrations
  stock-ledger-cli upgrade-db --recreate --yes-i-am-sure        Drop all tables and recreate from migrations
        """,
    )
    upgrade_parser.add_argument(
        "--recreate",
        action="store_true",
        help="Drop all tables first, then run all migrations from scratch",
    )
    upgrade_parser.add_argument(
        "--yes-i-am-sure",
        action="store_true",
        help="Required safety flag when using --recreate",
    )

    subparsers.add_parser(
        "check-db",
        help="Check database connectivity and migration state",
    )

    return parser


def _require_connection(app: Flask) -> None:
    if not check_db_connection():
        print(
            "❌ Cannot connect to database. Check your DATABASE_URL configuration.",
            file=sys.stderr,
        )
        sys.exit(1)

    print(f"🗄  Using database: {app.config['SQLALCHEMY_DATABASE_URI']}")


def handle_upgrade_db(
    app: Flask, recreate: bool = False, confirmed: bool = False
) -> None:
    """Handle upgrade-db command."""
    with app.app_context():
        _require_connection(app)

        if recreate and not confirmed:
            print(
                "❌ --recreate requires --yes-i-am-sure flag for safety",
                file=sys.stderr,
            )
            print(
                "   This will DROP ALL TABLES and recreate from migrations!",
                file=sys.stderr,
            )
            sys.exit(1)

        if recreate:
            print("⚠️  WARNING: About to drop all tables and recreate from migrations!")
            print("   This will permanently delete all stock records and ledger history.")

        current_rev = get_current_revision()
        pending = get_pending_migrations()

        if current_rev:
            print(f"📍 Current database revision: {current_rev}")
        else:
            print("📍 Database has no migration version (empty or new database)")

        if not (recreate or pending):
            print("✅ Database is up to date. No migrations to apply.")
            return

        if recreate:
            print("🔄 Recreating database from scratch...")
        else:
            print(f"📦 Found {len(pending)} pending migration(s)")

        try:
            applied = upgrade_database(recreate=recreate)
        except Exception as e:
            print(f"❌ Migration failed: {e}", file=sys.stderr)
            sys.exit(1)

        if applied:
            print(f"✅ Successfully applied {len(applied)} migration(s)")
            for revision, description in applied:
                print(f"   • {revision}: {description}")
        else:
            print("✅ Database migration completed")


def handle_check_db(app: Flask) -> None:
    """Handle check-db command; exits non-zero when migrations are pending."""
    with app.app_context():
        _require_connection(app)

        current_rev = get_current_revision()
        pending = get_pending_migrations()

        print(f"📍 Current database revision: {current_rev or 'none'}")
        if pending:
            print(f"⚠️  {len(pending)} pending migration(s): {', '.join(pending)}")
            sys.exit(1)

        print("✅ Database is up to date.")


def main() -> NoReturn:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    app = create_app()

    if args.command == "upgrade-db":
        handle_upgrade_db(
            app=app,
            recreate=args.recreate,
            confirmed=args.yes_i_am_sure,
        )
    elif args.command == "check-db":
        handle_check_db(app=app)
    else:
        print(f"❌ Unknown command: {args.command}", file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
