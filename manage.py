#!/usr/bin/env python3
"""
VentaFacil management CLI.

Usage:
    python manage.py serve                   Run the backend API with uvicorn
    python manage.py migrate --target local  Apply pending migrations
    python manage.py sync                    Upload pending local sales once
    python manage.py status                  Show migration and sync status
"""

import argparse
import asyncio
import sys

from ventafacil.config import configure_logging, get_settings


def cmd_serve(args: argparse.Namespace) -> None:
    """Run the backend API in the foreground."""
    import uvicorn

    settings = get_settings()
    host = args.host or settings.api.host
    port = args.port or settings.api.port

    print(f"Starting server on {host}:{port}...")
    uvicorn.run(
        "ventafacil.api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=args.reload,
    )


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations to the local or server database."""
    from ventafacil.infrastructure.storage.sqlite.migrations import run_migrations

    results = asyncio.run(
        run_migrations(args.target, create_backup_before=not args.no_backup)
    )

    if not results:
        print(f"{args.target}: already up to date.")
        return

    for result in results:
        mark = "ok" if result.success else "FAILED"
        print(f"  v{result.version} {result.name}: {mark} ({result.execution_time_ms} ms)")
        if result.error:
            print(f"    {result.error}")

    if not all(r.success for r in results):
        sys.exit(1)


async def _sync_once() -> int:
    from ventafacil.application.point_of_sale import create_point_of_sale

    pos = await create_point_of_sale()
    try:
        report = await pos.sync_now()
    finally:
        await pos.aclose()

    if report.skipped:
        print(f"Sync skipped: {report.skipped_reason}")
        return 0
    print(
        f"Attempted {report.attempted}, synced {len(report.synced)}, "
        f"failed {len(report.failed)}."
    )
    if report.failed:
        print(f"  Still pending: {', '.join(str(i) for i in report.failed)}")
        return 1
    return 0


def cmd_sync(args: argparse.Namespace) -> None:
    """Run one sync pass of the local ledger."""
    sys.exit(asyncio.run(_sync_once()))


async def _status() -> None:
    from ventafacil.core.entities import SyncStatus
    from ventafacil.infrastructure.storage.sqlite import ConnectionPool, SQLiteSalesStore
    from ventafacil.infrastructure.storage.sqlite.migrations import get_migration_status

    settings = get_settings()
    for target in ("local", "server"):
        status = await get_migration_status(target)
        pending = ", ".join(status["pending_migrations"]) or "none"
        print(
            f"{target}: exists={status['exists']} "
            f"version={status['current_version']} pending={pending}"
        )

    local = await get_migration_status("local")
    if not local["exists"] or local["pending_migrations"]:
        print("Local ledger not migrated; run 'migrate --target local'.")
        return

    pool = ConnectionPool.from_settings(settings.storage)
    try:
        counts = await SQLiteSalesStore(pool).count_by_status()
    finally:
        await pool.close()
    print(
        f"Sales pending sync: {counts[SyncStatus.PENDING]}, "
        f"synced: {counts[SyncStatus.SYNCED]}"
    )


def cmd_status(args: argparse.Namespace) -> None:
    """Show migration status and sync counts."""
    asyncio.run(_status())


def main() -> None:
    parser = argparse.ArgumentParser(
        description="VentaFacil management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = sub.add_parser("serve", help="Run the backend API")
    p_serve.add_argument("--host", default=None, help="Bind host (default: API_HOST)")
    p_serve.add_argument("--port", type=int, default=None, help="Bind port (default: API_PORT)")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending migrations")
    p_migrate.add_argument(
        "--target",
        choices=["local", "server"],
        default="local",
        help="Database to migrate (default: local)",
    )
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip the pre-migration backup")
    p_migrate.set_defaults(func=cmd_migrate)

    # sync
    p_sync = sub.add_parser("sync", help="Upload pending local sales once")
    p_sync.set_defaults(func=cmd_sync)

    # status
    p_status = sub.add_parser("status", help="Show migration and sync status")
    p_status.set_defaults(func=cmd_status)

    args = parser.parse_args()
    configure_logging()
    args.func(args)


if __name__ == "__main__":
    main()
