"""
Versioned schema migrations for the two VentaFacil databases.

- "local": the device ledger (products, sales, sale_items)
- "server": the backend of record (users, products, sales, sale_items)

Each target reads `vNNN_<name>.sql` files from its own directory. Applied
files are recorded in `schema_migrations` with a content checksum; a file
whose checksum changed after being applied stops the run. An existing
database is copied aside first and restored if migrating raises.
"""

import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Literal

import aiosqlite

from ventafacil.config import get_logger, get_settings

logger = get_logger(__name__)

Target = Literal["local", "server"]

MIGRATIONS_DIR = Path(__file__).parent
LOCAL_MIGRATIONS_DIR = MIGRATIONS_DIR / "local"
SERVER_MIGRATIONS_DIR = MIGRATIONS_DIR / "server"

MIGRATION_FILE_RE = re.compile(r"^v(\d+)_(\w+)\.sql$")

REQUIRED_TABLES: dict[str, tuple[str, ...]] = {
    "local": ("products", "sales", "sale_items", "schema_migrations"),
    "server": ("users", "products", "sales", "sale_items", "schema_migrations"),
}

SCHEMA_MIGRATIONS_DDL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    checksum TEXT,
    applied_at TEXT DEFAULT (datetime('now')),
    execution_time_ms INTEGER
)
"""


@dataclass
class MigrationInfo:
    """One migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = MIGRATION_FILE_RE.match(path.name)
        if match is None:
            raise ValueError(f"Invalid migration filename: {path.name}")

        digest = hashlib.sha256(path.read_bytes()).hexdigest()
        return cls(
            version=match.group(1),
            name=match.group(2),
            path=path,
            checksum=digest[:16],
        )


@dataclass
class MigrationResult:
    """Outcome of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def migrations_dir_for(target: Target) -> Path:
    return {"local": LOCAL_MIGRATIONS_DIR, "server": SERVER_MIGRATIONS_DIR}[target]


def default_db_path(target: Target) -> Path:
    settings = get_settings()
    storage = settings.storage if target == "local" else settings.server_storage
    return storage.db_path


def discover_migrations(migrations_dir: Path) -> list[MigrationInfo]:
    """Migration files in version order. Misnamed files are skipped."""
    found = []
    for path in migrations_dir.glob("v*.sql"):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError:
            logger.warning("skipping_invalid_migration", path=str(path))
    return sorted(found, key=lambda m: int(m.version))


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied version -> checksum. Empty when the tracking table is missing."""
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    except aiosqlite.OperationalError:
        return {}
    return {version: checksum for version, checksum in await cursor.fetchall()}


async def _apply(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    logger.info("applying_migration", version=migration.version, name=migration.name)
    started = time.monotonic()

    def elapsed_ms() -> int:
        return int((time.monotonic() - started) * 1000)

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            """
            INSERT OR REPLACE INTO schema_migrations
                (version, name, checksum, execution_time_ms)
            VALUES (?, ?, ?, ?)
            """,
            (migration.version, migration.name, migration.checksum, elapsed_ms()),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(
            migration.version, migration.name, False, elapsed_ms(), error=str(e)
        )

    logger.info(
        "migration_applied",
        version=migration.version,
        execution_time_ms=elapsed_ms(),
    )
    return MigrationResult(migration.version, migration.name, True, elapsed_ms())


async def _foreign_key_violations(conn: aiosqlite.Connection) -> int:
    cursor = await conn.execute("PRAGMA foreign_key_check")
    return len(await cursor.fetchall())


def create_backup(db_path: Path) -> Path:
    """Copy the database next to itself with a timestamped name."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_name(f"{db_path.stem}.backup_{stamp}{db_path.suffix}")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


async def initialize_database(
    target: Target = "local",
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Apply every pending migration of `target` to `db_path`.

    Returns one result per migration attempted; migrations already applied
    are not listed, so an up-to-date database yields an empty list. The run
    stops at the first failed migration, at a changed checksum, or when a
    migration leaves foreign key violations behind.
    """
    db_path = db_path or default_db_path(target)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", target=target, db_path=str(db_path))

    backup_path = None
    if create_backup_before and db_path.exists():
        backup_path = create_backup(db_path)

    results: list[MigrationResult] = []
    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")
            await conn.execute(SCHEMA_MIGRATIONS_DDL)
            await conn.commit()

            applied = await get_applied_migrations(conn)
            for migration in discover_migrations(migrations_dir_for(target)):
                recorded = applied.get(migration.version)
                if recorded == migration.checksum:
                    continue
                if recorded is not None:
                    logger.error("migration_checksum_changed", version=migration.version)
                    break

                result = await _apply(conn, migration)
                results.append(result)
                if not result.success:
                    break

                violations = await _foreign_key_violations(conn)
                if violations:
                    logger.error(
                        "migration_left_fk_violations",
                        version=migration.version,
                        violations=violations,
                    )
                    break
    except Exception as e:
        logger.error("database_initialization_failed", target=target, error=str(e))
        if backup_path is not None:
            shutil.copy2(backup_path, db_path)
            logger.info("database_restored_from_backup", backup_path=str(backup_path))
        raise

    if backup_path is not None and all(r.success for r in results):
        backup_path.unlink()

    return results


# Name used by the CLI and the API lifespan
run_migrations = initialize_database


async def get_migration_status(
    target: Target = "local", db_path: Path | None = None
) -> dict:
    """Current version plus applied and pending migration versions."""
    db_path = db_path or default_db_path(target)
    versions = [m.version for m in discover_migrations(migrations_dir_for(target))]

    applied: list[str] = []
    if db_path.exists():
        async with aiosqlite.connect(db_path) as conn:
            applied = sorted(await get_applied_migrations(conn), key=int)

    return {
        "exists": db_path.exists(),
        "current_version": applied[-1] if applied else None,
        "applied_migrations": applied,
        "pending_migrations": [v for v in versions if v not in applied],
        "total_migrations": len(versions),
    }


async def verify_schema_integrity(
    target: Target = "local", db_path: Path | None = None
) -> list[dict]:
    """Foreign key, SQLite integrity and required-table checks."""
    db_path = db_path or default_db_path(target)

    async with aiosqlite.connect(db_path) as conn:
        violations = await _foreign_key_violations(conn)

        cursor = await conn.execute("PRAGMA integrity_check")
        (integrity,) = await cursor.fetchone()

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        tables = {name for (name,) in await cursor.fetchall()}

    missing = [t for t in REQUIRED_TABLES[target] if t not in tables]
    return [
        {
            "check": "foreign_keys",
            "status": "PASS" if violations == 0 else "FAIL",
            "violations": violations,
        },
        {
            "check": "integrity",
            "status": "PASS" if integrity == "ok" else "FAIL",
            "result": integrity,
        },
        {
            "check": "required_tables",
            "status": "PASS" if not missing else "FAIL",
            "missing": missing,
        },
    ]
