import asyncio

import aiosqlite
import structlog

from langmap.config import settings

logger = structlog.get_logger()

_db: aiosqlite.Connection | None = None
_db_lock: asyncio.Lock | None = None

DDL_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS cities (
        id TEXT PRIMARY KEY,
        slug TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT (datetime('now')),
        updated_at TEXT NOT NULL DEFAULT (datetime('now'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS languages (
        id TEXT PRIMARY KEY,
        city_id TEXT NOT NULL REFERENCES cities(id) ON DELETE CASCADE,
        endonym TEXT,
        iso_639_3_code TEXT,
        created_at TEXT NOT NULL DEFAULT (datetime('now')),
        updated_at TEXT NOT NULL DEFAULT (datetime('now'))
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS language_translations (
        id TEXT PRIMARY KEY,
        language_id TEXT NOT NULL REFERENCES languages(id) ON DELETE CASCADE,
        locale_code TEXT NOT NULL,
        name TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT (datetime('now')),
        updated_at TEXT NOT NULL DEFAULT (datetime('now')),
        UNIQUE(language_id, locale_code)
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS ix_language_translations_name
    ON language_translations (name, locale_code)
    """,
    """
    CREATE TABLE IF NOT EXISTS taxonomy_types (
        id TEXT PRIMARY KEY,
        city_id TEXT NOT NULL REFERENCES cities(id) ON DELETE CASCADE,
        slug TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT (datetime('now')),
        UNIQUE(city_id, slug)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS taxonomy_type_translations (
        taxonomy_type_id TEXT NOT NULL REFERENCES taxonomy_types(id) ON DELETE CASCADE,
        locale_code TEXT NOT NULL,
        name TEXT NOT NULL,
        PRIMARY KEY (taxonomy_type_id, locale_code)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS taxonomy_values (
        id TEXT PRIMARY KEY,
        taxonomy_type_id TEXT NOT NULL REFERENCES taxonomy_types(id) ON DELETE CASCADE,
        slug TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT (datetime('now')),
        UNIQUE(taxonomy_type_id, slug)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS taxonomy_value_translations (
        taxonomy_value_id TEXT NOT NULL REFERENCES taxonomy_values(id) ON DELETE CASCADE,
        locale_code TEXT NOT NULL,
        name TEXT NOT NULL,
        PRIMARY KEY (taxonomy_value_id, locale_code)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS language_taxonomies (
        language_id TEXT NOT NULL REFERENCES languages(id) ON DELETE CASCADE,
        taxonomy_value_id TEXT NOT NULL REFERENCES taxonomy_values(id) ON DELETE CASCADE,
        created_at TEXT NOT NULL DEFAULT (datetime('now')),
        PRIMARY KEY (language_id, taxonomy_value_id)
    )
    """,
]

# Columns the store gateway may address per table. Identifiers never come
# from request data; anything outside this map is rejected before SQL is built.
TABLE_COLUMNS: dict[str, frozenset[str]] = {
    "cities": frozenset({"id", "slug", "name", "created_at", "updated_at"}),
    "languages": frozenset(
        {"id", "city_id", "endonym", "iso_639_3_code", "created_at", "updated_at"}
    ),
    "language_translations": frozenset(
        {"id", "language_id", "locale_code", "name", "created_at", "updated_at"}
    ),
    "taxonomy_types": frozenset({"id", "city_id", "slug", "created_at"}),
    "taxonomy_type_translations": frozenset({"taxonomy_type_id", "locale_code", "name"}),
    "taxonomy_values": frozenset({"id", "taxonomy_type_id", "slug", "created_at"}),
    "taxonomy_value_translations": frozenset({"taxonomy_value_id", "locale_code", "name"}),
    "language_taxonomies": frozenset({"language_id", "taxonomy_value_id", "created_at"}),
}


async def create_schema(db: aiosqlite.Connection) -> None:
    await db.execute("PRAGMA foreign_keys=ON")
    for ddl in DDL_STATEMENTS:
        await db.execute(ddl)
    await db.commit()


async def init_database() -> None:
    global _db, _db_lock
    _db = await aiosqlite.connect(settings.db_path)
    _db_lock = asyncio.Lock()
    _db.row_factory = aiosqlite.Row
    await _db.execute("PRAGMA journal_mode=WAL")
    await create_schema(_db)

    logger.info("database_initialized", path=settings.db_path)


async def close_database() -> None:
    global _db, _db_lock
    if _db is not None:
        await _db.close()
        _db = None
        _db_lock = None
        logger.info("database_closed")


def get_db() -> aiosqlite.Connection:
    if _db is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _db


def get_db_lock() -> asyncio.Lock:
    if _db_lock is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _db_lock


async def check_health() -> None:
    db = get_db()
    cursor = await db.execute("SELECT 1")
    await cursor.close()
