import aiosqlite
import structlog

from app.config import settings

logger = structlog.get_logger()

_db: aiosqlite.Connection | None = None

DDL_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS units (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS toners (
        id TEXT PRIMARY KEY,
        model TEXT NOT NULL,
        full_weight REAL NOT NULL DEFAULT 0,
        empty_weight REAL NOT NULL DEFAULT 0,
        compatible_printers TEXT NOT NULL DEFAULT '',
        color TEXT NOT NULL DEFAULT 'Black',
        iso_area REAL NOT NULL DEFAULT 0.05,
        sheet_capacity INTEGER NOT NULL DEFAULT 0,
        kind TEXT NOT NULL DEFAULT 'Compatível',
        price REAL NOT NULL DEFAULT 0,
        weight_delta REAL NOT NULL DEFAULT 0,
        price_per_sheet REAL NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS returns (
        id TEXT PRIMARY KEY,
        client_id INTEGER NOT NULL,
        toner_id TEXT NOT NULL REFERENCES toners(id),
        returned_weight REAL NOT NULL DEFAULT 0,
        unit_id TEXT NOT NULL REFERENCES units(id),
        destination TEXT NOT NULL,
        recovered_value REAL NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS warranties (
        id TEXT PRIMARY KEY,
        requester TEXT NOT NULL DEFAULT '',
        request_date TEXT,
        product_code TEXT NOT NULL DEFAULT '',
        serial_number TEXT NOT NULL DEFAULT '',
        kind TEXT,
        purchase_invoice TEXT NOT NULL DEFAULT '',
        shipment_invoice TEXT NOT NULL DEFAULT '',
        return_invoice TEXT NOT NULL DEFAULT '',
        purchase_invoice_key TEXT NOT NULL DEFAULT '',
        shipment_invoice_key TEXT NOT NULL DEFAULT '',
        return_invoice_key TEXT NOT NULL DEFAULT '',
        warranty_date TEXT,
        ticket_number TEXT NOT NULL DEFAULT '',
        status TEXT NOT NULL DEFAULT 'Aberta',
        supplier TEXT NOT NULL DEFAULT '',
        quantity REAL NOT NULL DEFAULT 1,
        defect_notes TEXT NOT NULL DEFAULT '',
        total_value REAL NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS nonconformities (
        id TEXT PRIMARY KEY,
        number TEXT NOT NULL,
        opened_at TEXT NOT NULL,
        opened_by TEXT NOT NULL,
        description TEXT NOT NULL,
        kind TEXT NOT NULL,
        severity TEXT NOT NULL,
        department TEXT NOT NULL,
        root_cause TEXT,
        immediate_action TEXT,
        action_owner TEXT,
        due_date TEXT,
        solution_evidence TEXT,
        status TEXT NOT NULL DEFAULT 'Aberta',
        closed_at TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tcos (
        id TEXT PRIMARY KEY,
        model TEXT NOT NULL,
        manufacturer TEXT NOT NULL DEFAULT '',
        kind TEXT NOT NULL DEFAULT '',
        printer_price REAL NOT NULL DEFAULT 0,
        pis REAL NOT NULL DEFAULT 0,
        ipi REAL NOT NULL DEFAULT 0,
        icms REAL NOT NULL DEFAULT 0,
        cofins REAL NOT NULL DEFAULT 0,
        accessories REAL NOT NULL DEFAULT 0,
        acquisition_total REAL NOT NULL DEFAULT 0,
        notes TEXT NOT NULL DEFAULT '',
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tco_operating_costs (
        id TEXT PRIMARY KEY,
        tco_id TEXT NOT NULL REFERENCES tcos(id) ON DELETE CASCADE,
        title TEXT NOT NULL,
        value REAL NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tco_indirect_costs (
        id TEXT PRIMARY KEY,
        tco_id TEXT NOT NULL REFERENCES tcos(id) ON DELETE CASCADE,
        title TEXT NOT NULL,
        value REAL NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_units_name ON units (name)",
    "CREATE INDEX IF NOT EXISTS idx_toners_model ON toners (model)",
    "CREATE INDEX IF NOT EXISTS idx_returns_created ON returns (created_at)",
]

# Columns the record store may read or write, per table.
TABLE_COLUMNS: dict[str, frozenset[str]] = {
    "units": frozenset({"id", "name", "created_at"}),
    "toners": frozenset(
        {
            "id", "model", "full_weight", "empty_weight", "compatible_printers",
            "color", "iso_area", "sheet_capacity", "kind", "price",
            "weight_delta", "price_per_sheet", "created_at",
        }
    ),
    "returns": frozenset(
        {
            "id", "client_id", "toner_id", "returned_weight", "unit_id",
            "destination", "recovered_value", "created_at",
        }
    ),
    "warranties": frozenset(
        {
            "id", "requester", "request_date", "product_code", "serial_number",
            "kind", "purchase_invoice", "shipment_invoice", "return_invoice",
            "purchase_invoice_key", "shipment_invoice_key", "return_invoice_key",
            "warranty_date", "ticket_number", "status", "supplier", "quantity",
            "defect_notes", "total_value", "created_at",
        }
    ),
    "nonconformities": frozenset(
        {
            "id", "number", "opened_at", "opened_by", "description", "kind",
            "severity", "department", "root_cause", "immediate_action",
            "action_owner", "due_date", "solution_evidence", "status",
            "closed_at", "created_at",
        }
    ),
    "tcos": frozenset(
        {
            "id", "model", "manufacturer", "kind", "printer_price", "pis", "ipi",
            "icms", "cofins", "accessories", "acquisition_total", "notes",
            "created_at",
        }
    ),
    "tco_operating_costs": frozenset({"id", "tco_id", "title", "value", "created_at"}),
    "tco_indirect_costs": frozenset({"id", "tco_id", "title", "value", "created_at"}),
}


async def connect_database(db_path: str) -> aiosqlite.Connection:
    db = await aiosqlite.connect(db_path)
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA journal_mode=WAL")
    await db.execute("PRAGMA foreign_keys=ON")

    for ddl in DDL_STATEMENTS:
        await db.execute(ddl)
    await db.commit()
    return db


async def init_database() -> None:
    global _db
    _db = await connect_database(settings.db_path)
    logger.info("database_initialized", path=settings.db_path)


async def close_database() -> None:
    global _db
    if _db is not None:
        await _db.close()
        _db = None
        logger.info("database_closed")


def get_db() -> aiosqlite.Connection:
    if _db is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _db


async def check_health() -> None:
    db = get_db()
    cursor = await db.execute("SELECT 1")
    await cursor.close()
