"""Database schema definition and initialization."""

from shop_pipeline.pipeline.stages import (
    ALL_QUOTE_STATUSES,
    ALL_WORK_ORDER_STATUSES,
)
from shop_pipeline.utils.constants import NOTIFICATION_SEVERITIES

SCHEMA_VERSION = 1


def _in_list(values: list[str]) -> str:
    return ", ".join(f"'{v}'" for v in values)


# Each statement is a separate string to avoid executescript issues
_SCHEMA_STATEMENTS = [
    """CREATE TABLE IF NOT EXISTS schema_version (
        version INTEGER PRIMARY KEY,
        applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",

    # Counters backing the sequential record ids (OT-0001, COT-0001)
    """CREATE TABLE IF NOT EXISTS id_sequences (
        name TEXT PRIMARY KEY,
        value INTEGER NOT NULL DEFAULT 0
    )""",

    # Work orders
    f"""CREATE TABLE IF NOT EXISTS work_orders (
        id TEXT PRIMARY KEY,
        client_name TEXT,
        vehicle TEXT,
        service_requested TEXT,
        -- no CHECK on stage: unknown values must stay readable so the
        -- resolver can report them
        stage TEXT NOT NULL DEFAULT 'reception',
        status TEXT NOT NULL DEFAULT 'scheduled'
            CHECK (status IN ({_in_list(ALL_WORK_ORDER_STATUSES)})),
        diagnostic_data TEXT NOT NULL DEFAULT '{{}}',
        linked_quote_ids TEXT NOT NULL DEFAULT '[]',
        notes TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",

    # Quotes
    f"""CREATE TABLE IF NOT EXISTS quotes (
        id TEXT PRIMARY KEY,
        work_order_id TEXT,
        status TEXT NOT NULL DEFAULT 'draft'
            CHECK (status IN ({_in_list(ALL_QUOTE_STATUSES)})),
        total REAL NOT NULL DEFAULT 0 CHECK (total >= 0),
        notes TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (work_order_id) REFERENCES work_orders(id)
            ON DELETE SET NULL
    )""",

    # Stage transitions of each work order
    """CREATE TABLE IF NOT EXISTS stage_history (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        work_order_id TEXT NOT NULL,
        stage TEXT NOT NULL,
        previous_stage TEXT,
        user_label TEXT,
        notes TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (work_order_id) REFERENCES work_orders(id)
            ON DELETE CASCADE
    )""",

    # Notifications
    f"""CREATE TABLE IF NOT EXISTS notifications (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        work_order_id TEXT,
        title TEXT NOT NULL,
        message TEXT,
        severity TEXT NOT NULL DEFAULT 'info'
            CHECK (severity IN ({_in_list(NOTIFICATION_SEVERITIES)})),
        source TEXT NOT NULL DEFAULT 'system',
        is_read INTEGER NOT NULL DEFAULT 0,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (work_order_id) REFERENCES work_orders(id)
            ON DELETE CASCADE
    )""",

    # Indexes
    "CREATE INDEX IF NOT EXISTS idx_work_orders_stage ON work_orders(stage)",
    "CREATE INDEX IF NOT EXISTS idx_work_orders_status ON work_orders(status)",
    "CREATE INDEX IF NOT EXISTS idx_quotes_work_order ON quotes(work_order_id)",
    "CREATE INDEX IF NOT EXISTS idx_stage_history_wo "
    "ON stage_history(work_order_id)",
    "CREATE INDEX IF NOT EXISTS idx_notifications_read "
    "ON notifications(is_read)",

    # Keep updated_at current
    """CREATE TRIGGER IF NOT EXISTS trg_work_orders_updated
        AFTER UPDATE ON work_orders
        FOR EACH ROW WHEN NEW.updated_at = OLD.updated_at
        BEGIN
            UPDATE work_orders SET updated_at = CURRENT_TIMESTAMP
            WHERE id = NEW.id;
        END""",
    """CREATE TRIGGER IF NOT EXISTS trg_quotes_updated
        AFTER UPDATE ON quotes
        FOR EACH ROW WHEN NEW.updated_at = OLD.updated_at
        BEGIN
            UPDATE quotes SET updated_at = CURRENT_TIMESTAMP
            WHERE id = NEW.id;
        END""",

    f"INSERT OR REPLACE INTO schema_version (version) VALUES ({SCHEMA_VERSION})",
]


def _get_schema_version(conn) -> int:
    """Get the current schema version, or 0 if no schema exists."""
    try:
        row = conn.execute(
            "SELECT MAX(version) as v FROM schema_version"
        ).fetchone()
        return row["v"] if row and row["v"] else 0
    except Exception:
        return 0


def initialize_database(db_connection):
    """Create all tables, indexes and triggers if they do not exist."""
    with db_connection.get_connection() as conn:
        conn.execute("PRAGMA foreign_keys = ON")
        version = _get_schema_version(conn)
        if version < SCHEMA_VERSION:
            for stmt in _SCHEMA_STATEMENTS:
                conn.execute(stmt)
