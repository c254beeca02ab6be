"""Repository layer: all CRUD operations and queries."""

import json
from typing import Optional

from shop_pipeline.config import Config
from shop_pipeline.pipeline.stages import (
    Stage,
    WorkOrderStatus,
    parse_quote_status,
    parse_stage,
)
from shop_pipeline.utils.formatters import format_sequential_id

from .connection import DatabaseConnection
from .models import Notification, Quote, StageHistoryEntry, WorkOrder

# SQLite caps bound parameters per statement; stay well under it
_IN_CHUNK = 500


def _as_json(value, default: str) -> str:
    """Accept either already-encoded JSON text or a Python value."""
    if value is None or value == "":
        return default
    if isinstance(value, str):
        return value
    return json.dumps(value)


class Repository:
    """Provides all database operations for the application."""

    def __init__(self, db: DatabaseConnection):
        self.db = db

    # ── Record ids ──────────────────────────────────────────────

    def _next_id(self, conn, table: str, prefix: str) -> str:
        """Advance the table's counter to the first id not already taken.

        Imports may insert ids explicitly, so the counter can lag behind.
        """
        while True:
            conn.execute(
                "INSERT INTO id_sequences (name, value) VALUES (?, 1) "
                "ON CONFLICT(name) DO UPDATE SET value = value + 1",
                (table,),
            )
            row = conn.execute(
                "SELECT value FROM id_sequences WHERE name = ?", (table,)
            ).fetchone()
            candidate = format_sequential_id(prefix, row["value"])
            taken = conn.execute(
                f"SELECT 1 FROM {table} WHERE id = ?", (candidate,)
            ).fetchone()
            if taken is None:
                return candidate

    # ── Work Orders ─────────────────────────────────────────────

    def create_work_order(self, work_order: WorkOrder) -> str:
        """Insert a work order and return its id.

        An id is generated (``OT-0001`` style) when none is set.
        """
        if WorkOrderStatus.CANCELED == work_order.status:
            work_order.stage = Stage.CANCELED.value
        with self.db.get_connection() as conn:
            wo_id = work_order.id or self._next_id(
                conn, "work_orders", Config.WORK_ORDER_PREFIX,
            )
            conn.execute(
                "INSERT INTO work_orders (id, client_name, vehicle, "
                "service_requested, stage, status, diagnostic_data, "
                "linked_quote_ids, notes) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (wo_id, work_order.client_name, work_order.vehicle,
                 work_order.service_requested,
                 getattr(work_order.stage, "value", work_order.stage),
                 getattr(work_order.status, "value", work_order.status),
                 _as_json(work_order.diagnostic_data, "{}"),
                 _as_json(work_order.linked_quote_ids, "[]"),
                 work_order.notes),
            )
        work_order.id = wo_id
        return wo_id

    def get_all_work_orders(self, stage: str = None,
                            status: str = None) -> list[WorkOrder]:
        clauses = []
        params: list = []
        if stage:
            clauses.append("stage = ?")
            params.append(getattr(stage, "value", stage))
        if status:
            clauses.append("status = ?")
            params.append(getattr(status, "value", status))
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        # Insertion order; text ids stop sorting numerically past 9999
        rows = self.db.execute(
            f"SELECT * FROM work_orders{where} ORDER BY rowid", tuple(params)
        )
        return [WorkOrder(**dict(r)) for r in rows]

    def get_work_order_by_id(self, work_order_id: str) -> Optional[WorkOrder]:
        rows = self.db.execute(
            "SELECT * FROM work_orders WHERE id = ?", (work_order_id,)
        )
        return WorkOrder(**dict(rows[0])) if rows else None

    def search_work_orders(self, query: str) -> list[WorkOrder]:
        pattern = f"%{query}%"
        rows = self.db.execute(
            "SELECT * FROM work_orders "
            "WHERE id LIKE ? OR client_name LIKE ? OR vehicle LIKE ? "
            "OR service_requested LIKE ? ORDER BY rowid",
            (pattern, pattern, pattern, pattern),
        )
        return [WorkOrder(**dict(r)) for r in rows]

    def update_work_order(self, work_order: WorkOrder):
        if WorkOrderStatus.CANCELED == work_order.status:
            work_order.stage = Stage.CANCELED.value
        with self.db.get_connection() as conn:
            conn.execute(
                "UPDATE work_orders SET client_name = ?, vehicle = ?, "
                "service_requested = ?, stage = ?, status = ?, "
                "diagnostic_data = ?, linked_quote_ids = ?, notes = ? "
                "WHERE id = ?",
                (work_order.client_name, work_order.vehicle,
                 work_order.service_requested,
                 getattr(work_order.stage, "value", work_order.stage),
                 getattr(work_order.status, "value", work_order.status),
                 _as_json(work_order.diagnostic_data, "{}"),
                 _as_json(work_order.linked_quote_ids, "[]"),
                 work_order.notes, work_order.id),
            )

    def update_work_order_stage(self, work_order_id: str, stage):
        """Set a work order's stage. Rejects values that are not stages."""
        parsed = parse_stage(stage)
        if parsed is None:
            raise ValueError(f"Unknown stage: {stage!r}")
        with self.db.get_connection() as conn:
            cursor = conn.execute(
                "UPDATE work_orders SET stage = ? WHERE id = ?",
                (parsed.value, work_order_id),
            )
            if cursor.rowcount == 0:
                raise ValueError(f"Work order {work_order_id} not found")

    def set_linked_quote_ids(self, work_order_id: str, quote_ids: list[str]):
        with self.db.get_connection() as conn:
            cursor = conn.execute(
                "UPDATE work_orders SET linked_quote_ids = ? WHERE id = ?",
                (json.dumps(list(quote_ids)), work_order_id),
            )
            if cursor.rowcount == 0:
                raise ValueError(f"Work order {work_order_id} not found")

    def delete_work_order(self, work_order_id: str):
        with self.db.get_connection() as conn:
            conn.execute(
                "DELETE FROM work_orders WHERE id = ?", (work_order_id,)
            )

    # ── Quotes ──────────────────────────────────────────────────

    def create_quote(self, quote: Quote) -> str:
        if parse_quote_status(quote.status) is None:
            raise ValueError(f"Unknown quote status: {quote.status!r}")
        with self.db.get_connection() as conn:
            quote_id = quote.id or self._next_id(
                conn, "quotes", Config.QUOTE_PREFIX,
            )
            conn.execute(
                "INSERT INTO quotes (id, work_order_id, status, total, notes) "
                "VALUES (?, ?, ?, ?, ?)",
                (quote_id, quote.work_order_id,
                 getattr(quote.status, "value", quote.status),
                 quote.total, quote.notes),
            )
        quote.id = quote_id
        return quote_id

    def get_all_quotes(self) -> list[Quote]:
        rows = self.db.execute("SELECT * FROM quotes ORDER BY rowid")
        return [Quote(**dict(r)) for r in rows]

    def get_quote_by_id(self, quote_id: str) -> Optional[Quote]:
        rows = self.db.execute(
            "SELECT * FROM quotes WHERE id = ?", (quote_id,)
        )
        return Quote(**dict(rows[0])) if rows else None

    def get_quotes_by_ids(self, quote_ids) -> dict[str, Quote]:
        """Batch-fetch quotes. Ids that do not exist are simply absent."""
        ids = list(dict.fromkeys(quote_ids))
        found: dict[str, Quote] = {}
        for start in range(0, len(ids), _IN_CHUNK):
            chunk = ids[start:start + _IN_CHUNK]
            placeholders = ", ".join("?" for _ in chunk)
            rows = self.db.execute(
                f"SELECT * FROM quotes WHERE id IN ({placeholders})",
                tuple(chunk),
            )
            for r in rows:
                quote = Quote(**dict(r))
                found[quote.id] = quote
        return found

    def get_quotes_for_work_order(self, work_order_id: str) -> list[Quote]:
        rows = self.db.execute(
            "SELECT * FROM quotes WHERE work_order_id = ? ORDER BY rowid",
            (work_order_id,),
        )
        return [Quote(**dict(r)) for r in rows]

    def update_quote_status(self, quote_id: str, status) -> Quote:
        """Change a quote's status and return the updated quote."""
        parsed = parse_quote_status(status)
        if parsed is None:
            raise ValueError(f"Unknown quote status: {status!r}")
        with self.db.get_connection() as conn:
            cursor = conn.execute(
                "UPDATE quotes SET status = ? WHERE id = ?",
                (parsed.value, quote_id),
            )
            if cursor.rowcount == 0:
                raise ValueError(f"Quote {quote_id} not found")
        return self.get_quote_by_id(quote_id)

    def delete_quote(self, quote_id: str):
        with self.db.get_connection() as conn:
            conn.execute("DELETE FROM quotes WHERE id = ?", (quote_id,))

    # ── Stage History ───────────────────────────────────────────

    def add_stage_history(self, entry: StageHistoryEntry) -> int:
        with self.db.get_connection() as conn:
            cursor = conn.execute(
                "INSERT INTO stage_history (work_order_id, stage, "
                "previous_stage, user_label, notes) VALUES (?, ?, ?, ?, ?)",
                (entry.work_order_id,
                 getattr(entry.stage, "value", entry.stage),
                 entry.previous_stage, entry.user_label, entry.notes),
            )
            return cursor.lastrowid

    def get_stage_history(self, work_order_id: str) -> list[StageHistoryEntry]:
        rows = self.db.execute(
            "SELECT * FROM stage_history WHERE work_order_id = ? "
            "ORDER BY id",
            (work_order_id,),
        )
        return [StageHistoryEntry(**dict(r)) for r in rows]

    # ── Notifications ───────────────────────────────────────────

    def create_notification(self, notification: Notification) -> int:
        with self.db.get_connection() as conn:
            cursor = conn.execute("""
                INSERT INTO notifications
                    (work_order_id, title, message, severity, source)
                VALUES (?, ?, ?, ?, ?)
            """, (
                notification.work_order_id, notification.title,
                notification.message, notification.severity,
                notification.source,
            ))
            return cursor.lastrowid

    def get_notifications(self, unread_only: bool = False,
                          limit: int = 50) -> list[Notification]:
        if unread_only:
            rows = self.db.execute("""
                SELECT * FROM notifications WHERE is_read = 0
                ORDER BY id DESC LIMIT ?
            """, (limit,))
        else:
            rows = self.db.execute("""
                SELECT * FROM notifications
                ORDER BY id DESC LIMIT ?
            """, (limit,))
        return [Notification(**dict(r)) for r in rows]

    def mark_notification_read(self, notification_id: int):
        with self.db.get_connection() as conn:
            conn.execute(
                "UPDATE notifications SET is_read = 1 WHERE id = ?",
                (notification_id,),
            )
