"""CSV import and export for work orders, quotes and reconciliation runs."""

import csv
import json
from pathlib import Path

from shop_pipeline.database.models import Quote, WorkOrder
from shop_pipeline.database.repository import Repository
from shop_pipeline.io.validators import validate_quote_row, validate_work_order_row
from shop_pipeline.pipeline.reconcile import ReconciliationReport
from shop_pipeline.pipeline.resolver import NOTE_UNRESOLVED_REFERENCE

WORK_ORDER_CSV_COLUMNS = [
    "id", "client_name", "vehicle", "service_requested", "stage",
    "status", "diagnostic_data", "linked_quote_ids", "notes",
]

QUOTE_CSV_COLUMNS = [
    "id", "work_order_id", "status", "total", "notes",
]

RECONCILIATION_CSV_COLUMNS = [
    "work_order_id", "previous_stage", "new_stage", "reason",
    "unresolved_quotes",
]

# Linked quote ids are written as "COT-0001;COT-0002" in CSV files
_ID_SEPARATOR = ";"


def _split_ids(raw: str) -> list[str]:
    return [p.strip() for p in (raw or "").split(_ID_SEPARATOR) if p.strip()]


def export_work_orders_csv(repo: Repository, filepath: str | Path) -> int:
    """Export all work orders to CSV. Returns the number of rows written."""
    work_orders = repo.get_all_work_orders()
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=WORK_ORDER_CSV_COLUMNS)
        writer.writeheader()
        for wo in work_orders:
            writer.writerow({
                "id": wo.id,
                "client_name": wo.client_name,
                "vehicle": wo.vehicle,
                "service_requested": wo.service_requested,
                "stage": wo.stage,
                "status": wo.status,
                "diagnostic_data": wo.diagnostic_data,
                "linked_quote_ids": _ID_SEPARATOR.join(wo.linked_quote_id_list),
                "notes": wo.notes,
            })
    return len(work_orders)


def export_quotes_csv(repo: Repository, filepath: str | Path) -> int:
    """Export all quotes to CSV. Returns the number of rows written."""
    quotes = repo.get_all_quotes()
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=QUOTE_CSV_COLUMNS)
        writer.writeheader()
        for quote in quotes:
            writer.writerow({
                "id": quote.id,
                "work_order_id": quote.work_order_id,
                "status": quote.status,
                "total": quote.total,
                "notes": quote.notes,
            })
    return len(quotes)


def export_reconciliation_csv(report: ReconciliationReport,
                              filepath: str | Path) -> int:
    """Write one row per stage change in a reconciliation report."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=RECONCILIATION_CSV_COLUMNS)
        writer.writeheader()
        for change in report.changes:
            unresolved = [n.reference for n in change.notes
                          if n.kind == NOTE_UNRESOLVED_REFERENCE]
            writer.writerow({
                "work_order_id": change.work_order_id,
                "previous_stage": change.previous_stage,
                "new_stage": change.new_stage.value,
                "reason": change.reason,
                "unresolved_quotes": _ID_SEPARATOR.join(unresolved),
            })
    return len(report.changes)


def import_work_orders_csv(
    repo: Repository,
    filepath: str | Path,
    update_existing: bool = False,
) -> dict:
    """Import work orders from CSV. Returns results dict with counts and errors."""
    filepath = Path(filepath)
    results = {"imported": 0, "updated": 0, "skipped": 0, "errors": []}

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row_num, row in enumerate(reader, start=2):
                errors = validate_work_order_row(row, row_num)
                if errors:
                    results["errors"].extend(errors)
                    results["skipped"] += 1
                    continue

                wo_id = (row.get("id") or "").strip() or None
                existing = repo.get_work_order_by_id(wo_id) if wo_id else None

                work_order = WorkOrder(
                    id=wo_id,
                    client_name=(row.get("client_name") or "").strip(),
                    vehicle=(row.get("vehicle") or "").strip(),
                    service_requested=(
                        row.get("service_requested") or ""
                    ).strip(),
                    stage=(row.get("stage") or "").strip() or "reception",
                    status=(row.get("status") or "").strip() or "scheduled",
                    diagnostic_data=(
                        row.get("diagnostic_data") or ""
                    ).strip() or "{}",
                    linked_quote_ids=json.dumps(
                        _split_ids(row.get("linked_quote_ids"))
                    ),
                    notes=(row.get("notes") or "").strip(),
                )

                if existing and update_existing:
                    repo.update_work_order(work_order)
                    results["updated"] += 1
                elif existing:
                    results["skipped"] += 1
                else:
                    repo.create_work_order(work_order)
                    results["imported"] += 1

    except Exception as e:
        results["errors"].append(f"File error: {e}")

    return results


def import_quotes_csv(
    repo: Repository,
    filepath: str | Path,
    update_existing: bool = False,
) -> dict:
    """Import quotes from CSV, linking each one to its work order.

    Rows whose work order does not exist are skipped with an error.
    """
    filepath = Path(filepath)
    results = {"imported": 0, "updated": 0, "skipped": 0, "errors": []}

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row_num, row in enumerate(reader, start=2):
                errors = validate_quote_row(row, row_num)
                if errors:
                    results["errors"].extend(errors)
                    results["skipped"] += 1
                    continue

                wo_id = row["work_order_id"].strip()
                work_order = repo.get_work_order_by_id(wo_id)
                if work_order is None:
                    results["errors"].append(
                        f"Row {row_num}: work order {wo_id} not found"
                    )
                    results["skipped"] += 1
                    continue

                quote_id = (row.get("id") or "").strip() or None
                existing = repo.get_quote_by_id(quote_id) if quote_id else None
                status = (row.get("status") or "").strip() or "draft"

                if existing and update_existing:
                    repo.update_quote_status(existing.id, status)
                    quote_id = existing.id
                    results["updated"] += 1
                elif existing:
                    results["skipped"] += 1
                    continue
                else:
                    quote_id = repo.create_quote(Quote(
                        id=quote_id,
                        work_order_id=wo_id,
                        status=status,
                        total=float(row.get("total") or 0),
                        notes=(row.get("notes") or "").strip(),
                    ))
                    results["imported"] += 1

                linked = work_order.linked_quote_id_list
                if quote_id not in linked:
                    repo.set_linked_quote_ids(wo_id, linked + [quote_id])

    except Exception as e:
        results["errors"].append(f"File error: {e}")

    return results
