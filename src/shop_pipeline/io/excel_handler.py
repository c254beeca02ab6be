"""Excel (XLSX) export for work orders and reconciliation runs."""

from pathlib import Path

from openpyxl import Workbook

from shop_pipeline.database.repository import Repository
from shop_pipeline.pipeline.reconcile import ReconciliationReport
from shop_pipeline.utils.formatters import format_stage, format_status


def _autofit(ws):
    # Approximate; openpyxl has no real auto-fit
    for col in ws.columns:
        max_len = max(len(str(cell.value or "")) for cell in col)
        ws.column_dimensions[col[0].column_letter].width = min(max_len + 2, 40)


def export_work_orders_excel(repo: Repository, filepath: str | Path) -> int:
    """Export all work orders to an Excel workbook. Returns row count."""
    work_orders = repo.get_all_work_orders()
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    ws = wb.active
    ws.title = "Work Orders"

    ws.append([
        "Work Order #", "Client", "Vehicle", "Service", "Stage",
        "Status", "Linked Quotes", "Notes",
    ])
    for wo in work_orders:
        ws.append([
            wo.id,
            wo.client_name,
            wo.vehicle,
            wo.service_requested,
            format_stage(wo.stage),
            format_status(wo.status),
            ", ".join(wo.linked_quote_id_list),
            wo.notes,
        ])

    _autofit(ws)
    wb.save(filepath)
    return len(work_orders)


def export_reconciliation_excel(report: ReconciliationReport,
                                filepath: str | Path) -> int:
    """Export a reconciliation report: a Changes sheet and a Notes sheet.

    Returns the number of change rows written.
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    ws = wb.active
    ws.title = "Changes"
    ws.append(["Work Order #", "From", "To", "Reason"])
    for change in report.changes:
        ws.append([
            change.work_order_id,
            format_stage(change.previous_stage),
            format_stage(change.new_stage),
            change.reason,
        ])
    _autofit(ws)

    notes_ws = wb.create_sheet("Notes")
    notes_ws.append(["Work Order #", "Kind", "Reference", "Message"])
    for note in report.notes:
        notes_ws.append([
            note.work_order_id, note.kind, note.reference, note.message,
        ])
    _autofit(notes_ws)

    if report.errors:
        errors_ws = wb.create_sheet("Errors")
        errors_ws.append(["Error"])
        for err in report.errors:
            errors_ws.append([err])
        _autofit(errors_ws)

    wb.save(filepath)
    return len(report.changes)
