"""Standalone reconciliation script: correct drifted work order stages."""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shop_pipeline.config import Config
from shop_pipeline.database.connection import DatabaseConnection
from shop_pipeline.database.schema import initialize_database
from shop_pipeline.database.repository import Repository
from shop_pipeline.io.csv_handler import export_reconciliation_csv
from shop_pipeline.io.excel_handler import export_reconciliation_excel
from shop_pipeline.pipeline.reconcile import reconcile_work_orders
from shop_pipeline.utils.formatters import format_stage_change


def main():
    args = sys.argv[1:]
    if "-h" in args or "--help" in args:
        print("Usage: python reconcile_stages.py [--dry-run] "
              "[--include-delivered] [--export <report.csv|report.xlsx>]")
        sys.exit(0)

    logging.basicConfig(level=Config.LOG_LEVEL,
                        format="%(levelname)s %(name)s: %(message)s")

    dry_run = "--dry-run" in args
    include_delivered = "--include-delivered" in args
    export_path = None
    if "--export" in args:
        idx = args.index("--export")
        if idx + 1 >= len(args):
            print("--export needs a file path")
            sys.exit(1)
        export_path = Path(args[idx + 1])

    db = DatabaseConnection(Config.DATABASE_PATH)
    initialize_database(db)
    repo = Repository(db)

    report = reconcile_work_orders(
        repo,
        dry_run=dry_run,
        skip_delivered=False if include_delivered else None,
    )

    print(f"\nResults{' (dry run)' if dry_run else ''}:")
    print(f"  Checked:   {report.checked}")
    print(f"  Updated:   {report.updated}")
    print(f"  Unchanged: {report.unchanged}")
    print(f"  Skipped:   {report.skipped}")

    for change in report.changes:
        print(f"  {change.work_order_id}: "
              f"{format_stage_change(change.previous_stage, change.new_stage)}"
              f" ({change.reason})")

    if report.notes:
        print(f"\nNotes ({len(report.notes)}):")
        for note in report.notes:
            print(f"  - {note.work_order_id}: {note.message}")

    if report.errors:
        print(f"\nErrors ({len(report.errors)}):")
        for err in report.errors:
            print(f"  - {err}")

    if export_path is not None:
        if export_path.suffix.lower() == ".xlsx":
            export_reconciliation_excel(report, export_path)
        else:
            export_reconciliation_csv(report, export_path)
        print(f"\nReport written to {export_path}")

    sys.exit(1 if report.errors else 0)


if __name__ == "__main__":
    main()
