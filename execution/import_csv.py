"""Standalone CSV import script: import work orders or quotes from command line."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shop_pipeline.config import Config
from shop_pipeline.database.connection import DatabaseConnection
from shop_pipeline.database.schema import initialize_database
from shop_pipeline.database.repository import Repository
from shop_pipeline.io.csv_handler import import_quotes_csv, import_work_orders_csv
from shop_pipeline.pipeline.reconcile import reconcile_work_orders


def main():
    if len(sys.argv) < 3:
        print("Usage: python import_csv.py <work_orders|quotes> "
              "<filepath.csv> [--update] [--reconcile]")
        sys.exit(1)

    data_type = sys.argv[1].lower()
    filepath = sys.argv[2]
    update = "--update" in sys.argv
    reconcile = "--reconcile" in sys.argv

    importers = {
        "work_orders": import_work_orders_csv,
        "quotes": import_quotes_csv,
    }
    if data_type not in importers:
        print(f"Unknown data type: {data_type}. Use 'work_orders' or 'quotes'.")
        sys.exit(1)

    db = DatabaseConnection(Config.DATABASE_PATH)
    initialize_database(db)
    repo = Repository(db)

    print(f"Importing {data_type} from: {filepath}")
    if update:
        print("Mode: Update existing records")

    results = importers[data_type](repo, filepath, update_existing=update)

    print("\nResults:")
    print(f"  Imported: {results['imported']}")
    print(f"  Updated:  {results['updated']}")
    print(f"  Skipped:  {results['skipped']}")

    if results["errors"]:
        print(f"\nErrors ({len(results['errors'])}):")
        for err in results["errors"]:
            print(f"  - {err}")

    # Imported quotes and diagnostics can move stages; bring them in line
    if reconcile and (results["imported"] or results["updated"]):
        report = reconcile_work_orders(repo)
        print(f"\nReconciled: {report.updated} stage(s) updated, "
              f"{len(report.notes)} note(s)")


if __name__ == "__main__":
    main()
