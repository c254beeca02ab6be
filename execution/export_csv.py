"""Standalone CSV export script: export work orders or quotes from command line."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shop_pipeline.config import Config
from shop_pipeline.database.connection import DatabaseConnection
from shop_pipeline.database.schema import initialize_database
from shop_pipeline.database.repository import Repository
from shop_pipeline.io.csv_handler import export_quotes_csv, export_work_orders_csv


def main():
    if len(sys.argv) < 2:
        print("Usage: python export_csv.py <work_orders|quotes> [output.csv]")
        sys.exit(1)

    data_type = sys.argv[1].lower()
    if len(sys.argv) > 2:
        filepath = sys.argv[2]
    else:
        filepath = Path(Config.EXPORT_DIRECTORY) / f"{data_type}.csv"

    db = DatabaseConnection(Config.DATABASE_PATH)
    initialize_database(db)
    repo = Repository(db)

    if data_type == "work_orders":
        count = export_work_orders_csv(repo, filepath)
    elif data_type == "quotes":
        count = export_quotes_csv(repo, filepath)
    else:
        print(f"Unknown data type: {data_type}. Use 'work_orders' or 'quotes'.")
        sys.exit(1)

    print(f"Exported {count} {data_type} to {filepath}")


if __name__ == "__main__":
    main()
