"""Print where work orders sit in the pipeline and flag likely misfiles."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shop_pipeline.config import Config
from shop_pipeline.database.connection import DatabaseConnection
from shop_pipeline.database.schema import initialize_database
from shop_pipeline.database.repository import Repository
from shop_pipeline.pipeline.stages import ALL_STAGES
from shop_pipeline.pipeline.summary import summarize_pipeline
from shop_pipeline.utils.constants import APP_NAME, APP_VERSION
from shop_pipeline.utils.formatters import format_stage, format_status


def main():
    db = DatabaseConnection(Config.DATABASE_PATH)
    initialize_database(db)
    repo = Repository(db)

    summary = summarize_pipeline(repo.get_all_work_orders())
    if summary.total == 0:
        print("No work orders found.")
        return

    print(f"{APP_NAME} {APP_VERSION} - pipeline status\n")
    print(f"Work orders: {summary.total}")
    print(f"  Active:    {summary.active}")
    print(f"  Delivered: {summary.delivered}")
    print(f"  Canceled:  {summary.canceled}")

    print("\nBy stage:")
    for stage in ALL_STAGES:
        if stage in summary.by_stage:
            print(f"  {format_stage(stage):<20} {summary.by_stage[stage]}")
    for stage, count in summary.by_stage.items():
        if stage not in ALL_STAGES:
            print(f"  {stage!r:<20} {count}  (unknown stage)")

    print("\nBy status:")
    for status, count in sorted(summary.by_status.items()):
        print(f"  {format_status(status):<20} {count}")

    if summary.suspect_ids:
        print(f"\nPending quote but with linked quotes "
              f"({len(summary.suspect_ids)}):")
        for wo_id in summary.suspect_ids:
            print(f"  - {wo_id}")
        print("Run reconcile_stages.py --dry-run to review.")


if __name__ == "__main__":
    main()
