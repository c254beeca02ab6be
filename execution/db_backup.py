"""Database backup script: online snapshot of the shop database.

Usage: python db_backup.py [backup_dir]

Take one before a reconciliation run that is not a dry run. The oldest
snapshots beyond KEEP_BACKUPS are pruned.
"""

import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shop_pipeline.config import Config
from shop_pipeline.database.connection import DatabaseConnection

KEEP_BACKUPS = 10
BACKUP_GLOB = "shop_pipeline_*.db"


def backup_database(backup_dir: Path) -> Path | None:
    db_path = Config.DATABASE_PATH
    if not db_path.exists():
        print(f"Database not found at {db_path}")
        return None

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    target = DatabaseConnection(db_path).backup_to(
        backup_dir / f"shop_pipeline_{timestamp}.db"
    )
    print(f"Backup created: {target}")

    for old in sorted(backup_dir.glob(BACKUP_GLOB), reverse=True)[KEEP_BACKUPS:]:
        old.unlink()
        print(f"Removed old backup: {old.name}")
    return target


def main():
    backup_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else Config.BACKUP_PATH
    if backup_database(backup_dir) is None:
        sys.exit(1)


if __name__ == "__main__":
    main()
