"""Create the teacher/subject/section/schedule tables and their lookup indexes.

Safe to run multiple times (create_all skips existing tables, indexes use IF NOT EXISTS).

Run:
  python -m migrations.001_create_schedule_tables --yes

Or:
  python backend/migrations/001_create_schedule_tables.py --yes
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allow running this script from any working directory.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import text

from core.database import ENGINE
from models import Schedule, Section, Subject, Teacher
from models.base import Base


TABLES = [Teacher.__table__, Subject.__table__, Section.__table__, Schedule.__table__]

# Listing filters not covered by the model-level indexes.
EXTRA_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_schedules_subject ON schedules (subject_id);",
    "CREATE INDEX IF NOT EXISTS idx_schedules_term ON schedules (school_year, quarter);",
    "CREATE INDEX IF NOT EXISTS idx_schedules_days_start ON schedules (days, start_time);",
]


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--yes", action="store_true", help="Actually apply changes")
    args = parser.parse_args()

    if not args.yes:
        print("Dry run. Re-run with --yes to apply.")
        for table in TABLES:
            print(f"--- table {table.name}")
        for s in EXTRA_INDEXES:
            print("---")
            print(s.strip())
        return

    Base.metadata.create_all(ENGINE, tables=TABLES)
    with ENGINE.begin() as conn:
        for s in EXTRA_INDEXES:
            conn.execute(text(s))

    print(f"OK: created/verified {len(TABLES)} tables and {len(EXTRA_INDEXES)} indexes.")


if __name__ == "__main__":
    main()
