"""
Run the monthly casual leave accrual once.

For hosts that prefer cron over the in-process timer
(set ACCRUAL_SCHEDULER_ENABLED=false on the API):

  0 0 1 * *  cd /srv/leave-api && python scripts/run_monthly_accrual.py

Usage:
  python scripts/run_monthly_accrual.py
  python scripts/run_monthly_accrual.py --date 2026-03-01
"""
import argparse
import sys
from datetime import date
from pathlib import Path

# Add project root so leave_api is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy.orm import Session
from leave_api.core.logging import setup_logging
from leave_api.db import session as db_session
from leave_api.services.accrual_service import run_monthly_accrual


def main():
    parser = argparse.ArgumentParser(description="Run the monthly casual leave accrual")
    parser.add_argument("--date", type=date.fromisoformat, default=None, help="Reference date (YYYY-MM-DD); defaults to today")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL for this run")
    args = parser.parse_args()

    setup_logging(args.log_level)
    db: Session = db_session.SessionLocal()
    try:
        summary = run_monthly_accrual(db, today=args.date)
    finally:
        db.close()

    print(
        f"Accrual {summary['month']}: processed={summary['processed_count']} "
        f"skipped={summary['skipped_count']} failed={summary['failed_count']}"
    )
    for failure in summary["failed"]:
        print(f"  Failed user {failure['user_id']} ({failure['employee_id']}): {failure['error']}")
    return 1 if summary["failed_count"] else 0


if __name__ == "__main__":
    sys.exit(main())
