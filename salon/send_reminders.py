"""Send day-before reminders for tomorrow's scheduled appointments.

Intended to be triggered hourly by cron or another timer.

Usage:
    python -m salon.send_reminders
"""
import logging
import sys

from salon.core import config
from salon.database import build_engine, build_session_factory
from salon.notifications.gateway import NotificationGateway
from salon.scheduling.reminders import run_day_before_sweep


def main() -> None:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    engine = build_engine(config.DATABASE_URL)
    try:
        result = run_day_before_sweep(build_session_factory(engine), NotificationGateway.from_config())
    finally:
        engine.dispose()

    print(
        f"Reminders for {result.target_date.isoformat()}: "
        f"{result.selected} selected, {result.sent} sent, {result.failed} failed",
        file=sys.stderr if result.failed else sys.stdout,
    )


if __name__ == "__main__":
    main()
