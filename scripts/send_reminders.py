"""Cron entrypoint: trigger the rental reminder sweep on a running API.

Example crontab line (every day at 18:00)::

    0 18 * * * cd /srv/avocado && python scripts/send_reminders.py
"""

import logging
import os
import sys

import httpx
from dotenv import load_dotenv

from avocado.core.logging import configure_logging

logger = logging.getLogger("avocado.cron")


def main() -> int:
    load_dotenv()
    configure_logging()

    api_key = os.getenv("CRON_API_KEY")
    base_url = os.getenv("API_BASE_URL", "http://localhost:8000")
    if not api_key:
        logger.error("CRON_API_KEY is not set.")
        return 1

    try:
        response = httpx.get(
            f"{base_url.rstrip('/')}/api/cron/send_reminders",
            params={"api_key": api_key},
            timeout=60.0,
        )
    except httpx.HTTPError as exc:
        logger.error("Reminder sweep request failed: %s", exc)
        return 1

    if response.status_code != 200:
        logger.error("Reminder sweep rejected (%s): %s", response.status_code, response.text)
        return 1

    body = response.json()
    logger.info("Reminder sweep done: %s sent, %s failed", body["sent_count"], body["failed_count"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
