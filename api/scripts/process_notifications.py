import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from swipe_match.services.notifications import process_notifications_outbox

logger = logging.getLogger("process_notifications")


def _log_delivery(user_id: str, payload: dict) -> None:
    logger.info("deliver to=%s payload=%s", user_id, json.dumps(payload, default=str))


def main() -> None:
    parser = argparse.ArgumentParser(description="Drain pending match notifications from the outbox")
    parser.add_argument("--limit", type=int, default=100)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    summary = process_notifications_outbox(_log_delivery, limit=args.limit)
    print(json.dumps(summary, indent=2))


if __name__ == "__main__":
    main()
