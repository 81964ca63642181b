"""Match and like notifications.

The engine only ever *requests* a notification; delivery to a device is
somebody else's job. Two dispatchers are provided, selected with
``NOTIFY_BACKEND``:

* ``outbox`` (default): ``OutboxNotificationDispatcher`` enqueues a row in
  ``notifications_outbox`` keyed by an idempotency key, so the same match or
  like never produces two pending notifications for one recipient.
  ``process_notifications_outbox`` drains the outbox through a caller-supplied
  ``deliver`` callable.
* ``log``: ``LoggingNotificationDispatcher`` writes the request to the log.
  Used in development.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .. import config
from ..config import NOTIFY_MAX_ATTEMPTS
from ..database import SessionLocal
from ..errors import NotificationError

logger = logging.getLogger(__name__)

MATCH_NOTIFICATION = "match"
LIKE_NOTIFICATION = "like"


class NotificationDispatcher(Protocol):
    def notify_match(self, recipient_user_id: str, other_user_display_name: str, *, match_key: str | None = None) -> None: ...

    def notify_like(self, recipient_user_id: str, liker_display_name: str, *, liker_id: str | None = None) -> None: ...


def build_match_payload(other_user_display_name: str, match_key: str | None = None) -> dict[str, Any]:
    return {
        "type": MATCH_NOTIFICATION,
        "title": "It's a Match!",
        "body": f"You and {other_user_display_name} liked each other!",
        "matcher_name": other_user_display_name,
        "match_id": match_key,
    }


def build_like_payload(liker_display_name: str, liker_id: str | None = None) -> dict[str, Any]:
    return {
        "type": LIKE_NOTIFICATION,
        "title": "New Like!",
        "body": f"{liker_display_name} liked your profile!",
        "liker_id": liker_id,
    }


def build_notification_idempotency_key(*, notification_type: str, subject: str | None, recipient_user_id: str) -> str:
    """``match:<match_key>:<recipient>`` or ``like:<liker_id>:<recipient>``."""
    return f"{notification_type}:{subject or '-'}:{recipient_user_id}"


class LoggingNotificationDispatcher:
    def notify_match(self, recipient_user_id: str, other_user_display_name: str, *, match_key: str | None = None) -> None:
        payload = build_match_payload(other_user_display_name, match_key)
        logger.info("[NOTIFY] to=%s type=%s body=%s", recipient_user_id, payload["type"], payload["body"])

    def notify_like(self, recipient_user_id: str, liker_display_name: str, *, liker_id: str | None = None) -> None:
        payload = build_like_payload(liker_display_name, liker_id)
        logger.info("[NOTIFY] to=%s type=%s body=%s", recipient_user_id, payload["type"], payload["body"])


class OutboxNotificationDispatcher:
    def __init__(self, session_factory=SessionLocal) -> None:
        self._session_factory = session_factory

    def notify_match(self, recipient_user_id: str, other_user_display_name: str, *, match_key: str | None = None) -> None:
        self._enqueue(
            recipient_user_id,
            MATCH_NOTIFICATION,
            build_match_payload(other_user_display_name, match_key),
            build_notification_idempotency_key(
                notification_type=MATCH_NOTIFICATION, subject=match_key, recipient_user_id=recipient_user_id
            ),
        )

    def notify_like(self, recipient_user_id: str, liker_display_name: str, *, liker_id: str | None = None) -> None:
        self._enqueue(
            recipient_user_id,
            LIKE_NOTIFICATION,
            build_like_payload(liker_display_name, liker_id),
            build_notification_idempotency_key(
                notification_type=LIKE_NOTIFICATION, subject=liker_id, recipient_user_id=recipient_user_id
            ),
        )

    def _enqueue(self, recipient_user_id: str, notification_type: str, payload: dict[str, Any], idempotency_key: str) -> None:
        now = datetime.now(timezone.utc)
        try:
            with self._session_factory() as db:
                try:
                    db.execute(
                        text(
                            """
                            INSERT INTO notifications_outbox (
                              id, user_id, notification_type, payload_json, status,
                              attempt_count, idempotency_key, created_at, updated_at
                            )
                            VALUES (
                              :id, :user_id, :notification_type, :payload_json, 'pending',
                              0, :idempotency_key, :now, :now
                            )
                            """
                        ).bindparams(bindparam("now", type_=DateTime(timezone=True))),
                        {
                            "id": str(uuid.uuid4()),
                            "user_id": recipient_user_id,
                            "notification_type": notification_type,
                            "payload_json": json.dumps(payload),
                            "idempotency_key": idempotency_key,
                            "now": now,
                        },
                    )
                    db.commit()
                except IntegrityError:
                    db.rollback()
                    logger.info("[NOTIFY] already queued key=%s", idempotency_key)
        except SQLAlchemyError as exc:
            raise NotificationError(f"Failed to enqueue {notification_type} notification for {recipient_user_id}") from exc


def build_notification_dispatcher(backend: str | None = None, session_factory=SessionLocal) -> NotificationDispatcher:
    backend = (backend or config.NOTIFY_BACKEND).strip().lower()
    if backend == "outbox":
        return OutboxNotificationDispatcher(session_factory=session_factory)
    if backend == "log":
        return LoggingNotificationDispatcher()
    raise ValueError(f"Unknown NOTIFY_BACKEND {backend!r}; expected 'outbox' or 'log'")


def _load_payload(raw: Any) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str) and raw:
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return value if isinstance(value, dict) else {}
    return {}


def process_notifications_outbox(
    deliver: Callable[[str, dict[str, Any]], None],
    *,
    limit: int = 100,
    max_attempts: int = NOTIFY_MAX_ATTEMPTS,
    session_factory=SessionLocal,
) -> dict[str, int]:
    """Deliver pending outbox rows; failed rows are retried until ``max_attempts``."""
    processed = 0
    sent = 0
    failed = 0
    with session_factory() as db:
        rows = db.execute(
            text(
                """
                SELECT id, user_id, notification_type, payload_json, attempt_count
                FROM notifications_outbox
                WHERE status = 'pending'
                ORDER BY created_at ASC
                LIMIT :limit
                """
            ),
            {"limit": max(1, min(500, int(limit)))},
        ).mappings().all()

        for row in rows:
            processed += 1
            now = datetime.now(timezone.utc)
            try:
                deliver(str(row["user_id"]), _load_payload(row["payload_json"]))
            except Exception as exc:
                attempts = int(row["attempt_count"] or 0) + 1
                status = "failed" if attempts >= max_attempts else "pending"
                db.execute(
                    text(
                        """
                        UPDATE notifications_outbox
                        SET attempt_count=:attempts, status=:status, last_error=:last_error, updated_at=:now
                        WHERE id=:id
                        """
                    ).bindparams(bindparam("now", type_=DateTime(timezone=True))),
                    {"attempts": attempts, "status": status, "last_error": str(exc)[:1000], "now": now, "id": row["id"]},
                )
                logger.warning("[NOTIFY] delivery failed id=%s attempt=%s status=%s", row["id"], attempts, status)
                failed += 1
                continue
            db.execute(
                text(
                    """
                    UPDATE notifications_outbox
                    SET status='sent', attempt_count=attempt_count + 1, last_error=NULL, updated_at=:now
                    WHERE id=:id
                    """
                ).bindparams(bindparam("now", type_=DateTime(timezone=True))),
                {"now": now, "id": row["id"]},
            )
            sent += 1

        db.commit()

    return {
        "processed": processed,
        "sent": sent,
        "failed": failed,
    }
