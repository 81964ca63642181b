import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..database import SessionLocal
from ..domain import CreateResult, InsertResult, Match, Swipe, SwipeKind
from ..errors import StorageError
from .base import DEFAULT_DISPLAY_NAME, check_member_order

logger = logging.getLogger(__name__)


def _ts(name: str):
    return bindparam(name, type_=DateTime(timezone=True))


def _as_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _swipe_from_row(row: Any) -> Swipe:
    return Swipe(
        swiper=str(row["swiper_id"]),
        target=str(row["target_id"]),
        kind=SwipeKind(row["kind"]),
        created_at=_as_datetime(row["created_at"]),
    )


def _match_from_row(row: Any) -> Match:
    return Match(
        match_key=str(row["id"]),
        member_low=str(row["member_low"]),
        member_high=str(row["member_high"]),
        created_at=_as_datetime(row["created_at"]),
        last_message_at=_as_datetime(row.get("last_message_at")),
        last_message_summary=row.get("last_message_summary"),
    )


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.warning("[STORE] %s failed: %s", operation, exc)
        raise StorageError(f"{operation} failed") from exc


class SqlSwipeStore:
    def __init__(self, session_factory=SessionLocal) -> None:
        self._session_factory = session_factory

    def find(self, swiper_id: str, target_id: str) -> Swipe | None:
        with _storage_errors("swipe lookup"):
            with self._session_factory() as db:
                row = db.execute(
                    text(
                        """
                        SELECT swiper_id, target_id, kind, created_at
                        FROM swipe
                        WHERE swiper_id=:swiper_id AND target_id=:target_id
                        """
                    ),
                    {"swiper_id": swiper_id, "target_id": target_id},
                ).mappings().first()
        return _swipe_from_row(row) if row else None

    def insert_if_absent(self, swipe: Swipe) -> InsertResult:
        with _storage_errors("swipe insert"):
            with self._session_factory() as db:
                try:
                    db.execute(
                        text(
                            """
                            INSERT INTO swipe (swiper_id, target_id, kind, created_at)
                            VALUES (:swiper_id, :target_id, :kind, :created_at)
                            """
                        ).bindparams(_ts("created_at")),
                        {
                            "swiper_id": swipe.swiper,
                            "target_id": swipe.target,
                            "kind": swipe.kind.value,
                            "created_at": swipe.created_at,
                        },
                    )
                    db.commit()
                except IntegrityError:
                    db.rollback()
                    return InsertResult.ALREADY_EXISTS
        return InsertResult.INSERTED

    def list_by_swiper(self, swiper_id: str, limit: int = 100) -> list[Swipe]:
        with _storage_errors("swipe list"):
            with self._session_factory() as db:
                rows = db.execute(
                    text(
                        """
                        SELECT swiper_id, target_id, kind, created_at
                        FROM swipe
                        WHERE swiper_id=:swiper_id
                        ORDER BY created_at DESC
                        LIMIT :limit
                        """
                    ),
                    {"swiper_id": swiper_id, "limit": max(1, min(500, int(limit)))},
                ).mappings().all()
        return [_swipe_from_row(r) for r in rows]

    def list_by_target(self, target_id: str, kind: SwipeKind | None = SwipeKind.LIKE, limit: int = 100) -> list[Swipe]:
        with _storage_errors("received swipe list"):
            with self._session_factory() as db:
                rows = db.execute(
                    text(
                        """
                        SELECT swiper_id, target_id, kind, created_at
                        FROM swipe
                        WHERE target_id=:target_id
                          AND (:kind IS NULL OR kind = :kind)
                        ORDER BY created_at DESC
                        LIMIT :limit
                        """
                    ),
                    {
                        "target_id": target_id,
                        "kind": kind.value if kind else None,
                        "limit": max(1, min(500, int(limit))),
                    },
                ).mappings().all()
        return [_swipe_from_row(r) for r in rows]

    def count_since(self, swiper_id: str, since: datetime) -> int:
        with _storage_errors("swipe count"):
            with self._session_factory() as db:
                total = db.execute(
                    text("SELECT COUNT(1) FROM swipe WHERE swiper_id=:swiper_id AND created_at >= :since").bindparams(_ts("since")),
                    {"swiper_id": swiper_id, "since": since},
                ).scalar()
        return int(total or 0)

    def count_sent(self, swiper_id: str, kind: SwipeKind | None = None) -> int:
        with _storage_errors("sent swipe count"):
            with self._session_factory() as db:
                total = db.execute(
                    text("SELECT COUNT(1) FROM swipe WHERE swiper_id=:swiper_id AND (:kind IS NULL OR kind = :kind)"),
                    {"swiper_id": swiper_id, "kind": kind.value if kind else None},
                ).scalar()
        return int(total or 0)

    def count_received(self, target_id: str, kind: SwipeKind | None = None) -> int:
        with _storage_errors("received swipe count"):
            with self._session_factory() as db:
                total = db.execute(
                    text("SELECT COUNT(1) FROM swipe WHERE target_id=:target_id AND (:kind IS NULL OR kind = :kind)"),
                    {"target_id": target_id, "kind": kind.value if kind else None},
                ).scalar()
        return int(total or 0)


class SqlMatchStore:
    def __init__(self, session_factory=SessionLocal) -> None:
        self._session_factory = session_factory

    def exists(self, match_key: str) -> bool:
        with _storage_errors("match lookup"):
            with self._session_factory() as db:
                row = db.execute(text("SELECT 1 FROM user_match WHERE id=:id"), {"id": match_key}).first()
        return bool(row)

    def create_if_absent(self, match_key: str, member_low: str, member_high: str, created_at: datetime) -> CreateResult:
        check_member_order(member_low, member_high)
        with _storage_errors("match create"):
            with self._session_factory() as db:
                try:
                    db.execute(
                        text(
                            """
                            INSERT INTO user_match (id, member_low, member_high, created_at, last_message_at, last_message_summary)
                            VALUES (:id, :member_low, :member_high, :created_at, NULL, NULL)
                            """
                        ).bindparams(_ts("created_at")),
                        {
                            "id": match_key,
                            "member_low": member_low,
                            "member_high": member_high,
                            "created_at": created_at,
                        },
                    )
                    db.commit()
                except IntegrityError:
                    db.rollback()
                    return CreateResult.ALREADY_EXISTS
        return CreateResult.CREATED

    def get(self, match_key: str) -> Match | None:
        with _storage_errors("match lookup"):
            with self._session_factory() as db:
                row = db.execute(
                    text(
                        """
                        SELECT id, member_low, member_high, created_at, last_message_at, last_message_summary
                        FROM user_match
                        WHERE id=:id
                        """
                    ),
                    {"id": match_key},
                ).mappings().first()
        return _match_from_row(row) if row else None

    def list_for_user(self, user_id: str, limit: int = 50) -> list[Match]:
        with _storage_errors("match list"):
            with self._session_factory() as db:
                rows = db.execute(
                    text(
                        """
                        SELECT id, member_low, member_high, created_at, last_message_at, last_message_summary
                        FROM user_match
                        WHERE member_low=:user_id OR member_high=:user_id
                        ORDER BY created_at DESC
                        LIMIT :limit
                        """
                    ),
                    {"user_id": user_id, "limit": max(1, min(500, int(limit)))},
                ).mappings().all()
        return [_match_from_row(r) for r in rows]

    def count_for_user(self, user_id: str) -> int:
        with _storage_errors("match count"):
            with self._session_factory() as db:
                total = db.execute(
                    text("SELECT COUNT(1) FROM user_match WHERE member_low=:user_id OR member_high=:user_id"),
                    {"user_id": user_id},
                ).scalar()
        return int(total or 0)


class SqlUserDirectory:
    def __init__(self, session_factory=SessionLocal) -> None:
        self._session_factory = session_factory

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        with _storage_errors("user lookup"):
            with self._session_factory() as db:
                row = db.execute(
                    text("SELECT id, display_name, is_premium FROM user_account WHERE id=:id"),
                    {"id": user_id},
                ).mappings().first()
        if not row:
            return None
        return {"id": str(row["id"]), "display_name": row["display_name"], "is_premium": bool(row["is_premium"])}

    def get_display_name(self, user_id: str) -> str:
        user = self.get_user(user_id) or {}
        return user.get("display_name") or DEFAULT_DISPLAY_NAME

    def create_user(self, user_id: str, display_name: str | None = None, is_premium: bool = False) -> bool:
        with _storage_errors("user create"):
            with self._session_factory() as db:
                try:
                    db.execute(
                        text(
                            """
                            INSERT INTO user_account (id, display_name, is_premium, created_at)
                            VALUES (:id, :display_name, :is_premium, :created_at)
                            """
                        ).bindparams(_ts("created_at")),
                        {
                            "id": user_id,
                            "display_name": display_name,
                            "is_premium": is_premium,
                            "created_at": datetime.now(timezone.utc),
                        },
                    )
                    db.commit()
                except IntegrityError:
                    db.rollback()
                    return False
        return True

    def _add_if_absent(self, table: str, column: str, user_id: str, value: str) -> bool:
        with _storage_errors(f"{table} merge"):
            with self._session_factory() as db:
                try:
                    db.execute(
                        text(
                            f"""
                            INSERT INTO {table} (user_id, {column}, added_at)
                            VALUES (:user_id, :value, :added_at)
                            """
                        ).bindparams(_ts("added_at")),
                        {"user_id": user_id, "value": value, "added_at": datetime.now(timezone.utc)},
                    )
                    db.commit()
                except IntegrityError:
                    db.rollback()
                    return False
        return True

    def add_swiped_target(self, user_id: str, target_id: str) -> bool:
        return self._add_if_absent("user_swiped_target", "target_id", user_id, target_id)

    def add_matched_peer(self, user_id: str, peer_id: str) -> bool:
        return self._add_if_absent("user_matched_peer", "peer_id", user_id, peer_id)

    def matched_peers(self, user_id: str) -> list[str]:
        with _storage_errors("matched peer list"):
            with self._session_factory() as db:
                rows = db.execute(
                    text("SELECT peer_id FROM user_matched_peer WHERE user_id=:user_id ORDER BY added_at ASC"),
                    {"user_id": user_id},
                ).all()
        return [str(r[0]) for r in rows]
