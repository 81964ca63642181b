import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.types import JSON

from .database import Base


class UserAccount(Base):
    __tablename__ = "user_account"

    id = Column(String, primary_key=True)
    display_name = Column(String, nullable=True)
    is_premium = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class SwipeRecord(Base):
    __tablename__ = "swipe"

    swiper_id = Column(String, primary_key=True)
    target_id = Column(String, primary_key=True)
    kind = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint("kind IN ('like', 'dislike')", name="ck_swipe_kind"),
        CheckConstraint("swiper_id <> target_id", name="ck_swipe_not_self"),
        Index("idx_swipe_target_kind", "target_id", "kind"),
        Index("idx_swipe_swiper_created", "swiper_id", "created_at"),
    )


class MatchRecord(Base):
    __tablename__ = "user_match"

    id = Column(String, primary_key=True)
    member_low = Column(String, nullable=False)
    member_high = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    last_message_at = Column(DateTime(timezone=True), nullable=True)
    last_message_summary = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("member_low", "member_high", name="uq_user_match_members"),
        CheckConstraint("member_low < member_high", name="ck_user_match_member_order"),
        Index("idx_user_match_member_high", "member_high"),
    )


class UserSwipedTarget(Base):
    __tablename__ = "user_swiped_target"

    user_id = Column(String, primary_key=True)
    target_id = Column(String, primary_key=True)
    added_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class UserMatchedPeer(Base):
    __tablename__ = "user_matched_peer"

    user_id = Column(String, primary_key=True)
    peer_id = Column(String, primary_key=True)
    added_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class NotificationOutbox(Base):
    __tablename__ = "notifications_outbox"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    notification_type = Column(String, nullable=False)
    payload_json = Column(JSON, nullable=False)
    status = Column(String, nullable=False, default="pending")
    attempt_count = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)
    idempotency_key = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
