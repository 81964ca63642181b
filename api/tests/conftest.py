import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from swipe_match import models  # noqa: F401  registers tables on Base.metadata
from swipe_match.database import Base
from swipe_match.services.engine import SwipeMatchEngine
from swipe_match.services.side_effects import InlineSideEffects
from swipe_match.stores import InMemoryMatchStore, InMemorySwipeStore, InMemoryUserDirectory

from fakes import FakeClock, RecordingNotifier


@pytest.fixture
def sqlite_session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'swipe_match.db'}",
        future=True,
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    engine.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def users():
    return InMemoryUserDirectory(
        {
            "u1": {"display_name": "Ana"},
            "u2": {"display_name": "Ben"},
            "u3": {"display_name": "Cleo", "is_premium": True},
        }
    )


@pytest.fixture
def engine(users, notifier, clock):
    return SwipeMatchEngine(
        swipes=InMemorySwipeStore(),
        matches=InMemoryMatchStore(),
        users=users,
        notifier=notifier,
        side_effects=InlineSideEffects(),
        clock=clock,
    )
