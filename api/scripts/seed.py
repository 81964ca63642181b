import argparse
import random
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from swipe_match.config import DAILY_SWIPE_LIMIT_FREE
from swipe_match.errors import SwipeError
from swipe_match.services.engine import SwipeMatchEngine
from swipe_match.services.notifications import build_notification_dispatcher
from swipe_match.services.side_effects import InlineSideEffects
from swipe_match.stores import SqlMatchStore, SqlSwipeStore, SqlUserDirectory


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed dummy users and swipes")
    parser.add_argument("--n-users", type=int, default=20)
    parser.add_argument("--like-rate", type=float, default=0.6)
    parser.add_argument("--swipes-per-user", type=int, default=10)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    rng = random.Random(args.seed)
    users = SqlUserDirectory()
    engine = SwipeMatchEngine(
        swipes=SqlSwipeStore(),
        matches=SqlMatchStore(),
        users=users,
        notifier=build_notification_dispatcher(),
        side_effects=InlineSideEffects(),
        daily_swipe_limit=DAILY_SWIPE_LIMIT_FREE,
    )

    user_ids = [f"seed-user-{i:04d}" for i in range(args.n_users)]
    created = sum(1 for uid in user_ids if users.create_user(uid, display_name=f"Seed {uid[-4:]}"))

    summary = {"users_created": created, "swipes": 0, "matches": 0, "rejected": 0}
    for uid in user_ids:
        others = [o for o in user_ids if o != uid]
        for target in rng.sample(others, k=min(args.swipes_per_user, len(others))):
            kind = "like" if rng.random() < args.like_rate else "dislike"
            try:
                outcome = engine.record_swipe(uid, target, kind)
            except SwipeError:
                summary["rejected"] += 1
                continue
            summary["swipes"] += 1
            if outcome.matched:
                summary["matches"] += 1

    print("Seed completed")
    for k, v in summary.items():
        print(f"- {k}: {v}")


if __name__ == "__main__":
    main()
