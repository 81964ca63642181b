MATCH_KEY_SEPARATOR = "_"


def ordered_members(user_a: str, user_b: str) -> tuple[str, str]:
    low, high = sorted((str(user_a), str(user_b)))
    return low, high


def derive_match_key(user_a: str, user_b: str) -> str:
    """Canonical id for the unordered pair; ``derive_match_key(a, b) == derive_match_key(b, a)``.

    Ids may not contain the separator, otherwise ``("a_b", "c")`` and
    ``("a", "b_c")`` would collide on ``a_b_c``.
    """
    low, high = ordered_members(user_a, user_b)
    if MATCH_KEY_SEPARATOR in low or MATCH_KEY_SEPARATOR in high:
        raise ValueError(f"user ids must not contain {MATCH_KEY_SEPARATOR!r}: {low!r}, {high!r}")
    return f"{low}{MATCH_KEY_SEPARATOR}{high}"
