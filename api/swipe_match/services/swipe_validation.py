from typing import Any

from ..domain import ALLOWED_KINDS
from ..errors import ValidationError
from .match_key import MATCH_KEY_SEPARATOR


def _clean_id(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def validate_swipe(swiper_id: Any, target_id: Any, kind: Any) -> None:
    """Check the structural validity of a proposed swipe.

    Raises ``ValidationError`` with a human readable reason; returns ``None``
    when the swipe may proceed.
    """
    swiper = _clean_id(swiper_id)
    target = _clean_id(target_id)
    if not swiper:
        raise ValidationError("Missing required field: swiper_id")
    if not target:
        raise ValidationError("Missing required field: target_id")
    for field, value in (("swiper_id", swiper), ("target_id", target)):
        if MATCH_KEY_SEPARATOR in value:
            raise ValidationError(f"Invalid {field}: must not contain '{MATCH_KEY_SEPARATOR}'")
    if swiper == target:
        raise ValidationError("Cannot swipe on yourself")
    if not isinstance(kind, str) or kind not in ALLOWED_KINDS:
        allowed = ", ".join(sorted(ALLOWED_KINDS))
        raise ValidationError(f"Invalid kind. Must be one of: {allowed}")
