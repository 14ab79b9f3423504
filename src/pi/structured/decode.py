"""One repair-and-decode attempt over an accumulated buffer.

The outcome is a value, never an exception: ``Pending`` means "not enough
structure yet, try again with more text", and the caller decides whether
that is fine (mid-stream) or terminal (final attempt after a success).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pi.structured.repair import repair

if TYPE_CHECKING:
    from pi.structured.partial import PartialDecoder

logger = logging.getLogger(__name__)

T = TypeVar("T")



@dataclass(frozen=True)
class Decoded(Generic[T]):
    value: T
    snapshot: Any


@dataclass(frozen=True)
class Pending:
    reason: str
    error: Exception | None = None


DecodeAttempt = Decoded[Any] | Pending


def attempt_decode(buffer: str, decoder: PartialDecoder[Any]) -> DecodeAttempt:
    """Repair ``buffer``, parse it and decode it into a partial value."""
    repaired = repair(buffer)
    try:
        content = json.loads(repaired)
    except json.JSONDecodeError as e:
        logger.debug("Repaired buffer is not JSON yet (%d chars): %s", len(buffer), e)
        return Pending(reason="parse", error=e)

    try:
        value = decoder.decode_partial(content)
    except (TypeError, ValueError) as e:  # includes pydantic.ValidationError
        logger.debug("Content does not decode into %r yet: %s", decoder, e)
        return Pending(reason="decode", error=e)

    return Decoded(value=value, snapshot=decoder.snapshot(value))
