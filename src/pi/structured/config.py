"""Configuration for structured streaming."""

from __future__ import annotations

from dataclasses import dataclass

MAX_BUFFER_SIZE = 1_000_000

# A chunk without any of these cannot finish a value that was not decodable before.
STRUCTURAL_CHARS = '}]"'


@dataclass
class StreamOptions:
    """Per-stream tuning knobs."""

    max_buffer_size: int = MAX_BUFFER_SIZE
    decode_every_chunk: bool = False
    structural_chars: str = STRUCTURAL_CHARS

    def should_decode(self, chunk: str) -> bool:
        if self.decode_every_chunk:
            return True
        return any(char in chunk for char in self.structural_chars)
