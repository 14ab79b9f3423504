"""Structured prompts from conversation messages."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel

from pi.structured.stream import stream_structured

if TYPE_CHECKING:
    import asyncio
    from collections.abc import AsyncIterable, Callable

    from pi.structured.config import StreamOptions
    from pi.structured.stream import StreamingResult

Role = Literal["user", "assistant", "system", "tool"]


class Message(BaseModel):
    role: Role
    content: str


def schema_for(target: Any) -> dict[str, Any]:
    """JSON Schema describing ``target`` (a pydantic model class or a schema dict)."""
    if isinstance(target, type) and issubclass(target, BaseModel):
        return target.model_json_schema()
    if isinstance(target, dict):
        return target
    raise TypeError(f"No JSON Schema available for {target!r}")


def build_structured_prompt(messages: list[Message], target: Any) -> str:
    """Flatten ``messages`` into a single prompt asking for JSON matching ``target``."""
    if not messages:
        raise ValueError("Messages list cannot be empty")

    transcript = "\n".join(f"{m.role.capitalize()}: {m.content}" for m in messages)
    schema = json.dumps(schema_for(target), indent=2)
    return f"{transcript}\n\nRespond with valid JSON matching this schema:\n{schema}"


def stream_messages(
    generate: Callable[[str], AsyncIterable[str]],
    messages: list[Message],
    target: Any,
    *,
    options: StreamOptions | None = None,
    cancel_event: asyncio.Event | None = None,
) -> StreamingResult[Any]:
    """Generate a structured response to ``messages`` with a text-streaming function."""
    prompt = build_structured_prompt(messages, target)
    return stream_structured(generate(prompt), target, options=options, cancel_event=cancel_event)
