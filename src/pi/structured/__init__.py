"""Typed partial values from streaming JSON model output."""

from pi.structured.config import MAX_BUFFER_SIZE, StreamOptions
from pi.structured.decode import Decoded, DecodeAttempt, Pending, attempt_decode
from pi.structured.errors import (
    ContentValidationError,
    ConversionFailedError,
    NoContentError,
    SizeExceededError,
    StreamingError,
)
from pi.structured.events import ChunkStream, iterate_chunks
from pi.structured.partial import ModelDecoder, PartialDecoder, SchemaDecoder, partial_model, resolve_decoder
from pi.structured.prompt import Message, build_structured_prompt, stream_messages
from pi.structured.repair import parse, repair, try_parse
from pi.structured.stream import StreamingResult, StructuredStream, stream_structured

__all__ = [
    "MAX_BUFFER_SIZE",
    "ChunkStream",
    "ContentValidationError",
    "ConversionFailedError",
    "DecodeAttempt",
    "Decoded",
    "Message",
    "ModelDecoder",
    "NoContentError",
    "PartialDecoder",
    "Pending",
    "SchemaDecoder",
    "SizeExceededError",
    "StreamOptions",
    "StreamingError",
    "StreamingResult",
    "StructuredStream",
    "attempt_decode",
    "build_structured_prompt",
    "iterate_chunks",
    "parse",
    "partial_model",
    "repair",
    "resolve_decoder",
    "stream_messages",
    "stream_structured",
    "try_parse",
]
