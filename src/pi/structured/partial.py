"""Partial and complete decoding of content trees into domain values.

A *partial* value is the target type with every field optional: whatever
the stream has produced so far is filled in, everything else is ``None``.
Pydantic models get a derived ``Partial<Name>`` model; raw JSON Schemas
(e.g. tool parameters) are decoded into plain dicts.
"""

from __future__ import annotations

import types
from functools import cache
from typing import Annotated, Any, Generic, Literal, Optional, Protocol, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, create_model

from pi.structured.errors import ContentValidationError
from pi.structured.validation import relax_schema, validate_content

_UNION_ORIGINS = (Union, types.UnionType)

# Models whose partial variant is being built; breaks self-referential cycles.
_building: set[type[BaseModel]] = set()

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)



class PartialDecoder(Protocol[T]):
    """Decodes content trees into partial values of ``T``."""

    def decode_partial(self, content: Any) -> Any:
        """Return a partial value, or raise if the tree's shape is incompatible."""
        ...

    def decode_complete(self, partial: Any) -> T:
        """Convert a partial value into a fully validated ``T``."""
        ...

    def snapshot(self, partial: Any) -> Any:
        """Return the semantic content of a partial value for comparison."""
        ...


def _partial_annotation(annotation: Any) -> Any:
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        if annotation in _building:
            return annotation
        return partial_model(annotation)

    origin = get_origin(annotation)
    if origin is None or origin in (Literal, Annotated):
        return annotation

    args = tuple(_partial_annotation(arg) for arg in get_args(annotation))
    if origin in _UNION_ORIGINS:
        return Union[args]
    return origin[args]


@cache
def partial_model(model: type[BaseModel]) -> type[BaseModel]:
    """Return the all-optional variant of ``model``, recursively."""
    _building.add(model)
    try:
        fields: dict[str, Any] = {}
        for name, info in model.model_fields.items():
            annotation = _partial_annotation(info.annotation)
            fields[name] = (Optional[annotation], Field(default=None, alias=info.alias))
        return create_model(
            f"Partial{model.__name__}",
            __config__=ConfigDict(populate_by_name=True),
            __module__=model.__module__,
            **fields,
        )
    finally:
        _building.discard(model)


class ModelDecoder(Generic[M]):
    """Decoder for a pydantic model type."""

    def __init__(self, model: type[M]) -> None:
        self.model = model
        self.partial = partial_model(model)

    def decode_partial(self, content: Any) -> BaseModel:
        return self.partial.model_validate(content)

    def decode_complete(self, partial: BaseModel) -> M:
        return self.model.model_validate(partial.model_dump(exclude_unset=True, by_alias=True))

    def snapshot(self, partial: BaseModel) -> Any:
        return partial.model_dump(mode="json")

    def __repr__(self) -> str:
        return f"ModelDecoder({self.model.__name__})"


class SchemaDecoder:
    """Decoder for a raw JSON Schema; partial values are the content trees themselves."""

    def __init__(self, schema: dict[str, Any]) -> None:
        self.schema = schema
        self.relaxed = relax_schema(schema)

    def decode_partial(self, content: Any) -> Any:
        errors = validate_content(self.relaxed, content)
        if errors:
            raise ContentValidationError(errors)
        return content

    def decode_complete(self, partial: Any) -> Any:
        errors = validate_content(self.schema, partial)
        if errors:
            raise ContentValidationError(errors)
        return partial

    def snapshot(self, partial: Any) -> Any:
        return partial


def resolve_decoder(target: Any) -> PartialDecoder[Any]:
    """Build a decoder for a model type, a JSON Schema dict, or pass a decoder through."""
    if isinstance(target, type) and issubclass(target, BaseModel):
        return ModelDecoder(target)
    if isinstance(target, dict):
        return SchemaDecoder(target)
    if all(hasattr(target, attr) for attr in ("decode_partial", "decode_complete", "snapshot")):
        return target
    raise TypeError(f"Cannot decode structured content into {target!r}")
