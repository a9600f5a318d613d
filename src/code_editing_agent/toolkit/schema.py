"""Input schema derivation for tool definitions.

Each tool declares its input shape as a pydantic model. ``derive_schema``
turns that declaration into a self-contained, adapter-ready ToolSchema:

- ``$ref`` / ``$defs`` (nested models, enums) are inlined
- ``Optional[X]`` on a field that is not required collapses to ``X``
- ``title`` keywords are dropped

Anything the provider adapters could not carry faithfully (unions, required
nullable fields, untyped fields, recursive models, unknown keywords)
raises SchemaError instead of producing a truncated schema.
"""

from __future__ import annotations

import copy
import functools
import logging
import types
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel
from pydantic.errors import PydanticUserError

from code_editing_agent.exceptions import SchemaError

logger = logging.getLogger(__name__)

_SUPPORTED_TYPES = frozenset(
    {"string", "integer", "number", "boolean", "array", "object"}
)

# Keywords copied through unchanged after normalization.
_KEYWORDS = frozenset({
    "type", "description", "properties", "required", "items", "enum",
    "const", "default", "format", "examples", "additionalProperties",
    "minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum",
    "minLength", "maxLength", "pattern", "minItems", "maxItems",
    "uniqueItems",
})

_NULL = {"type": "null"}
_DEFS_PREFIX = "#/$defs/"


@dataclass(frozen=True)
class ToolSchema:
    """Derived input schema for one tool.

    Holds the flattened property map and required list. ``to_object()``
    rebuilds the nested JSON Schema object. Both accessors hand out
    copies so callers cannot mutate the cached schema.

    Attributes:
        properties: Property name -> normalized JSON Schema for that property.
        required: Names of required properties, in declaration order.
    """

    properties: Mapping[str, dict] = field(default_factory=dict)
    required: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "properties", types.MappingProxyType(dict(self.properties))
        )
        object.__setattr__(self, "required", tuple(self.required))

    def flattened(self) -> tuple[dict[str, dict], list[str]]:
        """Return ``(properties, required)`` as fresh mutable copies."""
        return copy.deepcopy(dict(self.properties)), list(self.required)

    def to_object(self) -> dict[str, Any]:
        """Return the nested ``{"type": "object", ...}`` JSON Schema."""
        properties, required = self.flattened()
        return {
            "type": "object",
            "properties": properties,
            "required": required,
        }


def derive_schema(model: type[BaseModel]) -> ToolSchema:
    """Derive the ToolSchema for a pydantic input model.

    Results are cached per model class: deriving twice returns the same
    ToolSchema instance.

    Args:
        model: The tool's input model class.

    Returns:
        The normalized ToolSchema.

    Raises:
        SchemaError: If the model is not a pydantic model or uses a
            construct that cannot be expressed to every provider.
    """
    if not (isinstance(model, type) and issubclass(model, BaseModel)):
        name = getattr(model, "__name__", repr(model))
        raise SchemaError(name, "input model must be a pydantic BaseModel subclass")
    return _derive_cached(model)


@functools.lru_cache(maxsize=None)
def _derive_cached(model: type[BaseModel]) -> ToolSchema:
    try:
        raw = model.model_json_schema()
    except PydanticUserError as exc:
        raise SchemaError(model.__name__, str(exc)) from exc

    normalizer = _Normalizer(model.__name__, raw.pop("$defs", {}))
    root = normalizer.normalize(raw, model.__name__, ())
    if root.get("type") != "object":
        raise SchemaError(model.__name__, "top-level schema must be an object")

    schema = ToolSchema(
        properties=root.get("properties", {}),
        required=tuple(root.get("required", ())),
    )
    logger.debug(
        "Derived schema for %s: %d properties, %d required",
        model.__name__,
        len(schema.properties),
        len(schema.required),
    )
    return schema


class _Normalizer:
    """Walks a pydantic JSON schema and produces a self-contained copy."""

    def __init__(self, model_name: str, defs: dict[str, Any]) -> None:
        self._model_name = model_name
        self._defs = defs

    def _fail(self, path: str, reason: str) -> SchemaError:
        return SchemaError(self._model_name, f"{path}: {reason}")

    def _resolve(self, ref: str, path: str, resolving: tuple[str, ...]) -> dict:
        if not ref.startswith(_DEFS_PREFIX):
            raise self._fail(path, f"unsupported reference {ref!r}")
        if ref in resolving:
            raise self._fail(path, f"recursive reference {ref!r}")
        target = self._defs.get(ref[len(_DEFS_PREFIX):])
        if target is None:
            raise self._fail(path, f"dangling reference {ref!r}")
        return target

    def normalize(
        self,
        node: Any,
        path: str,
        resolving: tuple[str, ...],
        optional: bool = False,
    ) -> dict:
        if not isinstance(node, dict):
            raise self._fail(path, "expected a schema object")
        node = dict(node)

        ref = node.pop("$ref", None)
        if ref is None and "allOf" in node:
            all_of = node.pop("allOf")
            if len(all_of) != 1 or set(all_of[0]) != {"$ref"}:
                raise self._fail(path, "allOf is only supported around a single $ref")
            ref = all_of[0]["$ref"]
        if ref is not None:
            target = self._resolve(ref, path, resolving)
            # Keywords on the referencing node (e.g. description) win.
            return self.normalize({**target, **node}, path, resolving + (ref,), optional)

        any_of = node.pop("anyOf", None)
        if any_of is not None:
            options = [option for option in any_of if option != _NULL]
            if len(options) != 1 or len(options) == len(any_of):
                raise self._fail(path, "union types are not supported")
            if not optional:
                raise self._fail(path, "nullable field must not be required (give it a default)")
            if "default" in node and node["default"] is None:
                del node["default"]
            return self.normalize({**options[0], **node}, path, resolving, optional)

        node.pop("title", None)
        unknown = sorted(set(node) - _KEYWORDS)
        if unknown:
            raise self._fail(path, f"unsupported keyword(s): {', '.join(unknown)}")

        type_ = node.get("type")
        if type_ is None:
            raise self._fail(path, "missing 'type' (untyped fields are not supported)")
        if not isinstance(type_, str) or type_ not in _SUPPORTED_TYPES:
            raise self._fail(path, f"unsupported type {type_!r}")

        if type_ == "array" and "items" in node:
            node["items"] = self.normalize(node["items"], f"{path}[]", resolving)

        if type_ == "object":
            properties = node.get("properties")
            if properties is not None:
                required = set(node.get("required", ()))
                node["properties"] = {
                    name: self.normalize(
                        prop, f"{path}.{name}", resolving, name not in required
                    )
                    for name, prop in properties.items()
                }
            extra = node.get("additionalProperties")
            if isinstance(extra, dict):
                node["additionalProperties"] = self.normalize(
                    extra, f"{path}.*", resolving
                )
            if "required" in node:
                node["required"] = list(node["required"])

        return node
