from __future__ import annotations

"""Domain records held by the store.

- ``CapabilityDefinition`` is what an agent loop shows to the model.
- ``Capability`` is the stored record: a definition plus origin, tags and an
  opaque handler that toolscope never calls.
- ``Bundle`` groups capabilities and declares dependencies on other bundles.
- ``Rule`` is a pattern-matched hook record kept alongside the other tables.

Mapping fields (``input_schema``, ``metadata``) are frozen on validation, so a
caller mutating the dict it passed in cannot change a stored record.
"""

from typing import Any, Dict, Tuple

from pydantic import Field, field_validator

from .base import FrozenSchema, freeze

NATIVE_SOURCE = "native"
BUNDLE_SOURCE_PREFIX = "bundle:"


def bundle_source(name: str) -> str:
    """Return the capability ``source`` value owned by bundle ``name``."""
    return BUNDLE_SOURCE_PREFIX + name


class CapabilityDefinition(FrozenSchema):
    name: str
    description: str = ""
    input_schema: Dict[str, Any] = Field(default_factory=dict, validate_default=True)

    @field_validator("input_schema")
    @classmethod
    def freeze_input_schema(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        return freeze(value)


class Capability(FrozenSchema):
    name: str
    description: str = ""
    input_schema: Dict[str, Any] = Field(default_factory=dict, validate_default=True)

    source: str = NATIVE_SOURCE
    tags: Tuple[str, ...] = ()
    handler: Any = Field(default=None, exclude=True, repr=False)

    @field_validator("input_schema")
    @classmethod
    def freeze_input_schema(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        return freeze(value)

    @classmethod
    def from_definition(
        cls,
        definition: CapabilityDefinition,
        *,
        handler: Any = None,
        source: str = NATIVE_SOURCE,
        tags: Tuple[str, ...] | list[str] = (),
    ) -> "Capability":
        return cls(
            name=definition.name,
            description=definition.description,
            input_schema=dict(definition.input_schema),
            source=source,
            tags=tuple(tags),
            handler=handler,
        )

    @property
    def definition(self) -> CapabilityDefinition:
        return CapabilityDefinition(
            name=self.name,
            description=self.description,
            input_schema=self.input_schema,
        )


class BundleExample(FrozenSchema):
    """An example query a bundle is expected to handle."""

    query: str
    capabilities_used: Tuple[str, ...] = ()
    description: str = ""


class Bundle(FrozenSchema):
    name: str
    description: str = ""
    tags: Tuple[str, ...] = ()
    category: str = ""
    dependencies: Tuple[str, ...] = ()
    examples: Tuple[BundleExample, ...] = ()
    priority: int = 0
    metadata: Dict[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("metadata")
    @classmethod
    def freeze_metadata(cls, value: Dict[str, str]) -> Dict[str, str]:
        return freeze(value)

    @property
    def source(self) -> str:
        """The ``source`` tag carried by every capability this bundle owns."""
        return bundle_source(self.name)


class Rule(FrozenSchema):
    id: str = ""
    pattern: str
    is_regex: bool = False
    timeout_seconds: float | None = None
    pre_handlers: Tuple[Any, ...] = Field(default=(), repr=False)
    post_handlers: Tuple[Any, ...] = Field(default=(), repr=False)
