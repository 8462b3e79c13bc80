"""Pydantic schemas for capabilities, bundles and rules."""

from .base import BaseSchema, FrozenDict, FrozenList, FrozenSchema, freeze
from .domain import (
    BUNDLE_SOURCE_PREFIX,
    NATIVE_SOURCE,
    Bundle,
    BundleExample,
    Capability,
    CapabilityDefinition,
    Rule,
    bundle_source,
)

__all__ = [
    "BaseSchema",
    "FrozenSchema",
    "FrozenDict",
    "FrozenList",
    "freeze",
    "Bundle",
    "BundleExample",
    "Capability",
    "CapabilityDefinition",
    "Rule",
    "NATIVE_SOURCE",
    "BUNDLE_SOURCE_PREFIX",
    "bundle_source",
]
