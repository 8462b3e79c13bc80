"""Capability catalog and input-schema helpers.

A *capability* is a single callable action (a tool) identified by name.
toolscope stores its definition and an opaque handler reference; invoking
the handler is the dispatch layer's job.

This package exports:

- ``CapabilityCatalog``: store-backed name -> capability view.
- ``string_param``/``int_param``/``bool_param``/``enum_param``/``object_schema``:
  helpers for building ``input_schema`` dictionaries.
"""

from .catalog import CapabilityCatalog
from .schema_helpers import bool_param, enum_param, int_param, object_schema, string_param

__all__ = [
    "CapabilityCatalog",
    "string_param",
    "int_param",
    "bool_param",
    "enum_param",
    "object_schema",
]
