"""Relevance-ranked, dependency-aware capability selection."""

from .engine import SelectionEngine

__all__ = ["SelectionEngine"]
