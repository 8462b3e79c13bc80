"""Composable capability bundles with declared dependencies."""

from .registry import BundleRegistry

__all__ = ["BundleRegistry"]
