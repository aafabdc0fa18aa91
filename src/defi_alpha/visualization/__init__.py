"""Chart helpers for :mod:`defi_alpha`."""

from __future__ import annotations

from .visualizer import Visualizer

__all__ = ["Visualizer"]
