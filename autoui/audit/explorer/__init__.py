"""Heuristic page interaction."""

from .data import SyntheticDataGenerator
from .engine import CHECKABLE_SELECTOR, FILLABLE_SELECTOR, HeuristicExplorer

__all__ = [
    'SyntheticDataGenerator',
    'HeuristicExplorer',
    'FILLABLE_SELECTOR',
    'CHECKABLE_SELECTOR',
]
