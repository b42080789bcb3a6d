"""
Core rundown rules shared by every use case.

- ordering: dense, contiguous sibling ranks
- access: the four-actor view/edit rule table
"""

from .access import AccessEvaluator, AccessLevel
from .ordering import apply_permutation, compact, move, renumber, shift_up, sibling_ids

__all__ = [
    "AccessEvaluator",
    "AccessLevel",
    "apply_permutation",
    "compact",
    "move",
    "renumber",
    "shift_up",
    "sibling_ids",
]
