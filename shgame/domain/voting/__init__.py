from __future__ import annotations

from .resolution import evaluate_vote
from .tally import TallyResult, resolve_tally, tally_vote

__all__ = [
    "evaluate_vote",
    "TallyResult",
    "resolve_tally",
    "tally_vote",
]
