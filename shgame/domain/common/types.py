# shgame/domain/common/types.py
from __future__ import annotations

from typing import Literal

Phase = Literal["setup", "night", "nominate", "vote", "legislate"]
VoteType = Literal["elect", "join", "kick", "reset", "confirmRole"]
Answer = Literal["yes", "no"]
TallyOutcome = Literal["rejected", "pending", "passed", "failed", "dropped"]
