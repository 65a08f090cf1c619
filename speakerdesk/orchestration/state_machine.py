"""Deal status transition predicates.

Any status may follow any other; the only transition with a side effect is
entry into ``won``, which derives the deal's project.
"""

from __future__ import annotations

from speakerdesk.core.enums import DEAL_WON, normalize_status


def is_won_entry(previous: str | None, new: str | None) -> bool:
    """True only for a move from a non-won status into ``won``."""
    return normalize_status(previous) != DEAL_WON and normalize_status(new) == DEAL_WON
