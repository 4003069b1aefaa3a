from __future__ import annotations

from typing import List, Optional

STAGES: List[str] = [
    "Uploaded",
    "Assigned to Vendor",
    "Printing",
    "Quality Check",
    "Packed",
    "Shipped to Admin",
    "Received by Admin",
    "Final Packed for Customer",
    "Shipped to Customer",
    "Delivered",
]

DEFAULT_STAGE = STAGES[0]


def is_valid_stage(stage: Optional[str]) -> bool:
    return stage in STAGES


def next_stage_options(current: Optional[str]) -> List[str]:
    """Stages a job may move to from `current`; every stage when `current` is unknown."""
    if current not in STAGES:
        return list(STAGES)
    return STAGES[STAGES.index(current) + 1:]
