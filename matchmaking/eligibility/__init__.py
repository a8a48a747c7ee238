"""Eligibility module: absolute and relative pair score floors."""

from .thresholds import (
    EligibilityFilter,
    EligibilityConfig,
    EligibilityReport,
    RejectionReason,
    RELATIVE_MODES,
    RELATIVE_POOLS
)

__all__ = [
    "EligibilityFilter",
    "EligibilityConfig",
    "EligibilityReport",
    "RejectionReason",
    "RELATIVE_MODES",
    "RELATIVE_POOLS"
]
