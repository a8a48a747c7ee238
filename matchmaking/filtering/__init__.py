"""Hard filter module for categorical pair exclusion."""

from .hard_filters import HardFilter, HardFilterConfig, HardFilterReport, PairFilterResult, FilterReason

__all__ = ["HardFilter", "HardFilterConfig", "HardFilterReport", "PairFilterResult", "FilterReason"]
