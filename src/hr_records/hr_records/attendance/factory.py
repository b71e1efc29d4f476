from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import MarkMode
from .strategies.base import MarkStrategy
from .strategies.partial_strategy import PartialMarkStrategy
from .strategies.replace_strategy import ReplaceMarkStrategy


@dataclass
class MarkStrategyFactory:
    """Factory Pattern: choose the merge rule for a Mark call."""

    def for_mode(self, mode: MarkMode) -> MarkStrategy:
        if mode == MarkMode.REPLACE:
            return ReplaceMarkStrategy()
        return PartialMarkStrategy()
