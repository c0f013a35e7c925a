from __future__ import annotations

from dataclasses import dataclass, field

__all__ = [
    "NameComparison",
]


@dataclass(frozen=True)
class NameComparison:
    """Presence comparison of normalized product names between two sheets."""
    only_left: list[str] = field(default_factory=list)
    only_right: list[str] = field(default_factory=list)
    in_both: list[str] = field(default_factory=list)
