from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

"""Reconciliation domain models.

Two independently generated settlement exports are reduced to
(key, amount) pairs and compared key by key.
"""

__all__ = [
    "ReconciliationStatus",
    "KeyAggregate",
    "ReconciliationRow",
    "ReconciliationSummary",
    "SettlementEntry",
]


class ReconciliationStatus(Enum):
    """Per-key classification.

    - MATCHED: present on both sides, ``|difference|`` below tolerance
    - MISMATCHED: present on both sides, amounts differ
    - ONLY_A / ONLY_B: one-sided presence (kept apart from MISMATCHED so a
      missing record is distinguishable from a wrong amount)
    """
    MATCHED = "matched"
    MISMATCHED = "mismatched"
    ONLY_A = "only_a"
    ONLY_B = "only_b"


@dataclass
class KeyAggregate:
    amount: float
    sample: Any  # 최초 행 (날짜 등 표시용)
    count: int = 1


@dataclass(frozen=True)
class ReconciliationRow:
    key: str  # 정규화된 승인번호
    side_a_amount: float | None
    side_b_amount: float | None
    difference: float
    status: ReconciliationStatus
    side_a_sample: Any = None
    side_b_sample: Any = None

    @property
    def remark(self) -> str | None:
        return getattr(self.side_a_sample, "remark", None)


@dataclass(frozen=True)
class ReconciliationSummary:
    total_a: float
    total_b: float
    total_keys: int
    matched: int
    mismatched: int
    only_a: int
    only_b: int
    total_difference: float


@dataclass(frozen=True)
class SettlementEntry:
    """A single approval line from either settlement source."""
    approval_no: str
    amount: float
    date: str | None = None  # 승인일 / 결제일시 (원문 그대로)
    remark: str | None = None  # 비고 (A 측만)
