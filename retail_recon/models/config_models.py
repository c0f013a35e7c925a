from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the retail spreadsheet tools.

The loader in retail_recon/config/loader.py builds these from YAML; engines
never read them directly, the CLI passes the relevant values down as keyword
arguments.
"""

__all__ = [
    "DEFAULT_FIXED_UNIT_PRICES",
    "AppConfig",
]

# 쇼핑백은 원본 개별금액과 무관하게 고정 단가 적용
DEFAULT_FIXED_UNIT_PRICES: dict[str, float] = {
    "쇼핑백 중": 100,
    "쇼핑백 대": 200,
}


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object.

    All values have defaults so a missing config file behaves like an empty one.
    """
    reconciliation_tolerance: float = 1.0  # |difference| < tolerance -> matched
    sock_marker: str = "양말"
    variant_delimiter: str = "_"
    fixed_unit_prices: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_FIXED_UNIT_PRICES)
    )
    reference_csv: str | None = None  # 참조상품 CSV 경로
    output_directory: str = "./output"
