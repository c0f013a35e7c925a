from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from ..models.merge import MergeMapping, VendorSegment
from ..models.sheet import Row
from .normalize import normalize

"""Header resolution: maps a sheet's actual column headers to semantic roles.

Synonym lists are ordered; earlier synonyms win when several are present.
Resolution never raises, absence is signaled by ``None`` and callers treat a
missing role as "skip this derived value".
"""

logger = logging.getLogger(__name__)

__all__ = [
    "NAME_SYNONYMS",
    "BARCODE_SYNONYMS",
    "PRODUCT_CODE_SYNONYMS",
    "JOIN_KEY_GROUPS",
    "BASE_QTY_SYNONYMS",
    "BASE_LOCATION_SYNONYMS",
    "BASE_VENDOR_SYNONYMS",
    "SINNONHYEON",
    "NONHYEON",
    "VENDOR_SEGMENTS",
    "resolve_header",
    "resolve_headers",
    "find_header_containing",
    "pick_value",
    "detect_join_key",
    "compute_field_mapping",
    "MappingCache",
]

NAME_SYNONYMS = ("상품명", "상품이름", "제품명", "name", "product", "title")
BARCODE_SYNONYMS = ("바코드", "barcode", "ean", "ean13", "ean-13", "qr", "qr코드")
PRODUCT_CODE_SYNONYMS = ("상품코드", "상품 코드", "product code", "sku", "품번", "품목코드", "item code")

# 조인 키 후보 그룹 (우선순위 순서 유지)
JOIN_KEY_GROUPS: tuple[tuple[str, ...], ...] = (
    NAME_SYNONYMS,
    BARCODE_SYNONYMS,
    PRODUCT_CODE_SYNONYMS,
)

BASE_QTY_SYNONYMS = ("재고수량", "재고 수량", "수량", "현재고", "재고")
BASE_LOCATION_SYNONYMS = ("상품 매장 진열 위치", "진열 위치", "매장 진열 위치", "매장위치", "위치")
BASE_VENDOR_SYNONYMS = ("업체", "매장", "지점", "매장명")

SINNONHYEON = VendorSegment(
    name="sinnonhyeon",
    vendor_label="라페어 신논현점",
    qty_synonyms=("신논현재고", "신논 현재고", "현재고(신논현)", "신논현 현재고", "현재고 신논현"),
    location_synonyms=(
        "진열위치(신논현)",
        "진열위치 (신논현)",
        "진열 위치 (신논현)",
        "신논현 진열 위치",
        "신논현 위치",
        "신논 진열 위치",
    ),
)
NONHYEON = VendorSegment(
    name="nonhyeon",
    vendor_label="라페어 논현점",
    qty_synonyms=("논현재고", "논현 현재고", "현재고(논현)", "현재고 논현"),
    location_synonyms=(
        "진열위치(논현)",
        "진열위치 (논현)",
        "진열 위치 (논현)",
        "논현 진열 위치",
        "논현 위치",
    ),
)
# 순서 중요: 업체 미지정 행은 generic -> 첫번째 -> 두번째 순으로 소스 컬럼 선택
VENDOR_SEGMENTS: tuple[VendorSegment, ...] = (SINNONHYEON, NONHYEON)


def _normalized_index(headers: Iterable[str]) -> dict[str, str]:
    # 동일 정규화 키가 여러 번 나오면 마지막 헤더가 남는다
    return {normalize(h): h for h in headers}


def resolve_header(headers: Sequence[str], synonyms: Iterable[str]) -> str | None:
    """Return the original header matching the earliest synonym, or None."""
    if not headers:
        return None
    index = _normalized_index(headers)
    for syn in synonyms:
        found = index.get(normalize(syn))
        if found is not None:
            return found
    return None


def resolve_headers(headers: Sequence[str], synonyms: Iterable[str]) -> list[str]:
    """Every header matching a synonym, in synonym priority order (no duplicates)."""
    index = _normalized_index(headers)
    found: list[str] = []
    for syn in synonyms:
        h = index.get(normalize(syn))
        if h is not None and h not in found:
            found.append(h)
    return found


def find_header_containing(headers: Sequence[str], *fragments: str) -> str | None:
    """First header containing any fragment (case-insensitive), fragments tried in order."""
    for fragment in fragments:
        needle = fragment.lower()
        for h in headers:
            if needle in h.lower():
                return h
    return None


def pick_value(row: Row, candidates: Sequence[str]) -> Any:
    """First non-empty value among the candidate headers of a row.

    Mirrors the per-row fallback of sales exports where the item-level column
    may be blank and the order-level column carries the value instead.
    """
    for h in candidates:
        value = row.get(h)
        if value is None or value == "" or value == 0:
            continue
        if isinstance(value, float) and value != value:  # NaN
            continue
        return value
    return None


def detect_join_key(base_headers: Sequence[str], source_headers: Sequence[str]) -> str | None:
    """Pick the base-side column used to join base rows with overlay rows.

    Fallback chain:
    1. first synonym group resolved on *both* sides (product name, barcode, product code)
    2. any header whose normalized text is identical on both sides
    3. the first base header unconditionally
    """
    for group in JOIN_KEY_GROUPS:
        b = resolve_header(base_headers, group)
        s = resolve_header(source_headers, group)
        if b and s:
            return b  # 기준은 좌측(첫번째 파일)의 헤더명
    base_index = _normalized_index(base_headers)
    for sh in source_headers:
        match = base_index.get(normalize(sh))
        if match is not None:
            return match
    if base_headers:
        logger.debug("join key fallback to first base column: %s", base_headers[0])
        return base_headers[0]
    return None


def compute_field_mapping(
    base_headers: Sequence[str],
    source_headers: Sequence[str],
    segments: Sequence[VendorSegment] = VENDOR_SEGMENTS,
) -> MergeMapping:
    """Resolve the columns a stock merge reads from and writes to.

    The generic source columns start from the first segment's synonyms; when
    the overlay has none, a column named exactly like the resolved base column
    is accepted (same-schema overlay).
    """
    base_qty_key = resolve_header(base_headers, BASE_QTY_SYNONYMS)
    base_location_key = resolve_header(base_headers, BASE_LOCATION_SYNONYMS)
    base_vendor_key = resolve_header(base_headers, BASE_VENDOR_SYNONYMS)

    segment_qty_keys = {seg.name: resolve_header(source_headers, seg.qty_synonyms) for seg in segments}
    segment_location_keys = {
        seg.name: resolve_header(source_headers, seg.location_synonyms) for seg in segments
    }

    source_qty_key = segment_qty_keys.get(segments[0].name) if segments else None
    source_location_key = segment_location_keys.get(segments[0].name) if segments else None

    # 동일 형식 허용: 두번째 파일이 첫번째와 같은 헤더명을 사용하는 경우
    if source_qty_key is None and base_qty_key:
        source_qty_key = resolve_header(source_headers, [base_qty_key])
    if source_location_key is None and base_location_key:
        source_location_key = resolve_header(source_headers, [base_location_key])

    return MergeMapping(
        join_key=detect_join_key(base_headers, source_headers),
        base_qty_key=base_qty_key,
        base_location_key=base_location_key,
        base_vendor_key=base_vendor_key,
        source_qty_key=source_qty_key,
        source_location_key=source_location_key,
        segment_qty_keys=segment_qty_keys,
        segment_location_keys=segment_location_keys,
    )


class MappingCache:
    """Per-session cache of ``compute_field_mapping`` keyed by both header sets.

    Instances are owned by one caller (one pair of uploads); there is no
    module-level cache so unrelated uploads never share an entry.
    """

    def __init__(self, segments: Sequence[VendorSegment] = VENDOR_SEGMENTS) -> None:
        self._segments = tuple(segments)
        self._entries: dict[tuple[tuple[str, ...], tuple[str, ...]], MergeMapping] = {}

    def get(self, base_headers: Sequence[str], source_headers: Sequence[str]) -> MergeMapping:
        key = (tuple(base_headers), tuple(source_headers))
        mapping = self._entries.get(key)
        if mapping is None:
            mapping = compute_field_mapping(base_headers, source_headers, self._segments)
            self._entries[key] = mapping
        return mapping

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
