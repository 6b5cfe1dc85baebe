"""
Best-effort extraction of administrative regions from Korean address text.

"강원도 평창군 대관령면"  -> ("강원도", "평창군")
"부산광역시 해운대구"     -> ("부산광역시", "해운대구")
"Pyeongchang resort"     -> ("Pyeongchang", "")

This is a heuristic over whitespace tokens, not a gazetteer lookup. When no
token looks like a province the first token is used, even if it is wrong.
"""
from typing import Iterable, NamedTuple, Optional


PROVINCE_SUFFIXES = ("특별자치도", "특별시", "광역시", "도")
DISTRICT_SUFFIXES = ("시", "군", "구")


class Region(NamedTuple):
    province: str
    district: str


def _is_province(token: str) -> bool:
    return token.endswith(PROVINCE_SUFFIXES)


def parse_region(address: Optional[str]) -> Region:
    """Split an address into (province, district); either may be empty."""
    tokens = (address or "").split()
    if not tokens:
        return Region("", "")
    
    for index, token in enumerate(tokens):
        if not _is_province(token):
            continue
        district = ""
        if index + 1 < len(tokens) and tokens[index + 1].endswith(DISTRICT_SUFFIXES):
            district = tokens[index + 1]
        return Region(token, district)
    
    return Region(tokens[0], "")


def province_options(regions: Iterable[Optional[str]]) -> list[str]:
    """Distinct provinces across region strings, in first-seen order."""
    seen: dict[str, None] = {}
    for region in regions:
        province = parse_region(region).province
        if len(province) > 1:
            seen.setdefault(province, None)
    return list(seen)


def district_options(regions: Iterable[Optional[str]], province: str) -> list[str]:
    """Distinct districts of the region strings that fall in `province`."""
    seen: dict[str, None] = {}
    for region in regions:
        parsed = parse_region(region)
        if parsed.province == province and parsed.district:
            seen.setdefault(parsed.district, None)
    return list(seen)
