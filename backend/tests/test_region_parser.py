"""
Tests for the region parser.
"""
from crewlink.services.region_parser import (
    Region,
    district_options,
    parse_region,
    province_options,
)


def test_province_and_district():
    assert parse_region("강원도 평창군 대관령면") == Region("강원도", "평창군")


def test_metropolitan_city_with_gu():
    assert parse_region("부산광역시 해운대구 우동") == Region("부산광역시", "해운대구")


def test_special_city():
    assert parse_region("서울특별시 강남구") == Region("서울특별시", "강남구")


def test_special_self_governing_province():
    assert parse_region("제주특별자치도 서귀포시 중문동") == Region("제주특별자치도", "서귀포시")


def test_district_requires_district_suffix():
    """The token after the province only counts if it ends in 시/군/구."""
    assert parse_region("강원도 대관령면") == Region("강원도", "")


def test_province_found_after_leading_tokens():
    assert parse_region("(우) 25342 강원도 평창군") == Region("강원도", "평창군")


def test_province_only():
    assert parse_region("경기도") == Region("경기도", "")


def test_fallback_to_first_token():
    """Without a recognisable province the first token is used."""
    assert parse_region("Pyeongchang Alpensia resort") == Region("Pyeongchang", "")


def test_empty_and_missing_input():
    assert parse_region("") == Region("", "")
    assert parse_region("   ") == Region("", "")
    assert parse_region(None) == Region("", "")


def test_collapses_repeated_whitespace():
    assert parse_region("  강원도   정선군  ") == Region("강원도", "정선군")


def test_province_options_are_unique_in_first_seen_order():
    regions = [
        "강원도 평창군",
        "제주특별자치도 제주시",
        "강원도 정선군",
        None,
        "",
    ]
    assert province_options(regions) == ["강원도", "제주특별자치도"]


def test_province_options_skip_single_character_tokens():
    assert province_options(["A 평창군"]) == []


def test_district_options_for_province():
    regions = [
        "강원도 평창군 대관령면",
        "강원도 정선군",
        "강원도 평창군 봉평면",
        "제주특별자치도 제주시",
        "강원도",
    ]
    assert district_options(regions, "강원도") == ["평창군", "정선군"]
    assert district_options(regions, "제주특별자치도") == ["제주시"]
    assert district_options(regions, "경기도") == []
