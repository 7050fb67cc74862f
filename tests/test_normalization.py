"""Tests for feed record and payload normalization."""

from __future__ import annotations

import pytest

from movieshows.normalization import (
    extract_records,
    normalize_item,
    normalize_payload,
    resolve_id,
    resolve_type,
)


@pytest.mark.parametrize(
    ("record", "expected"),
    [
        ({"id": 7, "tmdb_id": 99, "imdb_id": "tt1"}, "7"),
        ({"tmdb_id": 99, "imdb_id": "tt1"}, "99"),
        ({"tmdbId": 12, "imdbId": "tt2"}, "12"),
        ({"imdb_id": "tt3", "imdbId": "tt4", "slug": "x"}, "tt3"),
        ({"imdbId": "tt4", "slug": "x"}, "tt4"),
        ({"slug": "the-film", "key": "k1"}, "the-film"),
        ({"key": "k1", "title": "Ignored"}, "k1"),
        ({"id": None, "tmdb_id": 5}, "5"),
    ],
)
def test_resolve_id_respects_identifier_priority(record, expected):
    assert resolve_id(record) == expected


def test_resolve_id_synthesizes_from_title_and_year():
    assert resolve_id({"name": " Arrival ", "year": 2016}) == "Arrival-2016"
    assert resolve_id({"title": "Show", "first_air_date": "2008-01-20"}) == "Show-2008"
    assert resolve_id({"primaryTitle": "Untimed"}) == "Untimed-unknown"
    assert resolve_id({}) == "unknown-unknown"


def test_synthesized_id_is_deterministic():
    record = {"title": "Repeat", "release_year": 1999}
    assert resolve_id(record) == resolve_id(dict(record)) == "Repeat-1999"


def test_synthesized_ids_collide_for_titleless_records_sharing_a_year():
    # Known limitation: distinct records without ids or titles are not
    # disambiguated any further.
    first = {"year": 2001, "overview": "One"}
    second = {"year": 2001, "overview": "Two"}
    assert resolve_id(first) == resolve_id(second) == "unknown-2001"

    items = normalize_payload([first, second])
    assert len(items) == 1
    assert items[0].description == "One"


@pytest.mark.parametrize(
    ("record", "expected"),
    [
        ({"type": "TV"}, "tv"),
        ({"media_type": "tv_show"}, "tv"),
        ({"kind": "Show"}, "tv"),
        ({"type": "series"}, "tv"),
        ({"mediaType": "Movie"}, "movie"),
        ({"type": "film"}, "movie"),
        ({"number_of_seasons": 3}, "tv"),
        ({"seasons": []}, "tv"),
        ({"type": "documentary", "seasons": 2}, "tv"),
        ({"type": "documentary"}, "movie"),
        ({}, "movie"),
    ],
)
def test_resolve_type(record, expected):
    assert resolve_type(record) == expected


def test_normalize_item_reads_alias_fields():
    item = normalize_item(
        {
            "imdbId": "tt0111161",
            "original_title": "  The Shawshank Redemption ",
            "release_date": "1994-09-23",
            "poster_url": "https://img.example.com/p.jpg",
            "trailer_url": "https://cdn.example.com/t.mp4",
            "plot": "Two imprisoned men bond.",
        }
    )

    assert item.id == "tt0111161"
    assert item.title == "The Shawshank Redemption"
    assert item.type == "movie"
    assert item.year == 1994
    assert item.thumbnail == "https://img.example.com/p.jpg"
    assert item.video_url == "https://cdn.example.com/t.mp4"
    assert item.description == "Two imprisoned men bond."
    assert item.coming_soon is False


def test_normalize_item_defaults_missing_assets_to_empty_strings():
    item = normalize_item({"id": "bare"})

    assert item.title == "bare"
    assert item.year is None
    assert item.thumbnail == ""
    assert item.video_url == ""
    assert item.description == ""


def test_normalize_item_year_falls_back_to_air_date_and_rejects_garbage():
    assert normalize_item({"id": 1, "first_air_date": "2011-04-17"}).year == 2011
    assert normalize_item({"id": 1, "year": "TBA"}).year is None
    assert normalize_item({"id": 1, "release_date": 20200101}).year is None


@pytest.mark.parametrize(
    ("record", "expected"),
    [
        ({"comingSoon": True}, True),
        ({"coming_soon": "yes"}, True),
        ({"upcoming": 1}, True),
        ({"status": "Coming Soon"}, True),
        ({"status": "Released"}, False),
        ({"comingSoon": False, "status": "coming in may"}, True),
        ({"upcoming": "false"}, True),
        ({"comingSoon": "soon"}, True),
        ({"comingSoon": "Y"}, True),
        ({"upcoming": ["2025"]}, True),
        ({"comingSoon": ""}, False),
        ({"comingSoon": 0}, False),
    ],
)
def test_coming_soon_flag(record, expected):
    assert normalize_item({"id": "x", **record}).coming_soon is expected


def test_normalize_item_keeps_raw_record_reference():
    record = {"id": "r1", "title": "Raw"}
    item = normalize_item(record)
    assert item.raw is record
    assert normalize_item(record) == item


def test_extract_records_detects_supported_shapes():
    movie = {"id": "m"}
    show = {"id": "s"}
    assert extract_records([movie]) == [movie]
    assert extract_records({"items": [movie], "all": [show]}) == [movie]
    assert extract_records({"all": [show]}) == [show]
    assert extract_records({"tv": [show], "movies": [movie]}) == [movie, show]
    assert extract_records({"movies": [movie], "tv": "broken"}) == [movie]
    assert extract_records({"items": "not-a-list"}) is None
    assert extract_records({"results": [movie]}) is None
    assert extract_records("nope") is None
    assert extract_records(None) is None


def test_normalize_payload_movies_and_tv_scenario():
    payload = {
        "movies": [{"name": "A", "year": 2020}],
        "tv": [{"title": "B", "number_of_seasons": 2}],
    }

    items = normalize_payload(payload)

    assert [item.id for item in items] == ["A-2020", "B-unknown"]
    assert [item.type for item in items] == ["movie", "tv"]
    assert [item.title for item in items] == ["A", "B"]


def test_normalize_payload_keeps_first_duplicate():
    first = {"id": 1, "title": "First"}
    second = {"id": "1", "title": "Second"}

    items = normalize_payload([first, second, {"id": 2, "title": "Other"}])

    assert [item.id for item in items] == ["1", "2"]
    assert items[0] == normalize_item(first)


def test_normalize_payload_drops_unrepresentable_records():
    items = normalize_payload(
        [
            {"id": "", "title": ""},
            {"id": "", "title": "No id"},
            "just a string",
            42,
            {"id": "ok", "title": "Kept"},
        ]
    )

    assert [item.id for item in items] == ["ok"]


def test_normalize_payload_unknown_shape_is_empty():
    assert normalize_payload({"data": []}) == []
    assert normalize_payload(3.14) == []
