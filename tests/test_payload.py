import pytest

from balloon_tracks.payload import (
    coerce_timestamp,
    extract_observations,
    hour_timestamp,
    normalize_payload,
    recover_structure,
    repair_text,
)

NOW = 1_700_000_000.0


def test_coordinate_rows_with_optional_altitude():
    obs = normalize_payload("[[1.0,2.0],[3.0,4.0,500]]", hour_index=0, now=NOW)

    assert [(o.lat, o.lon, o.alt) for o in obs] == [(1.0, 2.0, None), (3.0, 4.0, 500.0)]
    assert all(o.ts == NOW for o in obs)


def test_trailing_comma_is_repaired():
    assert recover_structure('{"lat": 1.0, "lng": 2.0,}') == {"lat": 1.0, "lng": 2.0}

    obs = normalize_payload('{"lat": 1.0, "lng": 2.0,}', hour_index=0, now=NOW)
    assert len(obs) == 1
    assert (obs[0].lat, obs[0].lon) == (1.0, 2.0)


def test_newline_delimited_records():
    text = '{"lat": 1, "lon": 2}\n{"lat": 3, "lon": 4}\n'

    structure = recover_structure(text)
    obs = normalize_payload(text, hour_index=0, now=NOW)

    assert isinstance(structure, list) and len(structure) == 2
    assert [(o.lat, o.lon) for o in obs] == [(1.0, 2.0), (3.0, 4.0)]


def test_first_block_is_extracted_from_surrounding_noise():
    assert recover_structure("callback([[1, 2], [3, 4]]);") == [[1, 2], [3, 4]]


@pytest.mark.parametrize("text", ["", None, "not json at all", "{{{", "<html>502</html>"])
def test_unrecoverable_input_yields_no_observations(text):
    assert normalize_payload(text, hour_index=3, now=NOW) == []


def test_bom_and_non_finite_literals():
    text = '\ufeff[{"lat": NaN, "lon": 2}, {"lat": 3, "lon": -Infinity}, {"lat": 5, "lon": 6}]'

    obs = normalize_payload(text, hour_index=0, now=NOW)

    assert [(o.lat, o.lon) for o in obs] == [(5.0, 6.0)]


def test_single_quoted_values_become_strings():
    repaired = repair_text("{\"lat\": '1.5', \"lon\": '2.5'}")
    assert repaired == '{"lat": "1.5", "lon": "2.5"}'

    obs = normalize_payload("{\"lat\": '1.5', \"lon\": '2.5'}", hour_index=0, now=NOW)
    assert (obs[0].lat, obs[0].lon) == (1.5, 2.5)


def test_records_use_synonyms_and_skip_incomplete():
    structure = [
        {"Latitude": "10.5", "Lng": 20.25, "altitude": 18000},
        {"y": 1, "x": 2},
        {"lat": 5},
        {"lat": "north", "lon": 4},
    ]

    obs = extract_observations(structure, hour_index=2, now=NOW)

    assert [(o.lat, o.lon, o.alt) for o in obs] == [(10.5, 20.25, 18000.0), (1.0, 2.0, None)]
    assert all(o.ts == NOW - 2 * 3600 for o in obs)


def test_rows_skip_non_numeric_entries():
    structure = [[1, 2], ["a", 2], [3], [True, 4], ["7.5", "8.5", "n/a"]]

    obs = extract_observations(structure, hour_index=0, now=NOW)

    assert [(o.lat, o.lon, o.alt) for o in obs] == [(1.0, 2.0, None), (7.5, 8.5, None)]


def test_nested_walk_finds_records_and_timestamps():
    structure = {
        "meta": {"count": 3},
        "data": {
            "balloons": [
                {"position": {"latitude": 10, "longitude": 20, "timestamp": 1_699_990_000_000}},
                {"pos": {"lat": 11, "long": 21, "time": "2023-11-14T00:00:00Z"}},
                {"pos": {"lat": 12, "lon": 22, "ts": "garbage"}},
            ]
        },
    }

    obs = extract_observations(structure, hour_index=1, now=NOW)

    assert [(o.lat, o.lon) for o in obs] == [(10.0, 20.0), (11.0, 21.0), (12.0, 22.0)]
    assert obs[0].ts == 1_699_990_000
    assert obs[1].ts == 1_699_920_000
    assert obs[2].ts == NOW - 3600


def test_records_without_coordinates_fall_through_to_nested_walk():
    structure = [{"id": "a", "fix": {"lat": 1, "lon": 2}}]

    obs = extract_observations(structure, hour_index=0, now=NOW)

    assert [(o.lat, o.lon) for o in obs] == [(1.0, 2.0)]


@pytest.mark.parametrize(
    "raw, expected",
    [
        (1_700_000_000, 1_700_000_000),
        (1_700_000_000_123, 1_700_000_000),
        ("1700000000", 1_700_000_000),
        ("1700000000600", 1_700_000_001),
        ("2023-11-14T22:13:20Z", 1_700_000_000),
        ("not a date", None),
        (None, None),
        (True, None),
        (float("nan"), None),
    ],
)
def test_coerce_timestamp(raw, expected):
    assert coerce_timestamp(raw) == expected


def test_hour_timestamp_counts_back_from_now():
    assert hour_timestamp(0, now=NOW + 0.7) == NOW
    assert hour_timestamp(23, now=NOW) == NOW - 23 * 3600


def test_scalar_line_does_not_hide_braced_block():
    text = 'junk {"lat": 10.5, "lon":\n20.5\n}'

    assert recover_structure(text) == {"lat": 10.5, "lon": 20.5}

    obs = normalize_payload(text, hour_index=0, now=NOW)
    assert [(o.lat, o.lon) for o in obs] == [(10.5, 20.5)]


def test_scalar_lines_are_skipped_between_records():
    text = '{"lat": 1, "lon": 2}\n42\ntrue\n{"lat": 3, "lon": 4}'

    assert recover_structure(text) == [{"lat": 1, "lon": 2}, {"lat": 3, "lon": 4}]
