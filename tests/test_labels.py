import logging

import polars as pl
import pytest

from neurocohort.labels import (
    Tristate,
    derive_label,
    find_unrecognized,
    label_expression,
    normalize_indicators,
    parse_indicator,
)


@pytest.mark.parametrize(
    "indicators, expected",
    [
        ([False, None], False),
        ([None, None], None),
        ([None, True], True),
        ([True], True),
        ([False, False, False], False),
        ([None, False, True], True),
        ([], None),
    ],
)
def test_derive_label(indicators, expected):
    assert derive_label(indicators) is expected


def test_derive_label_accepts_tristate():
    assert derive_label([Tristate.UNKNOWN, Tristate.YES]) is True
    assert derive_label([Tristate.NO, Tristate.UNKNOWN]) is False
    assert derive_label([Tristate.UNKNOWN]) is None


def test_all_missing_is_not_false():
    """An all-unknown subject has no outcome rather than a negative one."""
    assert derive_label([None, None, None]) is None
    assert derive_label([None, None, None]) is not False


@pytest.mark.parametrize("raw", ["yes", "YES", "Yes", " Yes "])
def test_parse_indicator_yes(raw):
    assert parse_indicator(raw) is Tristate.YES


@pytest.mark.parametrize("raw", ["no", "NO", "No"])
def test_parse_indicator_no(raw):
    assert parse_indicator(raw) is Tristate.NO


def test_parse_indicator_missing():
    assert parse_indicator("N/A") is Tristate.UNKNOWN
    assert parse_indicator(None) is Tristate.UNKNOWN


def test_parse_indicator_rejects_unknown_literal():
    with pytest.raises(ValueError, match="maybe"):
        parse_indicator("maybe")


def test_tristate_roundtrip_to_optional():
    assert Tristate.coerce(True).to_optional() is True
    assert Tristate.coerce(False).to_optional() is False
    assert Tristate.coerce(None).to_optional() is None


def test_label_expression_matches_derive_label():
    rows = [
        [True, None, None],
        [False, None, None],
        [None, None, None],
        [None, False, True],
        [False, False, False],
    ]
    table = pl.DataFrame(rows, schema={"a": pl.Boolean, "b": pl.Boolean, "c": pl.Boolean}, orient="row")

    labels = table.select(label_expression(["a", "b", "c"]).alias("label"))["label"].to_list()

    assert labels == [derive_label(r) for r in rows]


def test_label_expression_requires_columns():
    with pytest.raises(ValueError):
        label_expression([])


def test_normalize_indicators_maps_vocabulary():
    table = pl.DataFrame({"s": ["yes", "NO", "N/A", None, "Yes"]})

    result = normalize_indicators(table, ["s"])

    assert result.schema["s"] == pl.Boolean
    assert result["s"].to_list() == [True, False, None, None, True]


def test_normalize_indicators_warns_on_unrecognized(caplog):
    table = pl.DataFrame({"s": ["yes", "maybe", "maybe", "no"]})

    with caplog.at_level(logging.WARNING, logger="neurocohort.labels"):
        result = normalize_indicators(table, ["s"])

    assert result["s"].to_list() == [True, None, None, False]
    assert "'maybe'" in caplog.text
    assert "2 rows" in caplog.text


def test_normalize_indicators_missing_column_is_all_null(caplog):
    table = pl.DataFrame({"s": ["yes"]})

    with caplog.at_level(logging.WARNING, logger="neurocohort.labels"):
        result = normalize_indicators(table, ["s", "absent"])

    assert result["absent"].to_list() == [None]
    assert "absent" in caplog.text


def test_normalize_indicators_passes_booleans_through():
    table = pl.DataFrame({"s": [True, None, False]})

    result = normalize_indicators(table, ["s"])

    assert result["s"].to_list() == [True, None, False]


def test_find_unrecognized_counts_values():
    table = pl.DataFrame({"a": ["yes", "Y", "Y"], "b": ["N/A", "unsure", "no"]})

    bad = find_unrecognized(table, ["a", "b"])

    assert bad.rows() == [("a", "Y", 2), ("b", "unsure", 1)]


def test_find_unrecognized_empty():
    table = pl.DataFrame({"a": ["yes", "no", "N/A"]})

    assert find_unrecognized(table, ["a"]).height == 0
