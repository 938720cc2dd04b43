"""
Unit tests for the column analyzer.
"""
import pandas as pd
import pytest
from csvcharts.services.analyzer import analyze_column, parse_date, parse_dates, recommend_chart

FRUITS = ["apple", "banana", "cherry", "grape", "kiwi", "lemon", "mango", "pear", "plum", "peach"]


def column(values, name="col"):
    """Build records holding a single column."""
    return [{name: v} for v in values]


@pytest.mark.unit
def test_numeric_column_statistics():
    """Numbers get min, max and mean over non-blank cells."""
    summary = analyze_column(column([3, 1, 2, None]), "col")

    assert summary.type == "numeric"
    assert summary.min == 1
    assert summary.max == 3
    assert summary.average == 2.0
    assert summary.unique_values == 3
    assert summary.has_nulls is True
    assert summary.is_empty is False
    assert summary.distribution is None


@pytest.mark.unit
def test_numeric_average_keeps_full_precision():
    summary = analyze_column(column([0.1, 0.2, 0.4]), "col")
    assert summary.average == pytest.approx(0.7 / 3)
    assert summary.min <= summary.average <= summary.max


@pytest.mark.unit
def test_numeric_chart_line_when_mostly_unique():
    # 3 unique of 4 rows > 0.7
    summary = analyze_column(column([3, 1, 2, None]), "col")
    assert summary.recommended_chart == "line"


@pytest.mark.unit
def test_numeric_chart_column_for_moderate_cardinality():
    values = [i % 10 for i in range(20)]
    summary = analyze_column(column(values), "col")
    assert summary.unique_values == 10
    assert summary.recommended_chart == "column"


@pytest.mark.unit
def test_numeric_chart_bar_for_few_values():
    values = [1, 2, 3] * 7
    summary = analyze_column(column(values), "col")
    assert summary.type == "numeric"
    assert summary.recommended_chart == "bar"


@pytest.mark.unit
def test_numeric_strings_are_not_numeric():
    """Strings that look like numbers never make a column numeric."""
    summary = analyze_column(column(["3", "apple", "4"]), "col")
    assert summary.type != "numeric"
    assert summary.min is None


@pytest.mark.unit
def test_date_column_short_series_is_line():
    values = [f"2024-01-{day:02d}" for day in range(1, 11)]
    summary = analyze_column(column(values), "col")

    assert summary.type == "date"
    assert summary.recommended_chart == "line"
    assert summary.min is None
    assert summary.distribution is None


@pytest.mark.unit
def test_date_column_long_series_is_area():
    values = [f"2024-01-{day:02d}" for day in range(1, 17)]
    summary = analyze_column(column(values), "col")

    assert summary.type == "date"
    assert summary.recommended_chart == "area"


@pytest.mark.unit
def test_categorical_distribution_and_pie():
    values = [FRUITS[i % 3] for i in range(20)]
    summary = analyze_column(column(values), "col")

    assert summary.type == "categorical"
    assert summary.distribution == {"apple": 7, "banana": 7, "cherry": 6}
    assert sum(summary.distribution.values()) == 20
    assert summary.recommended_chart == "pie"


@pytest.mark.unit
def test_categorical_bar_for_six_to_ten_categories():
    values = [FRUITS[i % 8] for i in range(50)]
    summary = analyze_column(column(values), "col")

    assert summary.type == "categorical"
    assert summary.unique_values == 8
    assert summary.recommended_chart == "bar"


@pytest.mark.unit
def test_categorical_column_for_many_categories():
    values = [f"sku-{i % 12}" for i in range(100)]
    summary = analyze_column(column(values), "col")

    assert summary.type == "categorical"
    assert summary.unique_values == 12
    assert summary.recommended_chart == "column"


@pytest.mark.unit
def test_categorical_ratio_must_hold():
    """6 unique values in 20 rows fails the 0.2 ratio and falls back to text."""
    values = ["apple"] * 3 + ["banana"] * 2 + ["cherry", "grape", "kiwi", "lemon"]
    values += ["apple"] * 11
    summary = analyze_column(column(values), "col")

    assert summary.unique_values == 6
    assert summary.type == "text"
    assert summary.distribution is None
    assert summary.recommended_chart == "bar"


@pytest.mark.unit
def test_text_scatter_when_mostly_unique():
    summary = analyze_column(column(FRUITS), "col")

    assert summary.type == "text"
    assert summary.recommended_chart == "scatter"


@pytest.mark.unit
def test_all_blank_column_is_empty():
    summary = analyze_column(column([""] * 50), "col")

    assert summary.is_empty is True
    assert summary.type == "text"
    assert summary.has_nulls is True
    assert summary.unique_values == 0
    assert summary.recommended_chart == "bar"
    assert summary.min is None and summary.max is None and summary.average is None
    assert summary.distribution is None


@pytest.mark.unit
def test_missing_key_counts_as_blank():
    records = [{"col": 5}, {"other": 1}, {"col": None}]
    summary = analyze_column(records, "col")

    assert summary.type == "numeric"
    assert summary.has_nulls is True
    assert summary.unique_values == 1


@pytest.mark.unit
def test_zero_rows():
    summary = analyze_column([], "col")

    assert summary.is_empty is True
    assert summary.has_nulls is False
    assert summary.type == "text"


@pytest.mark.unit
def test_single_row_text_is_not_categorical():
    summary = analyze_column([{"col": "apple"}], "col")

    assert summary.type == "text"
    assert summary.unique_values == 1
    assert summary.recommended_chart == "scatter"


@pytest.mark.unit
def test_single_row_numeric():
    summary = analyze_column([{"col": 42}], "col")

    assert summary.type == "numeric"
    assert summary.min == summary.max == summary.average == 42
    assert summary.recommended_chart == "line"


@pytest.mark.unit
def test_mixed_numbers_and_text_fall_through():
    summary = analyze_column(column([1, "apple"]), "col")
    assert summary.type == "text"


@pytest.mark.unit
def test_distribution_keys_collapse_number_and_string():
    """A number and its string form are distinct values but share a key."""
    values = [7] * 5 + ["7"] * 5 + ["apple"] * 10
    summary = analyze_column(column(values), "col")

    assert summary.type == "categorical"
    assert summary.unique_values == 3
    assert summary.distribution == {"7": 10, "apple": 10}


@pytest.mark.unit
def test_distribution_keys_drop_trailing_zero():
    values = [2000.0] * 10 + ["apple"] * 10
    summary = analyze_column(column(values), "col")
    assert summary.distribution == {"2000": 10, "apple": 10}


@pytest.mark.unit
def test_row_order_does_not_change_summary():
    values = [FRUITS[i % 3] for i in range(20)] + [None, ""]
    forward = analyze_column(column(values), "col")
    backward = analyze_column(column(list(reversed(values))), "col")

    assert forward.model_dump() == backward.model_dump()


@pytest.mark.unit
def test_unit_is_never_derived():
    summary = analyze_column(column([1, 2, 3]), "col")
    assert summary.unit is None


@pytest.mark.unit
def test_parse_date():
    assert parse_date("2024-02-29") is not None
    assert parse_date("2024-01-01T10:30:00Z") is not None
    assert parse_date("banana") is None
    assert parse_date("nan") is None


@pytest.mark.unit
@pytest.mark.parametrize("column_type,unique,rows,expected", [
    ("numeric", 8, 10, "line"),
    ("numeric", 7, 10, "column"),
    ("numeric", 5, 100, "bar"),
    ("date", 3, 16, "area"),
    ("date", 3, 15, "line"),
    ("categorical", 5, 100, "pie"),
    ("categorical", 6, 100, "bar"),
    ("categorical", 10, 100, "bar"),
    ("categorical", 11, 100, "column"),
    ("text", 6, 10, "scatter"),
    ("text", 5, 10, "bar"),
])
def test_recommend_chart_table(column_type, unique, rows, expected):
    assert recommend_chart(column_type, unique, rows) == expected


@pytest.mark.unit
def test_month_names_are_not_dates():
    """Names without a year are categories, not a timeline."""
    summary = analyze_column(column(["May", "June", "April", "May", "June"] * 4), "col")

    assert summary.type == "categorical"
    assert summary.recommended_chart == "pie"


@pytest.mark.unit
@pytest.mark.parametrize("text", ["May", "Jan", "June", "10:30", "now", "Today", "tomorrow"])
def test_parse_date_rejects_partial_and_relative_values(text):
    assert parse_date(text) is None


@pytest.mark.unit
@pytest.mark.parametrize("text", ["2023-01", "Jan 2023", "5 May 2021", "2024-01-01 10:30"])
def test_parse_date_accepts_values_with_a_year(text):
    assert parse_date(text) is not None


@pytest.mark.unit
def test_now_keeps_a_column_from_being_dates():
    values = ["2024-01-01", "2024-01-02", "now"]
    summary = analyze_column(column(values), "col")
    assert summary.type != "date"


@pytest.mark.unit
def test_parse_dates_is_aligned_with_input():
    parsed = parse_dates(["2024-01-02", "banana", None, "2024-01-02", "2023-12-31T23:00:00Z"])

    assert len(parsed) == 5
    assert parsed.notna().tolist() == [True, False, False, True, True]
    assert parsed[0] == parsed[3]
    assert parsed[4] < parsed[0]


@pytest.mark.unit
def test_large_date_column_is_parsed_in_bulk(monkeypatch):
    """A long date column costs a bounded number of parser calls, not one per cell."""
    calls = []
    to_datetime = pd.to_datetime

    def counting_to_datetime(*args, **kwargs):
        calls.append(1)
        return to_datetime(*args, **kwargs)

    monkeypatch.setattr(pd, "to_datetime", counting_to_datetime)

    values = [f"2020-01-{day % 28 + 1:02d} {day % 24:02d}:00" for day in range(20000)]
    summary = analyze_column(column(values), "col")

    assert summary.type == "date"
    assert len(calls) <= 2


@pytest.mark.unit
def test_categorical_ratio_is_strict():
    """4 unique values in 20 rows is not below 20%, so the column is text."""
    values = [FRUITS[i % 4] for i in range(20)]
    summary = analyze_column(column(values), "col")

    assert summary.unique_values == 4
    assert summary.type == "text"

    summary = analyze_column(column(values + ["apple"]), "col")
    assert summary.type == "categorical"


@pytest.mark.unit
def test_integer_extrema_stay_integers():
    summary = analyze_column(column([2000, 2010, 2005]), "col")
    payload = summary.model_dump(by_alias=True, mode="json")

    assert payload["min"] == 2000 and isinstance(payload["min"], int)
    assert payload["max"] == 2010 and isinstance(payload["max"], int)
    assert payload["average"] == pytest.approx(2005)


@pytest.mark.unit
def test_statistics_absent_when_not_computed():
    text = analyze_column(column(FRUITS), "col").model_dump(by_alias=True)
    for key in ["min", "max", "average", "distribution", "unit"]:
        assert key not in text

    numeric = analyze_column(column([1, 2, 3]), "col").model_dump(by_alias=True)
    assert "distribution" not in numeric
    assert "unit" not in numeric
    assert numeric["min"] == 1
