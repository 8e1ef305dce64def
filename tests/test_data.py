import math

import pandas as pd
import pytest

from gong_core.data import (
    EXCLUDED_METRICS,
    METRIC_RENAMES,
    DataQuality,
    filter_options,
    load_dashboard_data,
    load_records,
    normalize_records,
    parse_records_text,
    round_half_up,
)


class TestNormalizeRecords:
    def test_values_are_finite_numbers(self, sample_text):
        df = parse_records_text(sample_text)
        assert not df.empty
        assert all(math.isfinite(v) for v in df["value"])
        assert df["value"].dtype == float

    def test_excluded_metric_removed(self, sample_text):
        df = parse_records_text(sample_text)
        assert not df["metric"].isin(EXCLUDED_METRICS).any()

    def test_minute_labels_renamed(self, sample_text):
        df = parse_records_text(sample_text)
        metrics = set(df["metric"])
        assert not metrics & set(METRIC_RENAMES)
        assert "Longest Monologue (sec)" in metrics
        assert "Total Call Time (Avg min)" in metrics

    def test_rename_is_exact_match(self):
        raw = pd.DataFrame(
            {
                "User Name": ["A"],
                "Month": ["2025-01"],
                "Metric": ["Longest Monologue (min) extra"],
                "Value": [1],
            }
        )
        df = normalize_records(raw)
        assert df["metric"].tolist() == ["Longest Monologue (min) extra"]

    def test_rows_missing_fields_or_values_dropped(self, sample_text):
        dq = DataQuality()
        df = parse_records_text(sample_text, dq)
        assert dq.rows_read == 16
        assert dq.dropped_missing_fields == 3
        assert dq.dropped_excluded_metric == 1
        assert dq.dropped_non_numeric == 2
        assert dq.records == len(df) == 10

    def test_source_order_preserved(self, sample_text):
        df = parse_records_text(sample_text)
        assert df.iloc[0].tolist() == ["Arturo Alvarado", "2025-01", "Avg Talk %", 60.0]
        assert df.iloc[-1].tolist() == ["Gabby Steele", "2025-07", "Total Calls", 33.0]

    def test_whitespace_only_fields_count_as_missing(self):
        raw = pd.DataFrame({"User Name": ["  "], "Month": ["2025-01"], "Metric": ["Total Calls"], "Value": [3]})
        assert normalize_records(raw).empty

    def test_repeated_source_header_keeps_first(self):
        raw = pd.DataFrame(
            [["A", "2025-01", "2025-09", "Total Calls", 3]],
            columns=["User Name", "Month", "Month", "Metric", "Value"],
        )
        assert normalize_records(raw).iloc[0].tolist() == ["A", "2025-01", "Total Calls", 3.0]

    def test_padding_is_stripped_before_matching(self):
        raw = pd.DataFrame(
            {
                "User Name": [" Gabby Steele ", "Arturo Alvarado"],
                "Month": ["2025-01 ", "2025-01"],
                "Metric": [" Longest Monologue (min)", " Total Calls (Interaction) "],
                "Value": [5, 9],
            }
        )
        dq = DataQuality()
        df = normalize_records(raw, dq)
        assert df.iloc[0].tolist() == ["Gabby Steele", "2025-01", "Longest Monologue (sec)", 5.0]
        assert dq.dropped_excluded_metric == 1

    def test_infinite_values_dropped(self):
        raw = pd.DataFrame(
            {"User Name": ["A", "B"], "Month": ["2025-01"] * 2, "Metric": ["Total Calls"] * 2, "Value": ["inf", "5"]}
        )
        assert normalize_records(raw)["value"].tolist() == [5.0]

    def test_missing_column_raises(self):
        with pytest.raises(ValueError):
            normalize_records(pd.DataFrame({"User Name": ["A"], "Month": ["2025-01"]}))


class TestLoadRecords:
    def test_load_success(self, sample_csv):
        result = load_records(sample_csv)
        assert result.ok
        assert len(result.records) == 10

    def test_missing_file_degrades_to_empty(self, tmp_path):
        result = load_records(tmp_path / "nope.csv")
        assert not result.ok
        assert result.records.empty
        assert list(result.records.columns) == ["rep_name", "month", "metric", "value"]

    def test_wrong_header_degrades_to_empty(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("a,b\n1,2\n")
        result = load_records(path)
        assert result.records.empty
        assert "missing required columns" in result.error

    def test_canonical_name_in_header_does_not_shadow_source(self, tmp_path):
        path = tmp_path / "dupes.csv"
        path.write_text(
            "User Name,Month,Metric,Value,month\n"
            "Arturo Alvarado,2025-01,Avg Talk %,60,junk\n"
            "Gabby Steele,2025-01,Avg Talk %,80,junk\n"
        )
        result = load_records(path)
        assert result.ok
        assert list(result.records.columns) == ["rep_name", "month", "metric", "value"]
        assert result.records["month"].tolist() == ["2025-01", "2025-01"]
        assert result.records["value"].tolist() == [60.0, 80.0]

    def test_canonical_column_listed_first_is_ignored(self, tmp_path):
        path = tmp_path / "dupes_first.csv"
        path.write_text("value,User Name,Month,Metric,Value\nx,Gabby Steele,2025-02,Total Calls,12\n")
        result = load_records(path)
        assert result.ok
        assert result.records.iloc[0].tolist() == ["Gabby Steele", "2025-02", "Total Calls", 12.0]

    def test_empty_file_degrades_to_empty(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        result = load_records(path)
        assert result.records.empty
        assert result.error


class TestLoadDashboardData:
    def test_reads_configured_file(self, data_env):
        ctx = load_dashboard_data()
        assert ctx["error"] is None
        assert ctx["files"] == [data_env.name]
        assert ctx["dq"]["records"] == 10

    def test_missing_file_is_error_signal(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GONG_DATA_DIR", str(tmp_path))
        ctx = load_dashboard_data()
        assert ctx["records"].empty
        assert ctx["files"] == []
        assert "not found" in ctx["error"]


class TestFilterOptions:
    def test_sorted_unique_values(self, records):
        options = filter_options(records)
        assert options["reps"] == ["Arturo Alvarado", "Brandon Monroe", "Gabby Steele", "Pat Unlisted"]
        assert options["months"] == ["2025-01", "2025-02", "2025-04", "2025-07"]
        assert options["quarters"] == ["Q1 2025", "Q2 2025"]

    def test_empty_records(self):
        assert filter_options(pd.DataFrame()) == {"reps": [], "metrics": [], "months": [], "quarters": []}


@pytest.mark.parametrize(
    "value,expected",
    [(2.675, 2.68), (70.0, 70.0), (1.005, 1.01), (None, None)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value, 2) == expected
