"""Shared pytest fixtures for the test suite."""

import pandas as pd
import pytest

from gong_core.data import _load_dashboard_data_cached

SAMPLE_CSV = """User Name,Month,Metric,Value
Arturo Alvarado,2025-01,Avg Talk %,60
Gabby Steele,2025-01,Avg Talk %,80
Pat Unlisted,2025-01,Avg Talk %,70
Arturo Alvarado,2025-02,Avg Talk %,55.5
Gabby Steele,2025-02,Avg Talk %,66
Arturo Alvarado,2025-04,Avg Talk %,62
Arturo Alvarado,2025-01,Longest Monologue (min),140
Gabby Steele,2025-01,Total Call Time (min),300
Gabby Steele,2025-01,Total Calls (Interaction),12
Arturo Alvarado,2025-01,Total Calls,40
,2025-01,Total Calls,10
Gabby Steele,,Total Calls,10
Gabby Steele,2025-02,,10
Gabby Steele,2025-02,Total Calls,
Gabby Steele,2025-03,Total Calls,n/a
Gabby Steele,2025-07,Total Calls,33
"""


def _make_records(rows):
    return pd.DataFrame(rows, columns=["rep_name", "month", "metric", "value"])


@pytest.fixture
def make_records():
    return _make_records


@pytest.fixture
def sample_text():
    return SAMPLE_CSV


@pytest.fixture
def sample_csv(tmp_path):
    path = tmp_path / "gong.csv"
    path.write_text(SAMPLE_CSV)
    return path


@pytest.fixture
def records():
    """Normalized records covering both teams, an unlisted rep and two quarters."""
    return _make_records(
        [
            ("Arturo Alvarado", "2025-01", "Avg Talk %", 60.0),
            ("Gabby Steele", "2025-01", "Avg Talk %", 80.0),
            ("Pat Unlisted", "2025-01", "Avg Talk %", 70.0),
            ("Arturo Alvarado", "2025-02", "Avg Talk %", 55.5),
            ("Brandon Monroe", "2025-02", "Avg Talk %", 44.0),
            ("Arturo Alvarado", "2025-04", "Avg Talk %", 62.0),
            ("Arturo Alvarado", "2025-01", "Total Calls", 40.0),
            ("Gabby Steele", "2025-07", "Total Calls", 33.0),
        ]
    )


@pytest.fixture(autouse=True)
def clear_load_cache():
    _load_dashboard_data_cached.cache_clear()
    yield
    _load_dashboard_data_cached.cache_clear()


@pytest.fixture
def data_env(monkeypatch, sample_csv):
    """Point settings at the sample CSV."""
    monkeypatch.setenv("GONG_DATA_DIR", str(sample_csv.parent))
    monkeypatch.setenv("GONG_DATA_FILE", sample_csv.name)
    return sample_csv
