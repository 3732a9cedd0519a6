"""
Test suite for the analysis layer.

Tests column classification, statistics, outliers, correlations, data quality
signals and the assembled Analysis.
"""

import math
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from analysis import (  # noqa: E402
    AnalysisConfig,
    CategoricalProfile,
    ColumnType,
    ColumnTypeClassifier,
    CorrelationEngine,
    DataQualityAuditor,
    Dataset,
    NumericProfile,
    StatisticalProfiler,
    analyze_dataset,
    detect_outliers,
    generate_analysis_summary,
    is_missing,
    parse_number,
)


@pytest.fixture
def mixed_rows():
    """Five rows with a numeric column holding a gap and an outlier."""
    return [
        {"a": 1, "b": "x"},
        {"a": 2, "b": "y"},
        {"a": 3, "b": "x"},
        {"a": None, "b": "x"},
        {"a": 100, "b": "z"},
    ]


@pytest.fixture
def category_rows():
    """Nine rows with a three-valued categorical column."""
    colors = ["red", "green", "blue", "red", "red", "green", "blue", "red", "green"]
    return [{"id": i, "color": color} for i, color in enumerate(colors)]


@pytest.fixture
def random_rows():
    """Synthetic numeric data with a few gaps."""
    rng = np.random.RandomState(42)
    rows = []
    for i in range(200):
        rows.append(
            {
                "normal": float(rng.normal(50, 10)),
                "skewed": float(rng.exponential(3.0)),
                "sparse": float(rng.uniform()) if i % 7 else None,
            }
        )
    return rows


class TestCellPredicates:
    """Test missing and numeric cell handling."""

    def test_missing_markers(self):
        """None, empty strings and NaN are missing; zero and whitespace are not."""
        assert is_missing(None)
        assert is_missing("")
        assert is_missing(float("nan"))
        assert is_missing(np.nan)
        assert not is_missing(0)
        assert not is_missing(" ")
        assert not is_missing("x")

    def test_parse_number(self):
        """Numbers and numeric strings parse; booleans and infinite strings do not."""
        assert parse_number(3) == 3.0
        assert parse_number(" 4.5 ") == 4.5
        assert parse_number(float("inf")) == math.inf
        assert parse_number("Infinity") is None
        assert parse_number("abc") is None
        assert parse_number(True) is None
        assert parse_number(None) is None


class TestDataset:
    """Test dataset snapshots."""

    def test_column_order_from_first_row(self):
        """Columns follow the first row; later-only columns are appended."""
        dataset = Dataset.from_records([{"b": 1, "a": 2}, {"a": 3, "c": 4}])
        assert dataset.columns == ("b", "a", "c")

    def test_ragged_rows_are_missing(self):
        """A row lacking a column holds a missing cell for it."""
        dataset = Dataset.from_records([{"a": 1, "b": 2}, {"a": 3}])
        assert dataset.scan("b").missing_count == 1
        assert dataset.to_records()[1] == {"a": 3, "b": None}

    def test_input_rows_are_copied(self):
        """Mutating the caller's rows does not change the snapshot."""
        rows = [{"a": 1}]
        dataset = Dataset.from_records(rows)
        rows[0]["a"] = 99
        assert dataset.rows[0]["a"] == 1

    def test_frequencies_tie_order(self):
        """Counts sort by frequency, ties keep first-seen order."""
        dataset = Dataset.from_records([{"c": v} for v in ["b", "a", "a", "b", "c"]])
        assert dataset.scan("c").frequencies() == [("b", 2), ("a", 2), ("c", 1)]
        assert dataset.scan("c").frequencies(limit=1) == [("b", 2)]

    def test_booleans_distinct_from_integers(self):
        """True and 1 count as different values."""
        scan = Dataset.from_records([{"a": v} for v in [True, 1, 2, 3]]).scan("a")
        assert scan.unique_count == 4


class TestColumnTypeClassifier:
    """Test column type inference."""

    def test_numeric_strings(self):
        """Numeric strings classify as numeric."""
        classifier = ColumnTypeClassifier()
        assert classifier.classify_values(["1", "2.5", 3, None]) is ColumnType.NUMERIC

    def test_numeric_threshold(self):
        """Nine numbers out of ten reach the 90% threshold; eight do not."""
        classifier = ColumnTypeClassifier()
        nine = [1, 2, 3, 4, 5, 6, 7, 8, 9, "n/a"]
        eight = [1, 2, 3, 4, 5, 6, 7, 8, "n/a", "n/a"]
        assert classifier.classify_values(nine) is ColumnType.NUMERIC
        assert classifier.classify_values(eight) is not ColumnType.NUMERIC

    def test_infinite_values_count_as_numbers(self):
        """Infinite numbers do not stop a column being numeric."""
        classifier = ColumnTypeClassifier()
        assert classifier.classify_values([5, float("inf"), -3]) is ColumnType.NUMERIC

    def test_datetime(self):
        """ISO and slash-separated dates classify as datetime."""
        classifier = ColumnTypeClassifier()
        values = ["2024-01-01", "2024-02-15", "03/04/2024", "2023-12-31 10:30:00"]
        assert classifier.classify_values(values) is ColumnType.DATETIME

    def test_categorical_and_other(self):
        """Low-cardinality text is categorical, high-cardinality text is other."""
        classifier = ColumnTypeClassifier()
        low = ["a", "b", "a", "b", "a", "b", "a", "b"]
        high = ["alpha", "beta", "gamma", "delta", "epsilon"]
        assert classifier.classify_values(low) is ColumnType.CATEGORICAL
        assert classifier.classify_values(high) is ColumnType.OTHER

    def test_all_missing_is_other(self):
        classifier = ColumnTypeClassifier()
        assert classifier.classify_values([None, "", None]) is ColumnType.OTHER

    def test_sample_size_bounds_classification(self):
        """Only the configured prefix is inspected."""
        classifier = ColumnTypeClassifier(AnalysisConfig(classification_sample_size=5))
        values = [1, 2, 3, 4, 5] + ["text"] * 20
        assert classifier.classify_values(values) is ColumnType.NUMERIC

    def test_deterministic(self, mixed_rows):
        classifier = ColumnTypeClassifier()
        dataset = Dataset.from_records(mixed_rows)
        assert classifier.classify(dataset) == classifier.classify(dataset)


class TestStatisticalProfiler:
    """Test descriptive statistics."""

    def test_known_values(self):
        """Statistics of 1, 2, 3, 100 with population std and linear quartiles."""
        profiler = StatisticalProfiler()
        stats, outliers = profiler.compute_stats(np.array([3.0, 1.0, 100.0, 2.0]))

        assert stats.count == 4
        assert stats.mean == pytest.approx(26.5)
        assert stats.median == pytest.approx(2.5)
        assert stats.min == 1.0
        assert stats.max == 100.0
        assert stats.q1 == pytest.approx(1.75)
        assert stats.q3 == pytest.approx(27.25)
        assert stats.iqr == pytest.approx(25.5)
        assert stats.std == pytest.approx(math.sqrt(1801.25))
        assert stats.skewness > 0
        assert stats.outlier_count == 1
        assert outliers.count == 1

    def test_fewer_than_two_values(self):
        """A single value yields no stats instead of zero spread."""
        profiler = StatisticalProfiler()
        assert profiler.compute_stats(np.array([7.0])) == (None, None)
        assert profiler.compute_stats(np.array([])) == (None, None)

    def test_constant_column(self):
        """Zero spread gives zero std and zero skewness."""
        profiler = StatisticalProfiler()
        stats, _ = profiler.compute_stats(np.array([4.0, 4.0, 4.0]))
        assert stats.std == 0.0
        assert stats.skewness == 0.0
        assert stats.iqr == 0.0
        assert stats.outlier_count == 0

    def test_quartile_invariants(self, random_rows):
        """q1 <= median <= q3, iqr = q3 - q1 >= 0, min <= q1, max >= q3."""
        analysis = analyze_dataset(random_rows)
        assert analysis.numeric_columns == ["normal", "skewed", "sparse"]

        for name in analysis.numeric_columns:
            stats = analysis.columns[name].stats
            assert stats.min <= stats.q1 <= stats.median <= stats.q3 <= stats.max
            assert stats.iqr == pytest.approx(stats.q3 - stats.q1)
            assert stats.iqr >= 0

    def test_skewness_sign(self, random_rows):
        analysis = analyze_dataset(random_rows)
        assert analysis.columns["skewed"].stats.skewness > 0.5

    def test_histogram(self):
        profiler = StatisticalProfiler()
        bins = profiler.build_histogram(np.arange(100, dtype=float))
        assert len(bins) == 25
        assert sum(b.count for b in bins) == 100
        assert bins[0].start == 0.0
        assert bins[-1].end == 99.0

    def test_histogram_constant(self):
        profiler = StatisticalProfiler()
        bins = profiler.build_histogram(np.array([2.0, 2.0]))
        assert len(bins) == 1
        assert bins[0].count == 2

    def test_value_counts(self, category_rows):
        """Frequency table sorted by count, ties in first-seen order."""
        analysis = analyze_dataset(category_rows)
        profile = analysis.columns["color"]

        assert isinstance(profile, CategoricalProfile)
        assert profile.value_counts == [("red", 4), ("green", 3), ("blue", 2)]

    def test_value_counts_cap(self):
        """Only the configured number of entries is kept."""
        config = AnalysisConfig(value_counts_limit=2)
        rows = [{"c": c} for c in "aaaabbbccd" * 3]
        profile = analyze_dataset(rows, config).columns["c"]
        assert profile.value_counts == [("a", 12), ("b", 9)]


class TestOutlierDetector:
    """Test Tukey outlier detection."""

    def test_whiskers_clamped_to_range(self):
        values = np.array([1.0, 2.0, 3.0, 100.0])
        summary = detect_outliers(values, q1=1.75, q3=27.25, minimum=1.0, maximum=100.0)

        assert summary.lower_whisker == 1.0
        assert summary.upper_whisker == pytest.approx(65.5)
        assert summary.lower_fence == pytest.approx(-36.5)
        assert summary.count == 1
        assert summary.percentage == "25.0"

    def test_values_on_whisker_are_not_outliers(self):
        values = np.array([0.0, 1.0, 2.0, 3.0, 4.0])
        summary = detect_outliers(values, q1=1.0, q3=3.0, minimum=0.0, maximum=4.0)
        assert summary.count == 0

    def test_null_stats_have_no_outliers(self):
        analysis = analyze_dataset([{"a": 1}, {"a": None}])
        profile = analysis.columns["a"]
        assert isinstance(profile, NumericProfile)
        assert profile.stats is None
        assert profile.outliers is None


class TestCorrelationEngine:
    """Test pairwise correlations."""

    @pytest.fixture
    def correlated_rows(self):
        x = [1, 2, 3, 4, 5, 6]
        return [
            {"x": xi, "y": 2 * xi + 1, "neg": -xi, "noise": n, "const": 5}
            for xi, n in zip(x, [3, 1, 4, 1, 5, 9])
        ]

    def test_perfect_correlations(self, correlated_rows):
        analysis = analyze_dataset(correlated_rows)
        pairs = {(c.col1, c.col2): c.correlation for c in analysis.correlations}

        assert pairs[("x", "y")] == pytest.approx(1.0)
        assert pairs[("neg", "x")] == pytest.approx(-1.0)

    def test_pair_ordering_and_range(self, correlated_rows):
        """col1 < col2, values within [-1, 1], sorted by magnitude."""
        correlations = analyze_dataset(correlated_rows).correlations

        assert len(correlations) == 10
        for c in correlations:
            assert c.col1 < c.col2
            assert -1.0 <= c.correlation <= 1.0

        magnitudes = [abs(c.correlation) for c in correlations]
        assert magnitudes == sorted(magnitudes, reverse=True)

    def test_zero_variance_is_zero(self, correlated_rows):
        pairs = {(c.col1, c.col2): c.correlation for c in analyze_dataset(correlated_rows).correlations}
        assert pairs[("const", "x")] == 0.0
        assert not any(math.isnan(v) for v in pairs.values())

    def test_symmetric(self):
        """Swapping the column names gives the same coefficient."""
        rows = [{"p": p, "q": q} for p, q in [(1, 2), (2, 1), (3, 5), (4, 3), (5, 8)]]
        swapped = [{"q": r["p"], "p": r["q"]} for r in rows]

        forward = analyze_dataset(rows).correlations[0].correlation
        backward = analyze_dataset(swapped).correlations[0].correlation
        assert forward == pytest.approx(backward)

    def test_identical_columns(self):
        rows = [{"x": v, "x_copy": v} for v in [3, 1, 4, 1, 5]]
        assert analyze_dataset(rows).correlations[0].correlation == pytest.approx(1.0)

    def test_pairwise_complete(self):
        """Missing cells only drop the affected pair's rows."""
        rows = [
            {"a": 1, "b": 2, "c": None},
            {"a": 2, "b": 4, "c": None},
            {"a": 3, "b": 6, "c": None},
            {"a": None, "b": 8, "c": 1},
        ]
        correlations = analyze_dataset(rows).correlations

        assert [(c.col1, c.col2) for c in correlations] == [("a", "b")]
        assert correlations[0].correlation == pytest.approx(1.0)

    def test_single_numeric_column(self):
        engine = CorrelationEngine()
        dataset = Dataset.from_records([{"a": 1}, {"a": 2}])
        assert engine.compute(dataset.scan_columns(), ["a"]) == []


class TestDataQualityAuditor:
    """Test missing, infinite and duplicate detection."""

    def test_infinite_values(self):
        rows = [{"a": 5}, {"a": float("inf")}, {"a": -3}]
        analysis = analyze_dataset(rows)

        assert analysis.has_infinite_values
        assert analysis.infinite_value_stats["a"].count == 1
        assert analysis.infinite_value_stats["a"].percentage == "33.3"

    def test_negative_infinity(self):
        rows = [{"a": 1}, {"a": float("-inf")}, {"a": 2}, {"a": np.inf}]
        assert analyze_dataset(rows).infinite_value_stats["a"].count == 2

    def test_no_infinite_values(self, mixed_rows):
        analysis = analyze_dataset(mixed_rows)
        assert not analysis.has_infinite_values
        assert analysis.infinite_value_stats == {}

    def test_duplicates(self):
        rows = [{"v": v, "u": i} for i, v in enumerate(["a", "a", "b", "c", "c", "c"])]
        duplicates = analyze_dataset(rows).duplicate_stats

        assert "u" not in duplicates
        stat = duplicates["v"]
        assert stat.duplicate_count == 3
        assert stat.unique_values == 3
        assert stat.total_values == 6
        assert stat.duplicate_percentage == "50.0"
        assert stat.top_duplicates == [("c", 3), ("a", 2)]

    def test_duplicates_ignore_missing(self):
        rows = [{"v": None}, {"v": None}, {"v": "x"}]
        assert analyze_dataset(rows).duplicate_stats == {}

    def test_booleans_are_not_duplicates_of_integers(self):
        analysis = analyze_dataset([{"a": True}, {"a": 1}, {"a": 2}, {"a": 3}])

        assert analysis.duplicate_stats == {}
        assert analysis.columns["a"].unique_count == 4

    def test_boolean_value_counts(self):
        rows = [{"a": v} for v in [True, 1, True, 1, True, 1, 0, 0]]
        profile = analyze_dataset(rows).columns["a"]

        assert isinstance(profile, CategoricalProfile)
        assert profile.value_counts == [(True, 3), (1, 3), (0, 2)]
        assert [type(v) for v, _ in profile.value_counts] == [bool, int, int]

    def test_top_duplicates_truncated_and_capped(self):
        long_value = "y" * 50
        values = [long_value, long_value] + [str(i) for i in range(7) for _ in range(2)]
        auditor = DataQualityAuditor()
        dataset = Dataset.from_records([{"v": v} for v in values])
        duplicates = auditor.detect_duplicates(dataset.scan_columns())

        top = duplicates["v"].top_duplicates
        assert len(top) == 5
        assert top[0] == ("y" * 30, 2)

    def test_missing_percent_bounds(self):
        rows = [{"full": 1, "empty": None} for _ in range(4)]
        analysis = analyze_dataset(rows)

        assert analysis.columns["full"].missing_percent == "0.0"
        assert analysis.columns["empty"].missing_percent == "100.0"
        assert analysis.columns["empty"].column_type is ColumnType.OTHER


class TestAnalysisAssembler:
    """Test the assembled Analysis."""

    def test_scenario(self, mixed_rows):
        analysis = analyze_dataset(mixed_rows)
        a = analysis.columns["a"]

        assert analysis.row_count == 5
        assert analysis.column_count == 2
        assert a.column_type is ColumnType.NUMERIC
        assert a.missing_count == 1
        assert a.missing_percent == "20.0"
        assert a.unique_count == 4
        assert a.stats.mean == pytest.approx(26.5)

    def test_to_dict_shape(self, mixed_rows):
        result = analyze_dataset(mixed_rows).to_dict()

        assert set(result) == {
            "rowCount",
            "columnCount",
            "columns",
            "correlations",
            "numericColumns",
            "categoricalColumns",
            "dateColumns",
            "infiniteValueStats",
            "hasInfiniteValues",
            "duplicateStats",
        }
        column = result["columns"]["a"]
        assert column["type"] == "numeric"
        assert column["missing"] == 1
        assert column["missingPercent"] == "20.0"
        assert column["unique"] == 4
        assert column["stats"]["outlierCount"] == 1
        assert "valueCounts" not in column
        assert "histogram" not in column

    def test_to_dict_visuals(self, mixed_rows):
        column = analyze_dataset(mixed_rows).to_dict(include_visuals=True)["columns"]["a"]
        assert sum(b["count"] for b in column["histogram"]) == 4
        assert column["boxPlot"]["upperWhisker"] == pytest.approx(65.5)

    def test_categorical_to_dict(self, category_rows):
        result = analyze_dataset(category_rows).to_dict()
        assert result["categoricalColumns"] == ["color"]
        assert result["columns"]["color"]["stats"] is None
        assert result["columns"]["color"]["valueCounts"][0] == ["red", 4]

    def test_type_lists_match_profiles(self, random_rows, category_rows):
        for rows in (random_rows, category_rows):
            analysis = analyze_dataset(rows)
            for name, profile in analysis.columns.items():
                if name in analysis.numeric_columns:
                    assert isinstance(profile, NumericProfile)
                else:
                    assert not isinstance(profile, NumericProfile)

    def test_empty_dataset(self):
        result = analyze_dataset([]).to_dict()

        assert result["rowCount"] == 0
        assert result["columnCount"] == 0
        assert result["columns"] == {}
        assert result["correlations"] == []
        assert result["hasInfiniteValues"] is False

    def test_summary(self, mixed_rows):
        summary = generate_analysis_summary(analyze_dataset(mixed_rows), ["Filled missing values"])
        assert "Rows: 5" in summary
        assert "a: 1 (20.0%)" in summary
        assert "1. Filled missing values" in summary


class TestAnalysisConfig:
    """Test configuration loading and validation."""

    def test_defaults(self):
        config = AnalysisConfig()
        assert config.numeric_threshold == 0.9
        assert config.value_counts_limit == 15
        assert config.top_duplicates_limit == 5

    def test_invalid_threshold(self):
        with pytest.raises(ValueError):
            AnalysisConfig(numeric_threshold=1.5)

    def test_invalid_cap(self):
        with pytest.raises(ValueError):
            AnalysisConfig(top_duplicates_limit=0)

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("analysis:\n  value_counts_limit: 3\n  iqr_multiplier: 3.0\n")

        config = AnalysisConfig.from_yaml(path)
        assert config.value_counts_limit == 3
        assert config.iqr_multiplier == 3.0
        assert config.numeric_threshold == 0.9

    def test_from_missing_yaml(self, tmp_path):
        config = AnalysisConfig.from_yaml(tmp_path / "absent.yaml")
        assert config == AnalysisConfig()

    def test_shipped_config(self):
        path = Path(__file__).parent.parent / "config" / "analysis_config.yaml"
        assert AnalysisConfig.from_yaml(path) == AnalysisConfig()
