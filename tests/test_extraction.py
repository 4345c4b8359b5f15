"""Tests for result extraction, similarity scoring and the result schema."""

import pytest
from pydantic import ValidationError

from blending.models import BlendingTarget
from blending.optimization.constants import STATUS_OPTIMAL, STATUS_INFEASIBLE
from blending.optimization.extraction import (
    retained_fractions,
    predict_attributes,
    similarity_score,
    build_result,
    infeasible_result,
    composition_frame,
)
from blending.optimization.result_schema import BlendingResult


class TestRetainedFractions:
    """Tests for dropping solver noise."""

    def test_drops_values_at_threshold(self):
        raw = {"A": 0.6, "B": 0.4, "C": 1e-4, "D": 5e-5, "E": 0.0}
        assert retained_fractions(raw) == {"A": 0.6, "B": 0.4}

    def test_none_counts_as_zero(self):
        assert retained_fractions({"A": 1.0, "B": None}) == {"A": 1.0}


class TestPredictAttributes:
    """Tests for weighted attribute prediction."""

    def test_weighted_average(self, old_robusta, arabica):
        predicted = predict_attributes(
            {"B01_ROB_OLD": 0.5, "B03_ARA_DL": 0.5},
            [old_robusta, arabica],
        )

        assert predicted["price"] == pytest.approx(167500.0)
        assert predicted["acid"] == pytest.approx(6.0)
        assert predicted["bitter"] == pytest.approx(5.5)
        assert predicted["sweet"] == pytest.approx(5.0)
        assert predicted["caffeine"] == pytest.approx(1.85)

    def test_empty_blend_predicts_zero(self, demo_batches):
        predicted = predict_attributes({}, demo_batches)
        assert all(v == 0.0 for v in predicted.values())


class TestSimilarityScore:
    """Tests for sensory similarity (acid/bitter/sweet only)."""

    def test_exact_match_scores_100(self, pour_over_target):
        predicted = {"price": 1.0, "acid": 5.5, "bitter": 6.0, "sweet": 5.0, "caffeine": 9.0}
        assert similarity_score(predicted, pour_over_target) == pytest.approx(100.0)

    def test_price_and_caffeine_ignored(self, pour_over_target):
        """Misses on price and caffeine do not lower the score."""
        near = {"price": 160000, "acid": 5.5, "bitter": 6.0, "sweet": 5.0, "caffeine": 2.0}
        far = {"price": 999999, "acid": 5.5, "bitter": 6.0, "sweet": 5.0, "caffeine": 0.0}

        assert similarity_score(near, pour_over_target) == similarity_score(far, pour_over_target)

    def test_partial_deviation(self, pour_over_target):
        """Total deviation 1.65 over a target sum of 16.5 costs 10 points."""
        predicted = {"price": 0, "acid": 5.5 + 0.65, "bitter": 6.0 - 0.5, "sweet": 5.5, "caffeine": 0}
        assert similarity_score(predicted, pour_over_target) == pytest.approx(90.0)

    def test_clamped_at_zero(self, pour_over_target):
        predicted = {"price": 0, "acid": 50.0, "bitter": 0.0, "sweet": 0.0, "caffeine": 0}
        assert similarity_score(predicted, pour_over_target) == 0.0

    def test_zero_sensory_target(self):
        target = BlendingTarget(total_output_kg=10)
        zero = {"price": 5.0, "acid": 0.0, "bitter": 0.0, "sweet": 0.0, "caffeine": 0.0}
        off = {"price": 5.0, "acid": 1.0, "bitter": 0.0, "sweet": 0.0, "caffeine": 0.0}

        assert similarity_score(zero, target) == 100.0
        assert similarity_score(off, target) == 0.0


class TestBuildResult:
    """Tests for building a feasible BlendingResult."""

    def test_builds_weights_and_predictions(self, demo_batches, pour_over_target):
        result = build_result(
            raw_fractions={"B01_ROB_OLD": 0.7, "B03_ARA_DL": 0.3, "B02_ROB_NEW": 0.0, "B04_CULI": 2e-5},
            batches=demo_batches,
            target=pour_over_target,
            status=STATUS_OPTIMAL,
            objective_value=12.5,
        )

        assert result.feasible is True
        assert result.status == STATUS_OPTIMAL
        assert result.composition == {"B01_ROB_OLD": 0.7, "B03_ARA_DL": 0.3}
        assert result.weight_distribution["B01_ROB_OLD"] == pytest.approx(70.0)
        assert result.weight_distribution["B03_ARA_DL"] == pytest.approx(30.0)
        assert result.predicted_price == pytest.approx(0.7 * 115000 + 0.3 * 220000)
        assert result.predicted_acid == pytest.approx(0.7 * 4.0 + 0.3 * 8.0)
        assert result.objective_value == 12.5
        assert 0.0 <= result.similarity_score <= 100.0
        assert result.retry_count == 0
        assert result.relaxation_trace == ""

    def test_infeasible_result_is_empty(self):
        result = infeasible_result(STATUS_INFEASIBLE)

        assert result.feasible is False
        assert result.status == STATUS_INFEASIBLE
        assert result.composition == {}
        assert result.weight_distribution == {}
        assert result.predicted_price == 0.0
        assert result.similarity_score == 0.0


class TestBlendingResultSchema:
    """Tests for BlendingResult validation and helpers."""

    def test_fraction_above_one_rejected(self):
        with pytest.raises(ValidationError):
            BlendingResult(feasible=True, status="OPTIMAL", composition={"A": 1.5})

    def test_zero_fraction_rejected(self):
        with pytest.raises(ValidationError):
            BlendingResult(feasible=True, status="OPTIMAL", composition={"A": 0.0})

    def test_similarity_bounds(self):
        with pytest.raises(ValidationError):
            BlendingResult(feasible=True, status="OPTIMAL", similarity_score=101.0)

    def test_is_over_budget(self):
        result = BlendingResult(feasible=True, status="OPTIMAL", predicted_price=111.0)

        assert result.is_over_budget(100.0) is True
        assert result.is_over_budget(101.0) is False
        # No price target means no budget
        assert result.is_over_budget(0.0) is False

    def test_annotation_returns_copy(self):
        result = BlendingResult(feasible=False, status="INFEASIBLE")
        annotated = result.model_copy(update={'retry_count': 2})

        assert annotated.retry_count == 2
        assert result.retry_count == 0

    def test_total_fraction_and_str(self):
        result = BlendingResult(
            feasible=True,
            status="OPTIMAL",
            composition={"A": 0.25, "B": 0.75},
            predicted_price=120000,
            similarity_score=87.5,
            retry_count=1,
        )

        assert result.total_fraction() == pytest.approx(1.0)
        text = str(result)
        assert "OPTIMAL" in text
        assert "2 batches" in text
        assert "retries = 1" in text


class TestCompositionFrame:
    """Tests for the pandas reporting view."""

    def test_rows_sorted_by_fraction(self, demo_batches, pour_over_target):
        result = build_result(
            raw_fractions={"B03_ARA_DL": 0.2, "B01_ROB_OLD": 0.8},
            batches=demo_batches,
            target=pour_over_target,
            status=STATUS_OPTIMAL,
            objective_value=1.0,
        )
        df = composition_frame(result, demo_batches)

        assert list(df.columns) == ['batch_id', 'name', 'fraction', 'weight_kg', 'price', 'days_to_expiry']
        assert list(df['batch_id']) == ["B01_ROB_OLD", "B03_ARA_DL"]
        assert df['weight_kg'].sum() == pytest.approx(100.0)
        assert df.loc[0, 'name'] == "Robusta Dak Lak (Old Crop)"

    def test_empty_result(self, demo_batches):
        df = composition_frame(infeasible_result(STATUS_INFEASIBLE), demo_batches)
        assert df.empty
