"""Tests for the weighted pairwise scorer: range, symmetry, undefined aspects, strategies."""

import dataclasses
import itertools

import pytest

from clustering.config import CONTINUOUS, STRICT
from clustering.scorer import PairwiseScorer, aspect_scores, overall_similarity
from core.models import Aspect, Headcount, Record

ALL_WEIGHTS = {aspect.value: 1 for aspect in Aspect}


class TestOverallSimilarity:
    @pytest.mark.parametrize("config", [CONTINUOUS, STRICT])
    def test_range_and_symmetry(self, config, mixed_records, full_record):
        records = mixed_records + [full_record]
        for a, b in itertools.combinations(records, 2):
            s = overall_similarity(a, b, ALL_WEIGHTS, config)
            assert 0.0 <= s <= 1.0
            assert s == overall_similarity(b, a, ALL_WEIGHTS, config)

    @pytest.mark.parametrize("config", [CONTINUOUS, STRICT])
    def test_identical_copy_scores_one(self, config, full_record):
        copy = dataclasses.replace(full_record, id="full-2")
        scores = aspect_scores(full_record, copy, ALL_WEIGHTS, config)
        assert set(scores) == set(Aspect)
        for aspect, s in scores.items():
            assert s == pytest.approx(1.0), aspect
        assert overall_similarity(full_record, copy, ALL_WEIGHTS, config) == pytest.approx(1.0)

    def test_disjoint_event_types_score_zero(self, full_record):
        other = dataclasses.replace(full_record, id="full-2", event_types=frozenset({"detention"}))
        scores = aspect_scores(full_record, other, ALL_WEIGHTS)
        assert scores[Aspect.EVENT_TYPES] == 0.0
        assert overall_similarity(full_record, other, ALL_WEIGHTS) < 1.0

    def test_aspect_absent_on_both_sides_is_dropped(self):
        a = Record(id="a", location="Aleppo, Syria")
        b = Record(id="b", location="Aleppo, Syria")
        # Only location is defined, so missing dates/amounts do not drag the score down
        assert aspect_scores(a, b, ALL_WEIGHTS) == {Aspect.LOCATION: 1.0}
        assert overall_similarity(a, b, ALL_WEIGHTS) == 1.0

    def test_aspect_absent_on_one_side_scores_zero(self):
        a = Record(id="a", location="Aleppo, Syria", monetary_amount=100)
        b = Record(id="b", location="Aleppo, Syria")
        scores = aspect_scores(a, b, {"location": 1, "ransom": 1})
        assert scores[Aspect.MONETARY_AMOUNT] == 0.0
        assert overall_similarity(a, b, {"location": 1, "ransom": 1}) == pytest.approx(0.5)

    def test_nothing_defined_scores_zero(self):
        assert overall_similarity(Record(id="a"), Record(id="b"), ALL_WEIGHTS) == 0.0

    def test_zero_weights_score_zero(self, full_record):
        assert overall_similarity(full_record, full_record, {"date": 0, "location": -1}) == 0.0

    def test_unweighted_aspects_ignored(self, full_record):
        other = dataclasses.replace(full_record, id="x", transport="boat")
        assert overall_similarity(full_record, other, {"date": 1, "location": 1}) == 1.0

    def test_weighted_average(self):
        a = Record(id="a", location="Aleppo, Syria", monetary_amount=100)
        b = Record(id="b", location="Paris, France", monetary_amount=100)
        # location 0 (weight 3), amount 1 (weight 1)
        assert overall_similarity(a, b, {"location": 3, "ransom": 1}) == pytest.approx(0.25)


class TestStrategies:
    def test_continuous_vs_strict_date(self):
        a = Record(id="a", date="2024-01-01")
        b = Record(id="b", date="2024-01-04")
        assert 0 < overall_similarity(a, b, {"date": 1}, CONTINUOUS) < 1
        assert overall_similarity(a, b, {"date": 1}, STRICT) == 0.0

    def test_strict_location_is_exact(self):
        a = Record(id="a", location="Kufra District, Libya")
        b = Record(id="b", location="Kufra, Libya")
        assert overall_similarity(a, b, {"location": 1}, CONTINUOUS) == 1.0
        assert overall_similarity(a, b, {"location": 1}, STRICT) == 0.0

    def test_strict_headcount_tolerance(self):
        a = Record(id="a", headcount=Headcount(total=10))
        b = Record(id="b", headcount=Headcount(total=14))
        assert overall_similarity(a, b, {"counts": 1}, CONTINUOUS) == pytest.approx(1.0)
        assert overall_similarity(a, b, {"counts": 1}, STRICT) == 0.0

    @pytest.mark.parametrize("config", [CONTINUOUS, STRICT])
    def test_abc_pairs(self, config, abc_records, equal_weights):
        a, b, c = abc_records
        assert overall_similarity(a, b, equal_weights, config) >= 0.6
        assert overall_similarity(a, c, equal_weights, config) < 0.6
        assert overall_similarity(b, c, equal_weights, config) < 0.6


class TestPairwiseScorer:
    def test_weights_parsed(self):
        scorer = PairwiseScorer({"headcount": 2, "amount": "0.5", "bogus": 1})
        assert scorer.weights == {Aspect.HEADCOUNT: 2.0, Aspect.MONETARY_AMOUNT: 0.5}

    def test_default_config(self):
        assert PairwiseScorer({"date": 1}).config == CONTINUOUS
