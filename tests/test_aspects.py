"""Tests for per-aspect similarity functions: date, location, headcount, amount, sets."""

import math
from datetime import date

import pytest

from clustering.amount_similarity import amount_ratio_score, amount_relative_score, relative_difference
from clustering.config import LOOSE_AMOUNT_TOLERANCE
from clustering.date_proximity import date_decay_score, date_window_score, days_between
from clustering.headcount_similarity import headcount_cosine_score, headcount_tolerance_score
from clustering.location_similarity import (
    jaccard,
    last_segment,
    location_exact_score,
    location_jaccard_score,
    tokenize_location,
)
from clustering.set_similarity import set_equal_score, transport_equal_score
from core.models import Headcount


class TestDateProximity:
    def test_same_day_decay(self):
        d = date(2024, 1, 1)
        assert date_decay_score(d, d) == 1.0

    def test_decay_at_tau(self):
        assert date_decay_score(date(2024, 1, 1), date(2024, 1, 8), tau_days=7) == pytest.approx(math.exp(-1))

    def test_decay_is_monotonic(self):
        d = date(2024, 1, 1)
        near = date_decay_score(d, date(2024, 1, 2))
        far = date_decay_score(d, date(2024, 2, 1))
        assert 0 < far < near < 1

    def test_missing_date_scores_zero(self):
        assert date_decay_score(None, date(2024, 1, 1)) == 0.0
        assert date_window_score(date(2024, 1, 1), None) == 0.0
        assert days_between(None, None) is None

    def test_window_inclusive(self):
        d = date(2024, 1, 1)
        assert date_window_score(d, date(2024, 1, 2), window_days=1) == 1.0
        assert date_window_score(d, date(2024, 1, 3), window_days=1) == 0.0
        assert date_window_score(date(2024, 1, 3), d, window_days=2) == 1.0


class TestLocationSimilarity:
    def test_tokenize_drops_stopwords_and_punctuation(self):
        assert tokenize_location("Kufra District, Libya.") == ["kufra", "libya"]
        assert tokenize_location("Province of Ghazni, Afghanistan") == ["ghazni", "afghanistan"]

    def test_tokenize_empty(self):
        assert tokenize_location(None) == []
        assert tokenize_location("") == []

    def test_last_segment(self):
        assert last_segment("Aleppo,  Syria ") == "syria"
        assert last_segment("Aleppo") == "aleppo"
        assert last_segment(None) == ""

    def test_jaccard_empty_sets(self):
        assert jaccard(set(), set()) == 1.0
        assert jaccard({"a"}, set()) == 0.0

    def test_identical_locations(self):
        assert location_jaccard_score("Aleppo, Syria", "aleppo, syria") == 1.0

    def test_country_bonus(self):
        # {kufra, libya} vs {sabha, libya}: jaccard 1/3, same country adds the bonus
        assert location_jaccard_score("Kufra, Libya", "Sabha, Libya", country_bonus=0.15) == pytest.approx(1 / 3 + 0.15)
        assert location_jaccard_score("Kufra, Libya", "Sabha, Libya", country_bonus=0.0) == pytest.approx(1 / 3)

    def test_bonus_capped(self):
        assert location_jaccard_score("Aleppo, Syria", "Aleppo, Syria", country_bonus=0.5) == 1.0

    def test_missing_scores_zero(self):
        assert location_jaccard_score(None, "Aleppo") == 0.0
        assert location_jaccard_score("   ", "Aleppo") == 0.0

    def test_stopword_only_locations_score_zero(self):
        assert location_jaccard_score("District", "Province") == 0.0
        assert location_jaccard_score("The City", "the city") == 0.0
        assert location_jaccard_score("District", "Kufra, Libya") == 0.0

    def test_exact(self):
        assert location_exact_score(" Aleppo,  Syria", "aleppo, syria") == 1.0
        assert location_exact_score("Aleppo, Syria", "Aleppo") == 0.0
        assert location_exact_score(None, None) == 0.0


class TestHeadcountSimilarity:
    def test_cosine_identical(self):
        h = Headcount(male=3, female=2, kids=1, total=6)
        assert headcount_cosine_score(h, h) == pytest.approx(1.0)

    def test_cosine_scale_invariant(self):
        assert headcount_cosine_score(Headcount(total=4), Headcount(total=40)) == pytest.approx(1.0)

    def test_cosine_derives_total(self):
        explicit = Headcount(male=2, female=2, total=4)
        derived = Headcount(male=2, female=2)
        assert headcount_cosine_score(explicit, derived) == pytest.approx(1.0)

    def test_cosine_orthogonal(self):
        assert headcount_cosine_score(Headcount(male=0, kids=0, total=0), Headcount(female=3)) == 0.0

    def test_missing_scores_zero(self):
        assert headcount_cosine_score(None, Headcount(total=3)) == 0.0
        assert headcount_tolerance_score(Headcount(total=3), None) == 0.0

    def test_tolerance_within(self):
        a = Headcount(male=3, female=2, total=5)
        b = Headcount(male=4, female=2, total=8)
        assert headcount_tolerance_score(a, b) == 1.0

    def test_tolerance_subfield_exceeded(self):
        assert headcount_tolerance_score(Headcount(male=3), Headcount(male=5)) == 0.0

    def test_tolerance_total_exceeded(self):
        assert headcount_tolerance_score(Headcount(total=10), Headcount(total=14)) == 0.0

    def test_tolerance_no_common_field(self):
        # Sub-fields on one side only still give a derived total
        assert headcount_tolerance_score(Headcount(male=2), Headcount(female=2)) == 1.0


class TestAmountSimilarity:
    def test_relative_difference_floor(self):
        assert relative_difference(0, 0.5) == 0.5

    def test_ratio(self):
        assert amount_ratio_score(1000, 1050) == pytest.approx(1 - 50 / 1050)
        assert amount_ratio_score(1000, 1000) == 1.0

    def test_invalid_amounts_are_absent(self):
        assert amount_ratio_score(float("nan"), 100) == 0.0
        assert amount_ratio_score(-5, 100) == 0.0
        assert amount_relative_score(None, 100) == 0.0

    @pytest.mark.parametrize("tolerance,expected", [(0.10, 0.0), (LOOSE_AMOUNT_TOLERANCE, 1.0)])
    def test_relative_tolerance(self, tolerance, expected):
        # 1000 vs 1200: relative difference 1/6
        assert amount_relative_score(1000, 1200, tolerance=tolerance) == expected


class TestSetSimilarity:
    def test_equal_sets_any_order(self):
        assert set_equal_score(["Kidnapping", "extortion "], ["extortion", "kidnapping"]) == 1.0

    def test_disjoint_sets(self):
        assert set_equal_score(["kidnapping"], ["detention"]) == 0.0

    def test_overlap_is_not_equality(self):
        assert set_equal_score(["kidnapping", "extortion"], ["kidnapping"]) == 0.0

    def test_empty_side_scores_zero(self):
        assert set_equal_score([], ["kidnapping"]) == 0.0
        assert set_equal_score(None, None) == 0.0

    def test_transport(self):
        assert transport_equal_score("Truck", " truck") == 1.0
        assert transport_equal_score("truck", "boat") == 0.0
        assert transport_equal_score(None, "boat") == 0.0
