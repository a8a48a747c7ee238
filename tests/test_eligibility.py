"""Tests for absolute and relative eligibility floors."""

from __future__ import annotations

import pytest

from matchmaking.eligibility import EligibilityConfig, EligibilityFilter, RejectionReason
from matchmaking.exceptions import ConfigurationError
from matchmaking.schema import PairScore


def _pair(a: str, b: str, ab: float, ba: float) -> PairScore:
    return PairScore(a, b, (ab + ba) / 2, ab, ba)


class TestRelativeFloor:
    """Floor computation per mode."""

    def test_stddev(self) -> None:
        floor = EligibilityFilter(EligibilityConfig(k=1.0)).relative_floor([60.0, 70.0, 80.0])
        assert floor == pytest.approx(70.0 - (200 / 3) ** 0.5)

    def test_percentile(self) -> None:
        config = EligibilityConfig(relative_mode="percentile", percentile=50)
        assert EligibilityFilter(config).relative_floor([10.0, 20.0, 30.0]) == pytest.approx(20.0)

    def test_best_fraction(self) -> None:
        config = EligibilityConfig(relative_mode="best_fraction", best_fraction=0.5)
        assert EligibilityFilter(config).relative_floor([40.0, 90.0, 60.0]) == pytest.approx(45.0)

    def test_none_mode_has_no_floor(self) -> None:
        config = EligibilityConfig(relative_mode="none")
        assert EligibilityFilter(config).relative_floor([90.0, 95.0, 99.0]) == float("-inf")

    def test_small_pool_has_no_floor(self) -> None:
        assert EligibilityFilter(EligibilityConfig()).relative_floor([90.0, 10.0]) == float("-inf")


class TestApply:
    """Pair and participant level outcomes."""

    def test_absolute_floor(self) -> None:
        pairs = [_pair("a", "b", 60, 60), _pair("a", "c", 40, 40)]
        report = EligibilityFilter(EligibilityConfig(relative_mode="none")).apply(["a", "b", "c"], pairs)

        assert [p.key for p in report.eligible] == [("a", "b")]
        assert report.failed_absolute == 1
        assert report.rejections == {"c": RejectionReason.BELOW_ABSOLUTE}

    def test_score_exactly_at_floor_is_eligible(self) -> None:
        report = EligibilityFilter(EligibilityConfig(relative_mode="none")).apply(
            ["a", "b"], [_pair("a", "b", 50, 50)]
        )
        assert len(report.eligible) == 1

    def test_participant_without_candidates(self) -> None:
        report = EligibilityFilter(EligibilityConfig()).apply(["a", "b", "lonely"], [_pair("a", "b", 80, 80)])
        assert report.rejections["lonely"] == RejectionReason.NO_CANDIDATES
        assert report.rejection_counts()["no_candidates"] == 1

    def test_relative_floor_uses_each_side(self) -> None:
        # a's pool is tight around 90, so the 70 pair falls below a's floor only
        pairs = [
            _pair("a", "b", 92, 92),
            _pair("a", "c", 90, 90),
            _pair("a", "d", 70, 70),
        ]
        report = EligibilityFilter(EligibilityConfig()).apply(["a", "b", "c", "d"], pairs)

        assert ("a", "d") not in [p.key for p in report.eligible]
        assert report.failed_relative == 1
        assert report.failed_relative_one_side == 1
        assert report.rejections["d"] == RejectionReason.BELOW_RELATIVE

    def test_generous_rater_keeps_their_pairs(self) -> None:
        # a rates everyone highly while being rated low back: a's floor sits
        # near a's own ratings and is tested against them, not the pair score
        pairs = [
            _pair("a", "b", 90, 30),
            _pair("a", "c", 90, 30),
            _pair("a", "d", 88, 30),
        ]
        report = EligibilityFilter(EligibilityConfig()).apply(["a", "b", "c", "d"], pairs)

        assert report.relative_floors["a"] == pytest.approx(89.333 - 0.943, abs=1e-3)
        assert [p.key for p in report.eligible] == [("a", "b"), ("a", "c")]
        assert report.perfectionists == []
        assert report.failed_relative_one_side == 1

    def test_perfectionist_detected(self) -> None:
        # p's favourites all rate p at 0 and fall below the absolute floor;
        # the two pairs left are ones p rates far below p's own floor
        pairs = [
            _pair("p", "x1", 96, 0),
            _pair("p", "x2", 96, 0),
            _pair("p", "x3", 96, 0),
            _pair("p", "x4", 40, 100),
            _pair("p", "x5", 45, 95),
        ]
        ids = ["p", "x1", "x2", "x3", "x4", "x5"]
        report = EligibilityFilter(EligibilityConfig()).apply(ids, pairs)

        assert report.eligible == []
        assert report.failed_absolute == 3
        assert report.failed_relative_one_side == 2
        assert report.perfectionists == ["p"]
        assert report.rejections["p"] == RejectionReason.BELOW_RELATIVE
        assert report.rejections["x4"] == RejectionReason.BELOW_RELATIVE

    def test_pair_pool(self) -> None:
        pairs = [
            _pair("p", "x1", 96, 60),
            _pair("p", "x2", 98, 60),
            _pair("p", "x3", 100, 60),
        ]
        config = EligibilityConfig(relative_pool="pair")
        report = EligibilityFilter(config).apply(["p", "x1", "x2", "x3"], pairs)
        # 78, 79, 80 around their own mean: only the lowest falls below p's floor
        assert [p.key for p in report.eligible] == [("p", "x2"), ("p", "x3")]
        assert report.perfectionists == []

    def test_eligible_is_subset_of_input(self) -> None:
        pairs = [_pair("a", "b", 55, 75), _pair("b", "c", 30, 20), _pair("a", "c", 99, 98)]
        report = EligibilityFilter(EligibilityConfig()).apply(["a", "b", "c"], pairs)
        assert all(p in pairs for p in report.eligible)
        assert all(p.score >= 50 for p in report.eligible)

    def test_to_dict(self) -> None:
        report = EligibilityFilter(EligibilityConfig()).apply(["a", "b"], [_pair("a", "b", 80, 80)])
        d = report.to_dict()
        assert d["pairs_scored"] == 1
        assert d["pairs_eligible"] == 1
        assert d["participant_rejections"]["below_relative"] == 0


class TestEligibilityConfig:

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"absolute_minimum": 120},
            {"relative_mode": "zscore"},
            {"relative_pool": "global"},
            {"k": -1},
            {"best_fraction": 2},
            {"min_pool_size": 0},
        ],
    )
    def test_invalid_values(self, kwargs) -> None:
        with pytest.raises(ConfigurationError):
            EligibilityConfig(**kwargs).validate()

    def test_from_config_reads_relative_block(self) -> None:
        config = EligibilityConfig.from_config({
            "eligibility": {"absolute_minimum": 40, "relative": {"mode": "percentile", "percentile": 10}}
        })
        assert config.absolute_minimum == 40
        assert config.relative_mode == "percentile"
        assert config.percentile == 10
        assert config.k == 1.0
