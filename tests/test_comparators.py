"""Unit tests for the question comparator set."""

from __future__ import annotations

import pytest

from matchmaking.comparators import (
    CompatibilityMatrixComparator,
    RangeComparator,
    check_question,
    preference_satisfaction,
    question_similarity,
    validate_response,
)
from matchmaking.configs import CONFLICT_STYLE_TABLE
from matchmaking.exceptions import ConfigurationError, MalformedInputError
from matchmaking.schema import DOESNT_MATTER, QuestionResponse, QuestionSpec


def _r(answer, preference=None) -> QuestionResponse:
    return QuestionResponse(answer=answer, preference=preference)


@pytest.fixture
def scalar() -> QuestionSpec:
    return QuestionSpec(id="exercise", section="lifestyle", kind="scalar", scale=(1, 5))


@pytest.fixture
def categorical() -> QuestionSpec:
    return QuestionSpec(id="religion", section="lifestyle", kind="categorical",
                        options=("atheist", "buddhism", "islam"))


@pytest.fixture
def compound() -> QuestionSpec:
    return QuestionSpec(
        id="substances", section="lifestyle", kind="compound",
        options=("alcohol", "cannabis"), exclusive_value="none",
        frequency_options=("rarely", "occasionally", "regularly", "frequently"),
    )


class TestScalar:
    """Distance similarity on a 1-5 scale."""

    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [(3, 3, 1.0), (2, 4, 0.5), (1, 5, 0.0), (4, 5, 0.75)],
    )
    def test_distance(self, scalar: QuestionSpec, a: int, b: int, expected: float) -> None:
        assert question_similarity(scalar, _r(a), _r(b)) == pytest.approx(expected)

    def test_wildcard_preference_scores_one(self, scalar: QuestionSpec) -> None:
        a = _r(1, DOESNT_MATTER)
        b = _r(5, "same")
        assert question_similarity(scalar, a, b) == 1.0
        assert question_similarity(scalar, b, a) == 1.0

    def test_more_preference_aligned_and_conflicting(self, scalar: QuestionSpec) -> None:
        own = _r(2, "more")
        assert preference_satisfaction(scalar, own, _r(4)) == 1.0
        assert preference_satisfaction(scalar, own, _r(2)) == 1.0
        assert preference_satisfaction(scalar, own, _r(1)) == pytest.approx(0.7 * 0.75)

    def test_same_preference_degrades_monotonically(self, scalar: QuestionSpec) -> None:
        own = _r(3, "same")
        values = [preference_satisfaction(scalar, own, _r(x)) for x in (3, 4, 5)]
        assert values[0] == 1.0
        assert values[0] >= values[1] >= values[2]

    def test_no_preference_returns_none(self, scalar: QuestionSpec) -> None:
        assert preference_satisfaction(scalar, _r(3), _r(1)) is None

    def test_stated_preference_overrides_distance(self, scalar: QuestionSpec) -> None:
        # Both answered 3 but one side wants a different value
        a = _r(3, "different")
        b = _r(3)
        assert question_similarity(scalar, a, b) == 0.0

    def test_similarity_is_direction_agnostic(self, scalar: QuestionSpec) -> None:
        a = _r(2, "more")
        b = _r(4, "similar")
        assert question_similarity(scalar, a, b) == question_similarity(scalar, b, a)

    @pytest.mark.parametrize("answer", [0, 6, "3", True, None])
    def test_invalid_answer_names_participant_and_field(self, scalar: QuestionSpec, answer) -> None:
        with pytest.raises(MalformedInputError) as exc:
            validate_response(scalar, _r(answer), "p42")
        assert exc.value.participant_id == "p42"
        assert exc.value.field == "responses.exercise.answer"

    def test_unknown_preference_keyword(self, scalar: QuestionSpec) -> None:
        with pytest.raises(MalformedInputError) as exc:
            validate_response(scalar, _r(3, "bigger"), "p1")
        assert exc.value.field == "responses.exercise.preference"


class TestCategorical:
    """Exact category match and preference sets."""

    def test_equality(self, categorical: QuestionSpec) -> None:
        assert question_similarity(categorical, _r("islam"), _r("islam")) == 1.0
        assert question_similarity(categorical, _r("islam"), _r("atheist")) == 0.0

    def test_preference_set_membership(self, categorical: QuestionSpec) -> None:
        own = _r("atheist", ["buddhism", "islam"])
        assert question_similarity(categorical, own, _r("islam")) == 1.0
        assert question_similarity(categorical, own, _r("atheist")) == 0.0

    def test_different_preference(self, categorical: QuestionSpec) -> None:
        own = _r("atheist", "different")
        assert preference_satisfaction(categorical, own, _r("islam")) == 1.0
        assert preference_satisfaction(categorical, own, _r("atheist")) == 0.0

    def test_wildcard_overrides_mismatch(self, categorical: QuestionSpec) -> None:
        assert question_similarity(categorical, _r("islam", DOESNT_MATTER), _r("atheist")) == 1.0

    def test_unknown_option_rejected(self, categorical: QuestionSpec) -> None:
        with pytest.raises(MalformedInputError):
            validate_response(categorical, _r("pastafarian"), "p1")


class TestWildcardCategorical:
    """A designated "flexible" value is compatible with everything."""

    @pytest.fixture
    def sleep(self) -> QuestionSpec:
        return QuestionSpec(
            id="sleep", section="lifestyle", kind="wildcard",
            options=("early-bird", "flexible", "night-owl"), wildcard_value="flexible",
        )

    @pytest.mark.parametrize("other", ["early-bird", "flexible", "night-owl"])
    def test_flexible_scores_one_against_everything(self, sleep: QuestionSpec, other: str) -> None:
        assert question_similarity(sleep, _r("flexible"), _r(other, "same")) == 1.0
        assert question_similarity(sleep, _r(other, "same"), _r("flexible")) == 1.0

    def test_falls_back_to_equality(self, sleep: QuestionSpec) -> None:
        assert question_similarity(sleep, _r("early-bird"), _r("night-owl")) == 0.0
        assert question_similarity(sleep, _r("night-owl"), _r("night-owl")) == 1.0

    def test_flexible_satisfies_preference(self, sleep: QuestionSpec) -> None:
        assert preference_satisfaction(sleep, _r("night-owl", ["night-owl"]), _r("flexible")) == 1.0


class TestMultiSelect:
    """Jaccard overlap of selections."""

    def test_jaccard(self) -> None:
        spec = QuestionSpec(id="hobbies", section="lifestyle", kind="multi_select", options=("a", "b", "c"))
        assert question_similarity(spec, _r(["a", "b"]), _r(["b", "c"])) == pytest.approx(1 / 3)

    def test_preference_any_overlap(self) -> None:
        spec = QuestionSpec(id="hobbies", section="lifestyle", kind="multi_select", options=("a", "b", "c"))
        assert preference_satisfaction(spec, _r(["a"], ["b", "c"]), _r(["c"])) == 1.0
        assert preference_satisfaction(spec, _r(["a"], ["b", "c"]), _r(["a"])) == 0.0


class TestBidirectionalSet:
    """Small top-k sets, optionally split into give and receive."""

    @pytest.fixture
    def love_languages(self) -> QuestionSpec:
        return QuestionSpec(id="love", section="personality", kind="bidirectional_set",
                            options=("words", "acts", "gifts", "time", "touch"))

    def test_plain_overlap(self, love_languages: QuestionSpec) -> None:
        assert question_similarity(
            love_languages, _r(["words", "time"]), _r(["time", "touch"])
        ) == pytest.approx(0.5)

    def test_give_receive_cross_overlap(self, love_languages: QuestionSpec) -> None:
        a = _r({"give": ["words", "time"], "receive": ["touch", "acts"]})
        b = _r({"give": ["touch", "gifts"], "receive": ["words", "time"]})
        # a gives everything b wants (1.0); b gives half of what a wants (0.5)
        assert question_similarity(love_languages, a, b) == pytest.approx(0.75)
        assert question_similarity(love_languages, b, a) == pytest.approx(0.75)

    def test_show_alias(self, love_languages: QuestionSpec) -> None:
        a = _r({"show": ["words", "time"], "receive": ["words", "time"]})
        b = _r({"give": ["words", "time"], "receive": ["words", "time"]})
        assert question_similarity(love_languages, a, b) == 1.0

    def test_preference_not_accepted(self, love_languages: QuestionSpec) -> None:
        with pytest.raises(MalformedInputError):
            validate_response(love_languages, _r(["words", "time"], ["words"]), "p1")


class TestCompatibilityMatrix:
    """Symmetric table lookup."""

    @pytest.fixture
    def conflict(self) -> QuestionSpec:
        return QuestionSpec(id="conflict", section="personality", kind="compatibility_matrix",
                            options=tuple(CONFLICT_STYLE_TABLE), compatibility_table=CONFLICT_STYLE_TABLE)

    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            ("direct-immediate", "avoid-conflict", 0.2),
            ("calm-discuss", "space-first", 0.7),
            ("avoid-conflict", "avoid-conflict", 0.8),
        ],
    )
    def test_lookup_in_both_orders(self, conflict: QuestionSpec, a: str, b: str, expected: float) -> None:
        assert question_similarity(conflict, _r(a), _r(b)) == pytest.approx(expected)
        assert question_similarity(conflict, _r(b), _r(a)) == pytest.approx(expected)

    def test_default_table_is_valid(self, conflict: QuestionSpec) -> None:
        check_question(conflict)

    def test_asymmetric_table_rejected(self) -> None:
        spec = QuestionSpec(id="m", section="personality", kind="compatibility_matrix", options=("x", "y"),
                            compatibility_table={"x": {"x": 1.0, "y": 0.5}, "y": {"x": 0.4, "y": 1.0}})
        with pytest.raises(ConfigurationError):
            check_question(spec)

    def test_missing_pair_rejected(self) -> None:
        spec = QuestionSpec(id="m", section="personality", kind="compatibility_matrix", options=("x", "y"),
                            compatibility_table={"x": {"x": 1.0}, "y": {"y": 1.0}})
        with pytest.raises(ConfigurationError):
            check_question(spec)

    def test_out_of_range_value_rejected(self) -> None:
        spec = QuestionSpec(id="m", section="personality", kind="compatibility_matrix", options=("x",),
                            compatibility_table={"x": {"x": 1.5}})
        with pytest.raises(ConfigurationError):
            check_question(spec)

    def test_lookup_helper(self) -> None:
        assert CompatibilityMatrixComparator.lookup(CONFLICT_STYLE_TABLE, "avoid-conflict", "calm-discuss") == 0.5


class TestCompound:
    """Set component combined with a frequency component."""

    def test_both_abstain(self, compound: QuestionSpec) -> None:
        none = {"items": ["none"], "frequency": None}
        assert question_similarity(compound, _r(none), _r(none)) == 1.0

    def test_one_abstains(self, compound: QuestionSpec) -> None:
        none = {"items": ["none"], "frequency": None}
        some = {"items": ["alcohol"], "frequency": "rarely"}
        assert question_similarity(compound, _r(none), _r(some)) == 0.0

    def test_product_of_set_and_frequency(self, compound: QuestionSpec) -> None:
        a = {"items": ["alcohol", "cannabis"], "frequency": "occasionally"}
        b = {"items": ["alcohol"], "frequency": "occasionally"}
        assert question_similarity(compound, _r(a), _r(b)) == pytest.approx(0.5)

        c = {"items": ["alcohol"], "frequency": "rarely"}
        d = {"items": ["alcohol"], "frequency": "frequently"}
        assert question_similarity(compound, _r(c), _r(d)) == pytest.approx(0.0)

    def test_weighted_mean_mode(self, compound: QuestionSpec) -> None:
        compound.combine = "mean"
        c = {"items": ["alcohol"], "frequency": "rarely"}
        d = {"items": ["alcohol"], "frequency": "frequently"}
        assert question_similarity(compound, _r(c), _r(d)) == pytest.approx(0.5)

    def test_acceptable_items_preference(self, compound: QuestionSpec) -> None:
        own = _r({"items": ["none"]}, ["alcohol"])
        assert preference_satisfaction(compound, own, _r({"items": ["alcohol"], "frequency": "rarely"})) == 1.0
        assert preference_satisfaction(compound, own, _r({"items": ["cannabis"], "frequency": "rarely"})) == 0.0
        assert preference_satisfaction(compound, own, _r({"items": ["none"]})) == 1.0

    def test_exclusive_value_cannot_be_combined(self, compound: QuestionSpec) -> None:
        with pytest.raises(MalformedInputError):
            validate_response(compound, _r({"items": ["none", "alcohol"], "frequency": "rarely"}), "p1")

    def test_frequency_required_when_using(self, compound: QuestionSpec) -> None:
        with pytest.raises(MalformedInputError):
            validate_response(compound, _r({"items": ["alcohol"]}), "p1")


class TestRange:
    """Numeric answer against an acceptable range."""

    @pytest.mark.parametrize(
        ("preference", "answer", "expected"),
        [
            ({"min": 20, "max": 30}, 25, True),
            ({"min": 20, "max": 30}, 30, True),
            ({"min": 20, "max": 30}, 31, False),
            ([20, 30], 19, False),
            (None, 50, True),
            (DOESNT_MATTER, 50, True),
            ({"min": 20, "max": 30}, None, False),
        ],
    )
    def test_accepts(self, preference, answer, expected: bool) -> None:
        assert RangeComparator().accepts(preference, answer) is expected

    def test_inverted_range_rejected(self) -> None:
        spec = QuestionSpec(id="age", section="lifestyle", kind="range", hard_filter=True)
        with pytest.raises(MalformedInputError):
            validate_response(spec, _r(25, {"min": 30, "max": 20}), "p1")
