"""Shared fixtures: a small question catalog and a participant factory."""

from __future__ import annotations

from typing import Any

import pytest

from matchmaking.configs import MatchingConfig
from matchmaking.schema import Importance, Participant, QuestionResponse, QuestionSpec


def small_questions() -> list[QuestionSpec]:
    """Age hard filter, two lifestyle questions, one personality question, one free response."""
    return [
        QuestionSpec(id="age", section="lifestyle", kind="range", hard_filter=True,
                     importance_applies=False, required=False, scale=(18, 100)),
        QuestionSpec(id="exercise", section="lifestyle", kind="scalar", scale=(1, 5)),
        QuestionSpec(id="smoking", section="lifestyle", kind="categorical", options=("yes", "no")),
        QuestionSpec(id="planning", section="personality", kind="scalar", scale=(1, 5)),
        QuestionSpec(id="about_me", section="free_response", kind="free_text",
                     importance_applies=False, required=False),
    ]


def make_participant(
    pid: str,
    gender: str | None = "women",
    interested: tuple[str, ...] = ("men", "women"),
    age: int | None = 25,
    age_range: tuple[int, int] | None = (18, 40),
    answers: dict[str, Any] | None = None,
    preferences: dict[str, Any] | None = None,
    importance: dict[str, Importance] | None = None,
    dealbreakers: tuple[str, ...] = (),
) -> Participant:
    """Build a participant for the small catalog; answers default to identical values."""
    base_answers = {"exercise": 3, "smoking": "no", "planning": 3, "about_me": "hello"}
    base_answers.update(answers or {})
    preferences = preferences or {}
    importance = importance or {}

    responses = {
        qid: QuestionResponse(
            answer=answer,
            preference=preferences.get(qid),
            importance=importance.get(qid, Importance.IMPORTANT) if qid != "about_me" else None,
            dealbreaker=qid in dealbreakers,
        )
        for qid, answer in base_answers.items()
    }
    if age is not None:
        responses["age"] = QuestionResponse(
            answer=age,
            preference={"min": age_range[0], "max": age_range[1]} if age_range else None,
        )
    return Participant(
        id=pid,
        gender=gender,
        interested_in_genders=frozenset(interested),
        responses=responses,
    )


@pytest.fixture
def questions() -> list[QuestionSpec]:
    return small_questions()


@pytest.fixture
def small_config() -> MatchingConfig:
    return MatchingConfig(questions=small_questions())


@pytest.fixture
def participant_factory():
    return make_participant
