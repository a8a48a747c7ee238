"""
Input schema for questionnaire snapshots.

Defines the participant, response and question metadata structures the
engine consumes. Answers and preferences are kept in their raw JSON shape
(scalars, strings, lists, mappings); each comparator interprets and
validates the shape for its own question kind.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from ..exceptions import ConfigurationError, MalformedInputError

# Preference value meaning "any answer is acceptable"
DOESNT_MATTER = "doesnt_matter"


def is_wildcard(value: Any) -> bool:
    """True if a preference value is the "doesn't matter" wildcard."""
    return isinstance(value, str) and value.strip().lower().replace("'", "").replace(" ", "_") in (
        DOESNT_MATTER, "doesntmatter"
    )


class Importance(Enum):
    """How much the rater cares about a question. Ordered lowest to highest."""
    NOT_IMPORTANT = "not_important"
    SOMEWHAT_IMPORTANT = "somewhat_important"
    IMPORTANT = "important"
    VERY_IMPORTANT = "very_important"

    @classmethod
    def parse(cls, value: Any) -> Optional["Importance"]:
        """
        Parse an importance from an enum, name or value (case-insensitive).

        Returns None for a null value.

        Raises:
            ValueError: If the value is not a known importance level
        """
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if key in (member.value, member.name.lower()):
                    return member
        raise ValueError(f"unknown importance {value!r}")


class Section(Enum):
    """Questionnaire section a question belongs to."""
    LIFESTYLE = "lifestyle"
    PERSONALITY = "personality"
    FREE_RESPONSE = "free_response"


class ComparatorKind(Enum):
    """Closed set of comparison rules a question can be scored with."""
    SCALAR = "scalar"
    ORDINAL = "ordinal"
    CATEGORICAL = "categorical"
    MULTI_SELECT = "multi_select"
    BIDIRECTIONAL_SET = "bidirectional_set"
    COMPATIBILITY_MATRIX = "compatibility_matrix"
    WILDCARD = "wildcard"
    COMPOUND = "compound"
    RANGE = "range"
    FREE_TEXT = "free_text"


@dataclass(frozen=True)
class QuestionResponse:
    """
    One participant's response to one question.

    Attributes:
        answer: The participant's own answer
        preference: What the participant wants from a partner (None if unstated)
        importance: Rater importance, None if not applicable or not given
        dealbreaker: Whether a violated preference excludes the pair outright
    """
    answer: Any
    preference: Any = None
    importance: Optional[Importance] = None
    dealbreaker: bool = False

    @property
    def wildcard(self) -> bool:
        return is_wildcard(self.preference)

    @classmethod
    def from_dict(
        cls,
        d: Dict[str, Any],
        participant_id: Optional[str] = None,
        question_id: str = "?"
    ) -> "QuestionResponse":
        """
        Create from a snapshot dictionary.

        Raises:
            MalformedInputError: If the importance or dealbreaker flag is invalid
        """
        if not isinstance(d, dict):
            raise MalformedInputError(
                participant_id, f"responses.{question_id}", f"expected an object, got {type(d).__name__}"
            )
        try:
            importance = Importance.parse(d.get("importance"))
        except ValueError as e:
            raise MalformedInputError(participant_id, f"responses.{question_id}.importance", str(e))

        dealbreaker = d.get("dealbreaker", d.get("is_dealbreaker", False))
        if dealbreaker is None:
            dealbreaker = False
        if not isinstance(dealbreaker, bool):
            raise MalformedInputError(
                participant_id, f"responses.{question_id}.dealbreaker", f"expected a boolean, got {dealbreaker!r}"
            )

        return cls(
            answer=d.get("answer"),
            preference=d.get("preference"),
            importance=importance,
            dealbreaker=dealbreaker
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "answer": _jsonable(self.answer),
            "preference": _jsonable(self.preference),
            "importance": self.importance.value if self.importance else None,
            "dealbreaker": self.dealbreaker
        }


@dataclass(frozen=True)
class Participant:
    """
    Immutable snapshot of one participant for a single matching run.

    Attributes:
        id: Unique participant identifier
        gender: Participant's gender (None if not provided)
        interested_in_genders: Genders the participant is open to
        responses: Mapping of question id to response
    """
    id: str
    gender: Optional[str]
    interested_in_genders: FrozenSet[str] = frozenset()
    responses: Dict[str, QuestionResponse] = field(default_factory=dict, hash=False)

    def response(self, question_id: str) -> Optional[QuestionResponse]:
        return self.responses.get(question_id)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Participant":
        """
        Create from a snapshot dictionary.

        Raises:
            MalformedInputError: If required top-level fields are missing or mistyped
        """
        if not isinstance(d, dict):
            raise MalformedInputError(None, "participant", f"expected an object, got {type(d).__name__}")

        pid = d.get("id")
        if pid is None or (isinstance(pid, str) and not pid.strip()):
            raise MalformedInputError(None, "id", "participant id is missing")
        pid = str(pid)

        gender = d.get("gender")
        if gender is not None and not isinstance(gender, str):
            raise MalformedInputError(pid, "gender", f"expected a string, got {gender!r}")

        interested = d.get("interested_in_genders", d.get("interestedInGenders", []))
        if interested is None:
            interested = []
        if isinstance(interested, str):
            interested = [interested]
        if not isinstance(interested, (list, tuple, set, frozenset)):
            raise MalformedInputError(pid, "interested_in_genders", f"expected a list, got {interested!r}")

        raw_responses = d.get("responses", {})
        if not isinstance(raw_responses, dict):
            raise MalformedInputError(pid, "responses", "expected a mapping of question id to response")

        responses = {
            str(qid): QuestionResponse.from_dict(r, participant_id=pid, question_id=str(qid))
            for qid, r in raw_responses.items()
        }

        return cls(
            id=pid,
            gender=gender,
            interested_in_genders=frozenset(str(g) for g in interested),
            responses=responses
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "gender": self.gender,
            "interested_in_genders": sorted(self.interested_in_genders),
            "responses": {qid: r.to_dict() for qid, r in self.responses.items()}
        }


@dataclass
class QuestionSpec:
    """
    Static metadata describing how a question is compared.

    Attributes:
        id: Question identifier
        section: Section the question is scored in
        kind: Comparator used for this question
        importance_applies: Whether rater importance weights this question
        hard_filter: Whether the question is handled by the hard filter only
        required: Whether every participant must answer it
        label: Display text
        scale: (min, max) for scalar questions
        options: Ordered answer options (categorical, ordinal, wildcard, matrix)
        wildcard_value: Answer that is compatible with every other answer
        compatibility_table: Nested mapping answer -> answer -> similarity
        exclusive_value: Set member that cannot be combined with others (compound)
        frequency_options: Ordered frequency levels (compound)
        combine: "product" or "mean" for compound questions
        set_weight: Weight of the set component when combine == "mean"
    """
    id: str
    section: Section
    kind: ComparatorKind
    importance_applies: bool = True
    hard_filter: bool = False
    required: bool = True
    label: str = ""
    scale: Optional[Tuple[float, float]] = None
    options: Tuple[str, ...] = ()
    wildcard_value: Optional[str] = None
    compatibility_table: Optional[Dict[str, Dict[str, float]]] = None
    exclusive_value: Optional[str] = None
    frequency_options: Tuple[str, ...] = ()
    combine: str = "product"
    set_weight: float = 0.5

    def __post_init__(self):
        """Coerce enum fields and validate basic shape."""
        try:
            self.section = Section(self.section)
            self.kind = ComparatorKind(self.kind)
        except ValueError as e:
            raise ConfigurationError(f"Question {self.id}: {e}")

        if self.scale is not None:
            if len(self.scale) != 2 or self.scale[0] >= self.scale[1]:
                raise ConfigurationError(f"Question {self.id}: scale must be (min, max) with min < max")
            self.scale = (float(self.scale[0]), float(self.scale[1]))
        self.options = tuple(self.options)
        self.frequency_options = tuple(self.frequency_options)

        if self.kind == ComparatorKind.FREE_TEXT:
            self.section = Section.FREE_RESPONSE
        if self.combine not in ("product", "mean"):
            raise ConfigurationError(f"Question {self.id}: unknown compound combine mode {self.combine}")
        if not 0 <= self.set_weight <= 1:
            raise ConfigurationError(f"Question {self.id}: set_weight must be in [0, 1]")

    @property
    def scored(self) -> bool:
        """Whether the question contributes to similarity and directional scores."""
        return (
            self.section != Section.FREE_RESPONSE
            and self.kind != ComparatorKind.FREE_TEXT
            and not self.hard_filter
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "id": self.id,
            "section": self.section.value,
            "kind": self.kind.value,
            "importance_applies": self.importance_applies,
            "hard_filter": self.hard_filter,
            "required": self.required,
            "label": self.label,
        }
        if self.scale is not None:
            d["scale"] = list(self.scale)
        if self.options:
            d["options"] = list(self.options)
        if self.wildcard_value is not None:
            d["wildcard_value"] = self.wildcard_value
        if self.compatibility_table is not None:
            d["compatibility_table"] = self.compatibility_table
        if self.kind == ComparatorKind.COMPOUND:
            d["exclusive_value"] = self.exclusive_value
            d["frequency_options"] = list(self.frequency_options)
            d["combine"] = self.combine
            d["set_weight"] = self.set_weight
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "QuestionSpec":
        """Create from a configuration dictionary."""
        if "id" not in d or "kind" not in d or "section" not in d:
            raise ConfigurationError(f"Question entry needs id, kind and section: {d}")
        known = set(cls.__dataclass_fields__)
        unknown = set(d) - known
        if unknown:
            raise ConfigurationError(f"Question {d['id']}: unknown keys {sorted(unknown)}")
        kwargs = dict(d)
        if kwargs.get("scale") is not None:
            kwargs["scale"] = tuple(kwargs["scale"])
        return cls(**kwargs)


def questions_by_id(questions: Iterable[QuestionSpec]) -> Dict[str, QuestionSpec]:
    """Index a question list by id, rejecting duplicates."""
    indexed: Dict[str, QuestionSpec] = {}
    for q in questions:
        if q.id in indexed:
            raise ConfigurationError(f"Duplicate question id: {q.id}")
        indexed[q.id] = q
    return indexed


def _jsonable(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value
