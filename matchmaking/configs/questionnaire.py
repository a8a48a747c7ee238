"""
Default questionnaire catalog.

Used when a configuration file does not list its own `questions`. Section 1
(lifestyle) and Section 2 (personality) questions are scored; the age
question is a hard filter only and the free-response question is never
scored.
"""

from typing import Any, Dict, List

from ..schema import QuestionSpec

SCALE_1_5 = [1, 5]

CONFLICT_STYLE_TABLE = {
    "direct-immediate": {
        "direct-immediate": 1.0,
        "calm-discuss": 0.8,
        "space-first": 0.4,
        "avoid-conflict": 0.2,
    },
    "calm-discuss": {
        "calm-discuss": 1.0,
        "space-first": 0.7,
        "avoid-conflict": 0.5,
    },
    "space-first": {
        "space-first": 1.0,
        "avoid-conflict": 0.6,
    },
    "avoid-conflict": {
        "avoid-conflict": 0.8,
    },
}

DEFAULT_QUESTIONS: List[Dict[str, Any]] = [
    # Section 1: lifestyle
    {
        "id": "age",
        "section": "lifestyle",
        "kind": "range",
        "label": "Your age and the age range you are open to",
        "hard_filter": True,
        "importance_applies": False,
        "required": False,
        "scale": [18, 100],
    },
    {
        "id": "religion",
        "section": "lifestyle",
        "kind": "categorical",
        "label": "Religious or spiritual identity",
        "options": ["christianity", "catholicism", "judaism", "islam", "hinduism",
                    "buddhism", "spiritual", "agnostic", "atheist", "other"],
    },
    {
        "id": "politics",
        "section": "lifestyle",
        "kind": "ordinal",
        "label": "Political leaning",
        "options": ["very_liberal", "liberal", "moderate", "conservative", "very_conservative"],
    },
    {
        "id": "relationship_intent",
        "section": "lifestyle",
        "kind": "categorical",
        "label": "What are you looking for",
        "options": ["casual", "dating", "long_term", "marriage"],
    },
    {
        "id": "substances",
        "section": "lifestyle",
        "kind": "compound",
        "label": "Which substances do you use, and how often",
        "options": ["alcohol", "tobacco", "cannabis", "other"],
        "exclusive_value": "none",
        "frequency_options": ["rarely", "occasionally", "regularly", "frequently"],
        "combine": "product",
    },
    {
        "id": "hobbies",
        "section": "lifestyle",
        "kind": "multi_select",
        "label": "How you like to spend free time",
        "options": ["outdoors", "gaming", "reading", "music", "sports", "art",
                    "travel", "cooking", "nightlife", "volunteering"],
    },
    {
        "id": "exercise",
        "section": "lifestyle",
        "kind": "scalar",
        "label": "How often you exercise",
        "scale": SCALE_1_5,
    },
    {
        "id": "cleanliness",
        "section": "lifestyle",
        "kind": "scalar",
        "label": "How tidy you keep your space",
        "scale": SCALE_1_5,
    },
    {
        "id": "pets",
        "section": "lifestyle",
        "kind": "categorical",
        "label": "Pets",
        "options": ["has_pets", "wants_pets", "no_pets", "allergic"],
    },
    {
        "id": "children",
        "section": "lifestyle",
        "kind": "categorical",
        "label": "Children",
        "options": ["wants", "open", "doesnt_want", "has"],
    },
    {
        "id": "sleep_schedule",
        "section": "lifestyle",
        "kind": "wildcard",
        "label": "Sleep schedule",
        "options": ["early-bird", "morning-person", "flexible", "night-owl", "extreme-night-owl"],
        "wildcard_value": "flexible",
    },
    {
        "id": "time_together",
        "section": "lifestyle",
        "kind": "ordinal",
        "label": "How much time you want to spend together",
        "options": ["mostly_independent", "balanced", "mostly_together"],
    },
    # Section 2: personality
    {
        "id": "love_languages",
        "section": "personality",
        "kind": "bidirectional_set",
        "label": "Top two ways you show and like to receive care",
        "options": ["words", "acts", "gifts", "time", "touch"],
    },
    {
        "id": "conflict_style",
        "section": "personality",
        "kind": "compatibility_matrix",
        "label": "How you handle disagreements",
        "options": ["direct-immediate", "calm-discuss", "space-first", "avoid-conflict"],
        "compatibility_table": CONFLICT_STYLE_TABLE,
    },
    {
        "id": "social_battery",
        "section": "personality",
        "kind": "scalar",
        "label": "Introvert (1) to extrovert (5)",
        "scale": SCALE_1_5,
    },
    {
        "id": "planning",
        "section": "personality",
        "kind": "scalar",
        "label": "Spontaneous (1) to planner (5)",
        "scale": SCALE_1_5,
    },
    {
        "id": "ambition",
        "section": "personality",
        "kind": "scalar",
        "label": "How career-driven you are",
        "scale": SCALE_1_5,
    },
    # Free response
    {
        "id": "about_me",
        "section": "free_response",
        "kind": "free_text",
        "label": "Tell us about yourself",
        "importance_applies": False,
        "required": False,
    },
]


def default_questions() -> List[QuestionSpec]:
    """Build fresh QuestionSpec objects for the default catalog."""
    return [QuestionSpec.from_dict(q) for q in DEFAULT_QUESTIONS]
