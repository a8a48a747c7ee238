"""Tests for configuration loading, validation and the default catalog."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from matchmaking.configs import (
    DEFAULT_QUESTIONS,
    MatchingConfig,
    default_questions,
    get_config_value,
    load_config,
    validate_config,
)
from matchmaking.exceptions import ConfigurationError
from matchmaking.filtering import HardFilterConfig
from matchmaking.schema import QuestionSpec, Section

CONFIG_PATH = Path(__file__).parent.parent / "configs" / "config.yaml"


class TestLoadConfig:
    """YAML loading."""

    def test_repository_config_is_valid(self) -> None:
        config = load_config(str(CONFIG_PATH))
        assert validate_config(config) == []
        MatchingConfig.from_config(config).validate()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_non_mapping_file(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_config(str(path))


class TestValidateConfig:
    """Issues reported by validate_config."""

    def test_section_weights(self) -> None:
        issues = validate_config({"scoring": {"section_weights": {"lifestyle": 0.9, "personality": 0.5}}})
        assert any("Section weights" in i for i in issues)

    def test_non_monotonic_importance(self) -> None:
        issues = validate_config({"scoring": {"importance_weights": {"important": 2.0, "very_important": 1.0}}})
        assert any("monotonic" in i for i in issues)

    def test_unknown_section(self) -> None:
        assert validate_config({"modeling": {}}) == ["Unknown section: modeling"]

    def test_duplicate_question_ids(self) -> None:
        questions = [{"id": "x", "kind": "scalar", "section": "lifestyle"}] * 2
        issues = validate_config({"questions": questions})
        assert any("Duplicate question ids" in i for i in issues)

    def test_get_config_value(self) -> None:
        config = {"eligibility": {"relative": {"k": 1.5}}}
        assert get_config_value(config, "eligibility.relative.k") == 1.5
        assert get_config_value(config, "eligibility.relative.mode", "stddev") == "stddev"


class TestMatchingConfig:
    """Typed configuration built from the YAML layout."""

    def test_defaults_use_builtin_catalog(self) -> None:
        config = MatchingConfig.from_config({})
        assert [q.id for q in config.questions] == [q["id"] for q in DEFAULT_QUESTIONS]
        config.validate()

    def test_from_config_sections(self) -> None:
        config = MatchingConfig.from_config({
            "combiner": {"mode": "min_mean", "alpha": 0.5},
            "eligibility": {"absolute_minimum": 40, "relative": {"mode": "none"}},
            "matching": {"n_jobs": 2, "batch_size": 10},
        })
        assert config.combiner.mode == "min_mean"
        assert config.eligibility.relative_mode == "none"
        assert config.n_jobs == 2
        assert config.batch_size == 10

    def test_custom_questions(self) -> None:
        config = MatchingConfig.from_config({
            "questions": [
                {"id": "exercise", "kind": "scalar", "section": "lifestyle", "scale": [1, 5]},
                {"id": "planning", "kind": "scalar", "section": "personality"},
            ]
        })
        assert [q.id for q in config.questions] == ["exercise", "planning"]
        assert config.questions[0].scale == (1.0, 5.0)

    def test_hard_filter_ids_are_not_scored(self) -> None:
        config = MatchingConfig.from_config({"hard_filters": {"question_ids": ["age", "children"]}})
        children = config.question_index["children"]
        assert children.hard_filter
        assert not children.scored

    def test_shared_catalog_is_not_mutated(self) -> None:
        catalog = default_questions()
        with_children = MatchingConfig(
            questions=catalog, hard_filters=HardFilterConfig(question_ids=["age", "children"])
        )
        plain = MatchingConfig(questions=catalog)

        assert with_children.question_index["children"].hard_filter
        assert not plain.question_index["children"].hard_filter
        assert plain.question_index["children"].scored
        assert not next(q for q in catalog if q.id == "children").hard_filter

    def test_duplicate_question_ids_rejected(self) -> None:
        questions = [QuestionSpec(id="x", section="lifestyle", kind="scalar")] * 2
        with pytest.raises(ConfigurationError):
            MatchingConfig(questions=questions).validate()

    def test_catalog_without_scored_questions(self) -> None:
        questions = [QuestionSpec(id="about", section="free_response", kind="free_text")]
        with pytest.raises(ConfigurationError):
            MatchingConfig(questions=questions).validate()

    def test_unknown_question_key_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            MatchingConfig.from_config({
                "questions": [{"id": "x", "kind": "scalar", "section": "lifestyle", "weight": 3}]
            })

    def test_save_and_load(self, tmp_path: Path) -> None:
        config = MatchingConfig.from_config({"combiner": {"mode": "geometric"}})
        path = tmp_path / "config_used.json"
        config.save(str(path))

        loaded = MatchingConfig.load(str(path))
        assert loaded.combiner.mode == "geometric"
        assert [q.to_dict() for q in loaded.questions] == [q.to_dict() for q in config.questions]

    def test_to_dict_is_yaml_layout(self) -> None:
        d = MatchingConfig().to_dict()
        assert yaml.safe_load(yaml.safe_dump(d))["eligibility"]["relative"]["pool"] == "directional"


class TestDefaultCatalog:
    """The built-in questionnaire."""

    def test_sections(self) -> None:
        questions = default_questions()
        scored = [q for q in questions if q.scored]
        assert {q.section for q in scored} == {Section.LIFESTYLE, Section.PERSONALITY}
        assert not next(q for q in questions if q.id == "age").scored
        assert not next(q for q in questions if q.id == "about_me").scored

    def test_fresh_objects(self) -> None:
        first, second = default_questions(), default_questions()
        first[0].hard_filter = False
        assert second[0].hard_filter
