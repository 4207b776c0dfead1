import pytest
from pydantic import ValidationError

from cvats import config
from cvats.rubric import DEVOPS_RUBRIC, GENERAL_RUBRIC, PRESETS, KeywordGroup, RubricConfig, get_rubric


def _rubric(**overrides):
    values = {
        "name": "custom",
        "required_sections": ["experience"],
        "keyword_groups": [{"name": "tools", "keywords": ["git"]}],
        "impact_verbs": ["built"],
    }
    values.update(overrides)
    return RubricConfig(**values)


def test_presets_are_registered():
    assert set(PRESETS) == {"devops", "general"}
    assert get_rubric("devops") is DEVOPS_RUBRIC
    assert get_rubric(" General ") is GENERAL_RUBRIC


def test_unknown_preset():
    with pytest.raises(ValueError, match="Available presets: devops, general"):
        get_rubric("marketing")


def test_preset_weights_total_one_hundred():
    for rubric in PRESETS.values():
        total = (
            rubric.section_points
            + rubric.keyword_points
            + rubric.impact_points
            + rubric.formatting_points
            + rubric.readability_points
        )
        assert total == 100


def test_devops_preset_constants():
    assert DEVOPS_RUBRIC.section_points == 25
    assert DEVOPS_RUBRIC.keyword_points == 45
    assert DEVOPS_RUBRIC.breadth_points == 25
    assert DEVOPS_RUBRIC.density_cap == 20
    assert not DEVOPS_RUBRIC.readability_enabled
    assert GENERAL_RUBRIC.readability_enabled


def test_terms_are_lowercased_and_trimmed():
    rubric = _rubric(required_sections=[" Work Experience ", "Skills"], impact_verbs=["Built"])
    group = KeywordGroup(name="cloud", keywords=["AWS", "  GCP  ", ""])

    assert rubric.required_sections == ["work experience", "skills"]
    assert rubric.impact_verbs == ["built"]
    assert group.keywords == ["aws", "gcp"]


@pytest.mark.parametrize("overrides", [
    {"required_sections": []},
    {"required_sections": ["   "]},
    {"keyword_groups": []},
    {"keyword_groups": [{"name": "tools", "keywords": []}]},
    {"impact_verbs": []},
    {"section_points": -1},
    {"density_cap": -5},
    {"missing_keyword_limit": 0},
])
def test_invalid_rubrics_are_rejected(overrides):
    with pytest.raises(ValidationError):
        _rubric(**overrides)


def test_duplicate_group_names_are_rejected():
    with pytest.raises(ValidationError, match="unique"):
        _rubric(keyword_groups=[
            {"name": "tools", "keywords": ["git"]},
            {"name": "tools", "keywords": ["svn"]},
        ])


def test_rubric_is_frozen():
    with pytest.raises(ValidationError):
        DEVOPS_RUBRIC.section_points = 30


def test_rubric_from_file(tmp_path):
    path = tmp_path / "rubric.json"
    path.write_text(GENERAL_RUBRIC.model_dump_json(), encoding="utf-8")

    assert RubricConfig.from_file(str(path)) == GENERAL_RUBRIC


def test_load_rubric_prefers_file(tmp_path, monkeypatch):
    path = tmp_path / "rubric.json"
    path.write_text(_rubric(name="from-file").model_dump_json(), encoding="utf-8")

    monkeypatch.setattr(config, "RUBRIC_FILE", str(path))
    assert config.load_rubric().name == "from-file"

    monkeypatch.setattr(config, "RUBRIC_FILE", None)
    monkeypatch.setattr(config, "RUBRIC_PRESET", "general")
    assert config.load_rubric() is GENERAL_RUBRIC
