"""Tests for path template resolution and knowledge URL rewriting."""

import pytest

from pica_toolkit.errors import MissingVariableError
from pica_toolkit.templates import (
    extract_placeholders,
    replace_base_url_in_knowledge,
    replace_path_variables,
    resolve_template_variables,
)


class TestExtractPlaceholders:

    def test_order_and_dedup(self):
        path = "/a/{{x}}/b/{{y}}/c/{{x}}"
        assert extract_placeholders(path) == ["x", "y"]

    def test_no_placeholders(self):
        assert extract_placeholders("/plain/path") == []


class TestReplacePathVariables:

    def test_substitutes_all_occurrences(self):
        assert replace_path_variables("/{{id}}/x/{{id}}", {"id": 7}) == "/7/x/7"

    def test_bool_rendered_lowercase(self):
        assert replace_path_variables("/flag/{{on}}", {"on": True}) == "/flag/true"

    def test_reports_every_missing_name(self):
        with pytest.raises(MissingVariableError) as exc_info:
            replace_path_variables("/{{a}}/{{b}}/{{c}}", {"b": "ok"})

        assert exc_info.value.missing == ["a", "c"]
        assert str(exc_info.value) == (
            "Missing required path variables: a, c. Please provide values for these variables."
        )


class TestResolveTemplateVariables:
    """Tests for reconciling placeholders against payload and explicit values."""

    def test_value_taken_from_payload(self):
        result = resolve_template_variables(
            "/api/users/{{userId}}",
            {"userId": "123", "name": "John"},
        )

        assert result.resolved_path == "/api/users/123"
        assert result.cleaned_data == {"name": "John"}
        assert result.resolved_path_variables == {"userId": "123"}

    def test_explicit_value_wins_and_payload_field_stays(self):
        result = resolve_template_variables(
            "/api/users/{{userId}}",
            {"userId": "from-payload", "name": "John"},
            {"userId": "explicit"},
        )

        assert result.resolved_path == "/api/users/explicit"
        assert result.cleaned_data == {"userId": "from-payload", "name": "John"}
        assert result.resolved_path_variables == {"userId": "explicit"}

    def test_no_placeholders_returns_input_unchanged(self):
        data = {"a": 1}
        result = resolve_template_variables("/plain", data, {"unused": "x"})

        assert result.resolved_path == "/plain"
        assert result.cleaned_data is data
        assert result.resolved_path_variables == {}

    def test_non_mapping_payload_passes_through(self):
        result = resolve_template_variables("/items/{{id}}", [1, 2, 3], {"id": 9})

        assert result.resolved_path == "/items/9"
        assert result.cleaned_data == [1, 2, 3]

    def test_missing_variables_listed_together(self):
        with pytest.raises(MissingVariableError) as exc_info:
            resolve_template_variables("/x/{{a}}/y/{{b}}", {"other": 1})

        assert exc_info.value.missing == ["a", "b"]

    def test_input_payload_not_mutated(self):
        data = {"userId": "123", "name": "John"}
        resolve_template_variables("/api/users/{{userId}}", data)

        assert data == {"userId": "123", "name": "John"}

    def test_nothing_mutated_when_resolution_fails(self):
        data = {"a": "1"}
        with pytest.raises(MissingVariableError):
            resolve_template_variables("/{{a}}/{{b}}", data)

        assert data == {"a": "1"}

    @pytest.mark.parametrize("falsy", [0, False, ""])
    def test_falsy_value_counts_as_missing(self, falsy):
        with pytest.raises(MissingVariableError) as exc_info:
            resolve_template_variables("/page/{{n}}", {"n": falsy})

        assert exc_info.value.missing == ["n"]

    def test_mixed_sources(self):
        result = resolve_template_variables(
            "/sheets/{{sheetId}}/rows/{{row}}",
            {"row": 4, "values": ["a"]},
            {"sheetId": "abc"},
        )

        assert result.resolved_path == "/sheets/abc/rows/4"
        assert result.cleaned_data == {"values": ["a"]}
        assert result.resolved_path_variables == {"sheetId": "abc", "row": 4}


class TestReplaceBaseUrlInKnowledge:

    PASSTHROUGH = "https://api.picaos.com/v1/passthrough"

    def test_rewrites_every_spelling(self):
        knowledge = (
            "GET https://gmail.googleapis.com/gmail/v1/users/me\n"
            "or http://gmail.googleapis.com/gmail/v1/labels"
        )

        updated = replace_base_url_in_knowledge(
            knowledge, "https://gmail.googleapis.com/", self.PASSTHROUGH
        )

        assert "googleapis" not in updated
        assert f"{self.PASSTHROUGH}/gmail/v1/users/me" in updated
        assert f"{self.PASSTHROUGH}/gmail/v1/labels" in updated

    def test_missing_base_url_leaves_text(self):
        assert replace_base_url_in_knowledge("docs", None, self.PASSTHROUGH) == "docs"

    def test_regex_characters_are_literal(self):
        knowledge = "see https://api.x.com and https://apixxcom"
        updated = replace_base_url_in_knowledge(knowledge, "https://api.x.com", self.PASSTHROUGH)

        assert updated == f"see {self.PASSTHROUGH} and https://apixxcom"
