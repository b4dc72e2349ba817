"""Unit tests for parameter validation and enhancement."""

from agentdock.core.domain.models import ActionSpec, ParameterSpec
from agentdock.core.domain.parameters import check_required_parameters, enhance_parameters


def _action() -> ActionSpec:
    return ActionSpec(
        "getPR",
        "Get a pull request",
        {
            "number": ParameterSpec("number", required=True),
            "owner": ParameterSpec("string", required=True),
            "verbose": ParameterSpec("boolean"),
            "repo": ParameterSpec("string", required=True),
        },
    )


class TestCheckRequiredParameters:
    def test_reports_missing_in_schema_order(self):
        assert check_required_parameters(_action(), {"owner": "acme"}) == ["number", "repo"]

    def test_null_counts_as_missing(self):
        params = {"number": None, "owner": "acme", "repo": "api"}

        assert check_required_parameters(_action(), params) == ["number"]

    def test_falsy_values_count_as_present(self):
        params = {"number": 0, "owner": "", "repo": False}

        assert check_required_parameters(_action(), params) == []

    def test_unknown_action_has_no_requirements(self):
        assert check_required_parameters(None, {}) == []


class TestEnhanceParameters:
    def test_layer_priority(self):
        explicit = {"number": 7}
        contextual = {"owner": "acme", "repo": "api", "number": 1}
        ambient = {"owner": "other", "channel": "dev"}

        enhanced = enhance_parameters(explicit, contextual, ambient)

        assert enhanced == {"number": 7, "owner": "acme", "repo": "api", "channel": "dev"}

    def test_explicit_null_is_filled(self):
        enhanced = enhance_parameters({"owner": None}, {"owner": "acme"})

        assert enhanced["owner"] == "acme"

    def test_inputs_are_not_mutated(self):
        explicit = {"number": 7}
        contextual = {"owner": "acme"}

        enhance_parameters(explicit, contextual, {"repo": "api"})

        assert explicit == {"number": 7}
        assert contextual == {"owner": "acme"}

    def test_missing_layers(self):
        assert enhance_parameters({"a": 1}) == {"a": 1}
        assert enhance_parameters({"a": 1}, None, {}) == {"a": 1}
