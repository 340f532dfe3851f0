"""
Tests for serialization and deserialization of elicit objects.

These tests ensure lossless JSON/YAML round-trip of question trees and
response stores, and the nested answers layout used by answer files.
"""

import json

import pytest

from elicit.examples import Contact, DarkMode, Notifications, OrderForm, Preferences
from elicit.merge import apply_overrides
from elicit.path import ResponsePath
from elicit.responses import Responses
from elicit.serialization import (
    definition_from_dict,
    definition_from_json,
    definition_from_yaml,
    definition_to_dict,
    definition_to_json,
    definition_to_yaml,
    flatten_answers,
    nest_responses,
    responses_from_json,
    responses_from_yaml,
    responses_to_json,
    responses_to_list,
    responses_to_yaml,
)
from elicit.values import ResponseValue

P = ResponsePath.root


def sample_preferences() -> Preferences:
    return Preferences(
        username="alice",
        age=30,
        height=1.7,
        features=[DarkMode(), Notifications(email=True, push=False)],
        tags=["a"],
    )


class TestDefinitions:
    @pytest.mark.parametrize("schema", [OrderForm, Preferences, Contact])
    def test_dict_round_trip(self, schema):
        definition = schema.survey()
        assert definition_from_dict(definition_to_dict(definition)) == definition

    def test_json_round_trip(self):
        definition = Preferences.survey()
        assert definition_from_json(definition_to_json(definition)) == definition

    def test_yaml_round_trip(self):
        definition = OrderForm.survey()
        assert definition_from_yaml(definition_to_yaml(definition)) == definition

    def test_overlay_survives(self):
        merged = apply_overrides(OrderForm.survey(), suggestions={P("customer_name"): "Alice"}).definition
        restored = definition_from_json(definition_to_json(merged))
        assert restored.questions[0].default.value == ResponseValue.text("Alice")

    def test_paths_are_segment_lists(self):
        data = definition_to_dict(OrderForm.survey())
        address = data["questions"][1]
        assert address["path"] == ["shipping_address"]
        assert address["kind"]["type"] == "all_of"
        assert address["kind"]["questions"][0]["path"] == ["street"]

    def test_root_path(self):
        data = definition_to_dict(Contact.survey())
        assert data["questions"][0]["path"] == []
        assert data["questions"][0]["kind"]["type"] == "one_of"

    def test_unknown_type(self):
        with pytest.raises(TypeError):
            definition_from_dict({"questions": [{"path": ["x"], "kind": {"type": "slider"}}]})


class TestResponses:
    def test_list_is_sorted_by_path(self):
        entries = responses_to_list(sample_preferences().to_responses())
        paths = [e["path"] for e in entries]
        assert paths == sorted(paths)
        assert {"path": ["features", "selected_variants"], "kind": "chosen_variants", "value": [0, 1]} in entries

    def test_json_round_trip(self):
        r = sample_preferences().to_responses()
        assert responses_from_json(responses_to_json(r)) == r

    def test_yaml_round_trip(self):
        r = sample_preferences().to_responses()
        assert responses_from_yaml(responses_to_yaml(r)) == r

    def test_tags_survive(self):
        r = Responses({P("id"): ResponseValue.chosen_variant(1), P("n"): 1, P("f"): 1.0})
        restored = responses_from_json(responses_to_json(r))
        assert restored.get_chosen_variant(P("id")) == 1
        assert restored.get_int(P("n")) == 1
        assert restored.get_float(P("f")) == 1.0

    def test_empty_yaml(self):
        assert len(responses_from_yaml("")) == 0


class TestNestedAnswers:
    def test_nest(self):
        nested = nest_responses(sample_preferences().to_responses())
        assert nested["features"]["selected_variants"] == [0, 1]
        assert nested["features"]["1"] == {"email": True, "push": False}
        json.dumps(nested)

    def test_flatten_is_inverse_for_plain_values(self):
        nested = {"a": {"b": 1, "c": {"d": "x"}}, "e": True}
        assert flatten_answers(nested) == {
            ResponsePath.of("a", "b"): 1,
            ResponsePath.of("a", "c", "d"): "x",
            P("e"): True,
        }

    def test_flatten_stringifies_keys(self):
        assert flatten_answers({"features": {1: {"email": True}}}) == {ResponsePath.of("features", "1", "email"): True}

    def test_root_value_cannot_nest(self):
        with pytest.raises(ValueError):
            nest_responses(Responses({ResponsePath.empty(): "x"}))

    def test_value_and_group_conflict(self):
        r = Responses({P("a"): 1, ResponsePath.of("a", "b"): 2})
        with pytest.raises(ValueError):
            nest_responses(r)
