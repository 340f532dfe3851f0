"""
Tests for the builder merge.

Suggestions become an overlay, assumptions go straight into the store and
prune their question. The merge never mutates its input tree.
"""

import logging

import pytest

from elicit.definition import SurveyDefinition, walk
from elicit.errors import InvalidOverrideError
from elicit.examples import OrderForm, Preferences
from elicit.merge import apply_overrides
from elicit.path import ResponsePath
from elicit.question import (
    AllOfQuestion,
    ConfirmQuestion,
    FloatQuestion,
    InputQuestion,
    IntQuestion,
    ListElementKind,
    ListQuestion,
    Question,
)
from elicit.values import ResponseValue

P = ResponsePath.root


def simple_definition() -> SurveyDefinition:
    return SurveyDefinition(
        questions=[
            Question(P("name"), "Name:", InputQuestion()),
            Question(P("age"), "Age:", IntQuestion()),
        ]
    )


def paths(definition):
    return [p for p, _ in walk(definition)]


class TestSuggestions:
    def test_suggestion_sets_overlay(self):
        result = apply_overrides(simple_definition(), suggestions={P("name"): "Alice"})
        q = result.definition.questions[0]
        assert q.default.is_suggested()
        assert q.default.value == ResponseValue.text("Alice")
        assert len(result.responses) == 0

    def test_suggested_question_still_asked(self):
        result = apply_overrides(simple_definition(), suggestions={P("name"): "Alice"})
        assert paths(result.definition) == [P("name"), P("age")]


class TestAssumptions:
    def test_assumption_prunes_and_stores(self):
        result = apply_overrides(simple_definition(), assumptions={P("age"): 30})
        assert paths(result.definition) == [P("name")]
        assert result.responses.get_int(P("age")) == 30

    def test_assumption_beats_suggestion(self):
        """Both registered for one path: the value is assumed and the question is gone."""
        result = apply_overrides(
            simple_definition(),
            suggestions={P("age"): 25},
            assumptions={P("age"): 30},
        )
        assert P("age") not in paths(result.definition)
        assert result.responses.get_int(P("age")) == 30
        assert result.unmatched_suggestions == []

    def test_nested_paths(self):
        result = apply_overrides(
            OrderForm.survey(),
            assumptions={ResponsePath.of("shipping_address", "city"): "Springfield"},
        )
        remaining = paths(result.definition)
        assert ResponsePath.of("shipping_address", "city") not in remaining
        assert ResponsePath.of("shipping_address", "street") in remaining
        assert result.responses.get_text(ResponsePath.of("shipping_address", "city")) == "Springfield"

    def test_fully_assumed_group_is_pruned(self):
        address = P("shipping_address")
        result = apply_overrides(
            OrderForm.survey(),
            assumptions={
                address.child("street"): "1 Main St",
                address.child("city"): "Springfield",
                address.child("zip"): "12345",
            },
        )
        assert address not in paths(result.definition)
        assert len(result.responses) == 3

    def test_empty_group_without_overrides_is_kept(self):
        definition = SurveyDefinition(questions=[Question(P("empty"), "Nothing", AllOfQuestion())])
        result = apply_overrides(definition)
        assert paths(result.definition) == [P("empty")]

    def test_input_not_mutated(self):
        definition = simple_definition()
        apply_overrides(definition, suggestions={P("name"): "A"}, assumptions={P("age"): 1})
        assert definition == simple_definition()

    def test_idempotent(self):
        overrides = dict(
            suggestions={P("name"): "Alice"},
            assumptions={P("age"): 30, ResponsePath.of("payment", "selected_variant"): ResponseValue.chosen_variant(0)},
        )
        first = apply_overrides(OrderForm.survey(), **overrides)
        second = apply_overrides(OrderForm.survey(), **overrides)
        assert first.definition == second.definition
        assert first.responses == second.responses


class TestChoices:
    """Selections are overridden at their reserved path; assuming one opens the variant."""

    def test_suggested_selection(self):
        key = ResponsePath.of("payment", "selected_variant")
        result = apply_overrides(OrderForm.survey(), suggestions={key: ResponseValue.chosen_variant(2)})
        payment = [q for p, q in walk(result.definition) if p == P("payment")][0]
        assert payment.default.value == ResponseValue.chosen_variant(2)

    def test_assumed_selection_collapses_one_of(self):
        key = ResponsePath.of("payment", "selected_variant")
        result = apply_overrides(OrderForm.survey(), assumptions={key: ResponseValue.chosen_variant(1)})
        remaining = paths(result.definition)
        assert ResponsePath.of("payment", "number") in remaining
        assert ResponsePath.of("payment", "cvv") in remaining
        assert result.responses.get_chosen_variant(key) == 1

    def test_variant_fields_reachable_after_assumed_selection(self):
        result = apply_overrides(
            OrderForm.survey(),
            assumptions={
                ResponsePath.of("payment", "selected_variant"): ResponseValue.chosen_variant(2),
                ResponsePath.of("payment", "iban"): "DE00",
            },
        )
        assert P("payment") not in paths(result.definition)
        assert result.responses.get_text(ResponsePath.of("payment", "iban")) == "DE00"
        assert result.unmatched_assumptions == []

    def test_unit_variant_selection_prunes_question(self):
        result = apply_overrides(
            OrderForm.survey(),
            assumptions={ResponsePath.of("payment", "selected_variant"): ResponseValue.chosen_variant(0)},
        )
        assert P("payment") not in paths(result.definition)

    def test_assumed_any_of_selection(self):
        features = P("features")
        result = apply_overrides(
            Preferences.survey(),
            assumptions={
                features.child("selected_variants"): ResponseValue.chosen_variants([0, 1]),
                ResponsePath.of("features", "1", "email"): True,
            },
        )
        remaining = paths(result.definition)
        assert ResponsePath.of("features", "1", "push") in remaining
        assert ResponsePath.of("features", "1", "email") not in remaining
        assert ResponsePath.of("features", "0") not in remaining

    def test_assumed_selection_beats_suggested_selection(self, caplog):
        key = ResponsePath.of("payment", "selected_variant")
        with caplog.at_level(logging.DEBUG, logger="elicit"):
            result = apply_overrides(
                OrderForm.survey(),
                suggestions={key: ResponseValue.chosen_variant(2)},
                assumptions={key: ResponseValue.chosen_variant(0)},
            )
        assert result.responses.get_chosen_variant(key) == 0
        assert result.unmatched_suggestions == []
        assert "matched no question" not in caplog.text

    def test_variant_field_without_selection_is_unmatched(self):
        result = apply_overrides(
            OrderForm.survey(), assumptions={ResponsePath.of("payment", "iban"): "DE00"}
        )
        assert result.unmatched_assumptions == [ResponsePath.of("payment", "iban")]
        assert len(result.responses) == 0


class TestInvalidOverrides:
    def test_wrong_type(self):
        with pytest.raises(InvalidOverrideError):
            apply_overrides(simple_definition(), assumptions={P("age"): "thirty"})

    def test_selection_out_of_range(self):
        with pytest.raises(InvalidOverrideError):
            apply_overrides(
                OrderForm.survey(),
                assumptions={ResponsePath.of("payment", "selected_variant"): ResponseValue.chosen_variant(7)},
            )

    def test_invalid_override_is_value_error(self):
        with pytest.raises(ValueError):
            apply_overrides(simple_definition(), suggestions={P("name"): 1})


class TestUnmatched:
    def test_reported_separately(self):
        result = apply_overrides(
            simple_definition(),
            suggestions={P("ghost"): "x"},
            assumptions={P("phantom"): 1},
        )
        assert result.unmatched_suggestions == [P("ghost")]
        assert result.unmatched_assumptions == [P("phantom")]

    def test_unmatched_assumption_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="elicit"):
            apply_overrides(simple_definition(), assumptions={P("phantom"): 1})
        assert "phantom" in caplog.text

    def test_confirm_accepts_bool_only(self):
        definition = SurveyDefinition(questions=[Question(P("ok"), "OK?", ConfirmQuestion())])
        result = apply_overrides(definition, assumptions={P("ok"): False})
        assert result.responses.get_bool(P("ok")) is False


class TestCoercionByQuestionKind:
    """Raw override values take the tag of the question they land on."""

    def numbers(self) -> SurveyDefinition:
        return SurveyDefinition(
            questions=[
                Question(P("scores"), "Scores:", ListQuestion(element_kind=ListElementKind.INT)),
                Question(P("ratios"), "Ratios:", ListQuestion(element_kind=ListElementKind.FLOAT)),
                Question(P("weight"), "Weight:", FloatQuestion()),
            ]
        )

    def test_empty_list_for_int_list_question(self):
        result = apply_overrides(self.numbers(), assumptions={P("scores"): []})
        assert result.responses.get(P("scores")) == ResponseValue.int_list([])

    def test_int_for_float_question(self):
        result = apply_overrides(self.numbers(), assumptions={P("weight"): 2})
        assert result.responses.get(P("weight")) == ResponseValue.float_(2.0)

    def test_int_items_for_float_list_question(self):
        result = apply_overrides(self.numbers(), suggestions={P("ratios"): [1, 2]})
        ratios = [q for p, q in walk(result.definition) if p == P("ratios")][0]
        assert ratios.default.value == ResponseValue.float_list([1.0, 2.0])

    def test_tagged_value_is_retagged(self):
        result = apply_overrides(self.numbers(), assumptions={P("scores"): ResponseValue.text_list([])})
        assert result.responses.get(P("scores")) == ResponseValue.int_list([])

    def test_plain_index_for_selection(self):
        key = ResponsePath.of("payment", "selected_variant")
        result = apply_overrides(OrderForm.survey(), assumptions={key: 2})
        assert result.responses.get(key) == ResponseValue.chosen_variant(2)

    def test_text_items_rejected_for_int_list(self):
        with pytest.raises(InvalidOverrideError):
            apply_overrides(self.numbers(), assumptions={P("scores"): ["1", "2"]})
