"""
Tests for SurveyBuilder: overrides, collection and reconstruction.
"""

from dataclasses import dataclass
from typing import List

import pytest

from elicit.backends import ScriptedBackend, SurveyBackend
from elicit.builder import SurveyBuilder
from elicit.config import Settings
from elicit.definition import SurveyDefinition, walk
from elicit.errors import BackendError, SurveyCancelled, UnmatchedOverrideError
from elicit.examples import (
    Account,
    Address,
    Cash,
    Contact,
    CreditCard,
    CustomTheme,
    DarkMode,
    Notifications,
    OrderForm,
    Preferences,
)
from elicit.path import ResponsePath
from elicit.question import FloatQuestion, ListElementKind, ListQuestion, Question
from elicit.responses import Responses
from elicit.survey import Survey
from elicit.values import ResponseValue

P = ResponsePath.root


class FailingBackend(SurveyBackend):
    def collect(self, definition, validate, validate_all=None):
        raise RuntimeError("terminal went away")


class CancellingBackend(SurveyBackend):
    def collect(self, definition, validate, validate_all=None):
        raise SurveyCancelled()


class FixedBackend(SurveyBackend):
    """Returns a fixed store, whatever the tree."""

    def __init__(self, responses):
        self.responses = responses
        self.seen = None

    def collect(self, definition, validate, validate_all=None):
        self.seen = definition
        return self.responses.copy()


def builder(schema, **settings):
    return SurveyBuilder(schema, settings=Settings(**settings))


class TestRun:
    def test_features_scenario(self):
        """Select DarkMode and Notifications(email=True, push=False); CustomTheme stays unselected."""
        backend = ScriptedBackend(
            {
                P("username"): "alice",
                P("age"): 30,
                P("height"): 1.7,
                ResponsePath.of("features", "selected_variants"): [0, 1],
                ResponsePath.of("features", "1", "email"): True,
                ResponsePath.of("features", "1", "push"): False,
                P("tags"): [],
            },
            max_attempts=1,
        )
        prefs = builder(Preferences).run(backend)
        assert prefs.features == [DarkMode(), Notifications(email=True, push=False)]
        assert prefs.age == 30

    def test_assumptions_are_not_asked_but_returned(self):
        backend = ScriptedBackend(
            {
                P("customer_name"): "Alice",
                ResponsePath.of("shipping_address", "street"): "1 Main St",
                ResponsePath.of("shipping_address", "zip"): "12345",
            },
            max_attempts=1,
        )
        order = (
            builder(OrderForm)
            .assume(ResponsePath.of("shipping_address", "city"), "Springfield")
            .assume(ResponsePath.of("payment", "selected_variant"), ResponseValue.chosen_variant(0))
            .run(backend)
        )
        assert order.shipping_address == Address("1 Main St", "Springfield", "12345")
        assert order.payment == Cash()

    def test_suggestion_used_when_unanswered(self):
        backend = ScriptedBackend({P("street"): "1 Main St", P("zip"): "12345"}, max_attempts=1)
        address = builder(Address).suggest(P("city"), "Springfield").run(backend)
        assert address.city == "Springfield"

    def test_suggestion_can_be_overridden(self):
        backend = ScriptedBackend(
            {P("street"): "1 Main St", P("city"): "Shelbyville", P("zip"): "12345"}, max_attempts=1
        )
        address = builder(Address).suggest(P("city"), "Springfield").run(backend)
        assert address.city == "Shelbyville"

    def test_assumed_value_wins_over_collected(self):
        collected = Address("1 Main St", "Elsewhere", "12345").to_responses()
        backend = FixedBackend(collected)
        address = builder(Address).assume(P("city"), "Springfield").run(backend)
        assert address.city == "Springfield"
        assert [p for p, _ in walk(backend.seen)] == [P("street"), P("zip")]

    def test_validators_see_assumed_values(self):
        backend = ScriptedBackend(
            {P("username"): "alice", P("password_confirm"): "secret-password", P("bio"): ""},
            max_attempts=1,
        )
        account = builder(Account).assume(P("password"), "secret-password").run(backend)
        assert account.password == "secret-password"

    def test_composite_validation_uses_assumed_values(self):
        backend = ScriptedBackend(
            {P("username"): "alice", P("password_confirm"): "mismatch", P("bio"): ""},
            max_attempts=1,
        )
        with pytest.raises(SurveyCancelled):
            builder(Account).assume(P("password"), "secret-password").run(backend)


class TestBulkOverrides:
    @pytest.mark.parametrize(
        "instance",
        [
            OrderForm("Alice", Address("1 Main St", "Springfield", "12345"), CreditCard("4111", "123"), "Al"),
            Preferences("alice", 30, 1.7, [DarkMode(), CustomTheme("solarized")], ["a"]),
            Contact(kind="phone", value="555"),
        ],
        ids=lambda x: type(x).__name__,
    )
    def test_with_assumptions_needs_no_questions(self, instance):
        schema = type(instance)
        b = builder(schema, strict_overrides=True).with_assumptions(instance)
        assert b.prepare().definition.is_empty()
        assert b.run(ScriptedBackend(max_attempts=1)) == instance

    def test_with_suggestions_prefills(self):
        address = Address("1 Main St", "Springfield", "12345")
        result = builder(Address).with_suggestions(address).run(ScriptedBackend(max_attempts=1))
        assert result == address

    def test_suggestions_stop_at_unchosen_variants(self):
        order = OrderForm("Alice", Address("s", "c", "z"), CreditCard("4111", "123"))
        prepared = builder(OrderForm).with_suggestions(order).prepare()
        assert prepared.unmatched_suggestions == [
            ResponsePath.of("payment", "cvv"),
            ResponsePath.of("payment", "number"),
        ]


class TestStrictOverrides:
    def test_lenient_by_default(self):
        result = builder(Address).assume(P("ghost"), 1).prepare()
        assert result.unmatched_assumptions == [P("ghost")]

    def test_strict_raises(self):
        with pytest.raises(UnmatchedOverrideError) as exc:
            builder(Address, strict_overrides=True).assume(P("ghost"), 1).prepare()
        assert exc.value.paths == [P("ghost")]

    def test_strict_ignores_unmatched_suggestions(self):
        result = builder(Address, strict_overrides=True).suggest(P("ghost"), 1).prepare()
        assert result.unmatched_suggestions == [P("ghost")]


class TestBackendFailures:
    def test_unexpected_exception_is_wrapped(self):
        with pytest.raises(BackendError) as exc:
            builder(Address).run(FailingBackend())
        assert isinstance(exc.value.cause, RuntimeError)
        assert exc.value.__cause__ is exc.value.cause

    def test_cancel_passes_through(self):
        with pytest.raises(SurveyCancelled):
            builder(Address).run(CancellingBackend())


def test_survey_builder_classmethod():
    b = Address.builder()
    assert isinstance(b, SurveyBuilder)
    assert b.schema is Address


def test_overrides_are_coerced_against_their_question():
    b = builder(Address).suggest(P("city"), "x").assume(P("zip"), "y")
    assert b.assumptions[P("zip")] == "y"
    prepared = b.prepare()
    assert prepared.responses.get(P("zip")) == ResponseValue.text("y")
    city = next(q for q in prepared.definition.questions if q.path == P("city"))
    assert city.default.value == ResponseValue.text("x")


@dataclass
class Scores(Survey):
    values: List[int]
    weight: float

    @classmethod
    def survey(cls) -> SurveyDefinition:
        return SurveyDefinition(
            questions=[
                Question(P("values"), "Scores:", ListQuestion(element_kind=ListElementKind.INT)),
                Question(P("weight"), "Weight:", FloatQuestion()),
            ]
        )

    @classmethod
    def from_responses(cls, responses: Responses) -> "Scores":
        return cls(values=list(responses.get_int_list(P("values"))), weight=responses.get_float(P("weight")))

    def to_responses(self) -> Responses:
        r = Responses()
        r.insert(P("values"), self.values)
        r.insert(P("weight"), self.weight)
        return r


class TestNumericOverrides:
    """Values whose plain Python form does not carry the question's type."""

    def test_empty_int_list_and_integral_float(self):
        b = builder(Scores).assume(P("values"), []).assume(P("weight"), 2)
        prepared = b.prepare()
        assert prepared.definition.is_empty()
        assert prepared.responses.get(P("values")) == ResponseValue.int_list([])
        assert prepared.responses.get(P("weight")) == ResponseValue.float_(2.0)

    def test_with_assumptions_round_trip(self):
        scores = Scores(values=[], weight=2)
        b = builder(Scores, strict_overrides=True).with_assumptions(scores)
        result = b.run(ScriptedBackend(max_attempts=1))
        assert result == Scores(values=[], weight=2.0)
        assert isinstance(result.weight, float)

    def test_suggested_int_for_float_question(self):
        result = builder(Scores).assume(P("values"), [1, 2]).suggest(P("weight"), 3).run(ScriptedBackend())
        assert result == Scores(values=[1, 2], weight=3.0)
