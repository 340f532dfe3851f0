"""
Builder Merge

Overlays suggestions and assumptions onto a freshly produced question tree
before it is handed to a collection surface.

    suggestion  -> DefaultValue.suggested(value); question is still asked
    assumption  -> value goes straight into the response store and the
                   question is pruned from the tree

RULES:
    - Overrides are keyed by FULL response path (the same paths the store uses).
    - An assumption beats a suggestion for the same path.
    - The walk descends into AllOf children only. Paths under a OneOf/AnyOf
      variant cannot be targeted until a variant is chosen, which happens
      when the selection itself is assumed (path.selected_variant or
      path.selected_variants). The choice question then collapses into a
      group of the chosen variant's questions and the walk continues there.
    - Pruning is bottom-up. A group left empty by pruning is pruned too.
    - The input tree is never mutated; merge works on a deep copy.

Re-running the merge with the same overrides on an equal fresh tree gives
an equal pruned tree and an equal store.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set

from elicit.definition import SurveyDefinition, any_of_namespace, selection_path, variant_questions
from elicit.errors import InvalidOverrideError
from elicit.path import ResponsePath
from elicit.question import (
    AllOfQuestion,
    AnyOfQuestion,
    OneOfQuestion,
    Question,
    QuestionKind,
    coerce_answer,
)
from elicit.responses import Responses
from elicit.values import ResponseValue

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """
    Output of apply_overrides().

    Properties:
        definition: The pruned private copy to hand to a collection surface
        responses: Store seeded with every assumed value
        unmatched_suggestions / unmatched_assumptions: Override paths no
            question answered (e.g. fields of an unchosen variant)
    """

    definition: SurveyDefinition
    responses: Responses
    unmatched_suggestions: List[ResponsePath] = field(default_factory=list)
    unmatched_assumptions: List[ResponsePath] = field(default_factory=list)


@dataclass
class _MergeState:
    suggestions: Dict[ResponsePath, Any]
    assumptions: Dict[ResponsePath, Any]
    responses: Responses = field(default_factory=Responses)
    matched: Set[ResponsePath] = field(default_factory=set)


def _coerce(kind: QuestionKind, raw: Any, path: ResponsePath) -> ResponseValue:
    try:
        return coerce_answer(kind, raw)
    except ValueError as e:
        raise InvalidOverrideError(f"Override at '{path}' does not fit {type(kind).__name__}: {e}") from e


def apply_overrides(
    definition: SurveyDefinition,
    suggestions: Optional[Mapping[ResponsePath, Any]] = None,
    assumptions: Optional[Mapping[ResponsePath, Any]] = None,
) -> MergeResult:
    """
    Merge suggestions and assumptions into a copy of `definition`.

    Raises:
        InvalidOverrideError: an override value does not fit its question
    """
    tree = copy.deepcopy(definition)
    state = _MergeState(suggestions=dict(suggestions or {}), assumptions=dict(assumptions or {}))

    tree.questions = _merge_group(tree.questions, ResponsePath(), state)

    unmatched_assumptions = sorted(
        (p for p in state.assumptions if p not in state.matched), key=lambda p: p.parts
    )
    unmatched_suggestions = sorted(
        (p for p in state.suggestions if p not in state.matched), key=lambda p: p.parts
    )
    for path in unmatched_assumptions:
        logger.warning("Assumption for '%s' matched no question", path)
    for path in unmatched_suggestions:
        logger.debug("Suggestion for '%s' matched no question", path)

    return MergeResult(
        definition=tree,
        responses=state.responses,
        unmatched_suggestions=unmatched_suggestions,
        unmatched_assumptions=unmatched_assumptions,
    )


def _merge_group(questions: List[Question], prefix: ResponsePath, state: _MergeState) -> List[Question]:
    """Merge each question; return the ones a surface still has to ask."""
    kept = []
    for question in questions:
        if _merge_question(question, prefix.join(question.path), state):
            kept.append(question)
    return kept


def _merge_question(question: Question, path: ResponsePath, state: _MergeState) -> bool:
    kind = question.kind

    if isinstance(kind, AllOfQuestion):
        had_children = bool(kind.questions)
        kind.questions = _merge_group(kind.questions, path, state)
        return bool(kind.questions) or not had_children

    if isinstance(kind, (OneOfQuestion, AnyOfQuestion)):
        return _merge_choice(question, path, state)

    if kind.is_unit:
        return True

    if path in state.assumptions:
        assumed = _coerce(kind, state.assumptions[path], path)
        # Same key as a suggestion for this path: both count as matched.
        state.matched.add(path)
        question.set_assumption(assumed)
        state.responses.insert(path, assumed)
        logger.debug("Assumed '%s'", path)
        return False

    if path in state.suggestions:
        suggested = _coerce(kind, state.suggestions[path], path)
        state.matched.add(path)
        question.set_suggestion(suggested)
        logger.debug("Suggested '%s'", path)

    return True


def _merge_choice(question: Question, path: ResponsePath, state: _MergeState) -> bool:
    kind = question.kind
    key = selection_path(path, question)

    if key not in state.assumptions:
        if key in state.suggestions:
            question.set_suggestion(_coerce(kind, state.suggestions[key], key))
            state.matched.add(key)
        return True

    assumed = _coerce(kind, state.assumptions[key], key)
    state.matched.add(key)
    state.responses.insert(key, assumed)
    logger.debug("Assumed selection '%s'", key)

    # The choice is made: what remains is a plain group of the chosen
    # variant(s)' questions, which may themselves be overridden.
    question.kind = _collapse(kind, assumed)
    question.clear_default()
    question.kind.questions = _merge_group(question.kind.questions, path, state)
    return bool(question.kind.questions)


def _collapse(kind: QuestionKind, selection: ResponseValue) -> AllOfQuestion:
    if isinstance(kind, OneOfQuestion):
        return AllOfQuestion(questions=list(variant_questions(kind.variants[selection.payload])))

    groups = []
    for index in selection.payload:
        variant = kind.variants[index]
        children = variant_questions(variant)
        if children:
            groups.append(
                Question(
                    path=any_of_namespace(ResponsePath(), index),
                    ask=variant.name,
                    kind=AllOfQuestion(questions=list(children)),
                )
            )
    return AllOfQuestion(questions=groups)
