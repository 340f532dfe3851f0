"""
Scripted collection surface.

Answers a survey from pre-defined answers instead of a user, walking the
question tree exactly like an interactive wizard would:

    - questions are visited depth-first in declaration order
    - OneOf/AnyOf selections are answered first, then the chosen
      variants' questions
    - each answer is field-validated; on failure the next scripted
      attempt for that path is tried (the wizard's retry loop)
    - at submission the composite validator runs; flagged paths are
      re-answered from their remaining attempts
    - a flagged selection that gets a new answer drops the data of the
      variants it no longer chooses and asks the newly chosen ones

A question without a scripted answer takes its suggestion, or the kind's
own default, as a user pressing enter would. With neither, or when all
attempts for a path fail validation, the run is cancelled.

Answers are plain Python values and are coerced by the question kind:
30 for an Int question, 2 (an index) for a OneOf, [0, 1] for an AnyOf.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from elicit.backends.base import SurveyBackend
from elicit.config import load_settings
from elicit.definition import (
    SurveyDefinition,
    any_of_namespace,
    one_of_namespace,
    selection_path,
    variant_questions,
)
from elicit.errors import SurveyCancelled
from elicit.path import ResponsePath
from elicit.question import (
    AllOfQuestion,
    AnyOfQuestion,
    ConfirmQuestion,
    OneOfQuestion,
    Question,
    QuestionKind,
    coerce_answer,
)
from elicit.responses import Responses
from elicit.validation import CompositeValidator, FieldValidator, dispatch_validation
from elicit.values import ResponseValue

logger = logging.getLogger(__name__)


def _fallback(question: Question) -> Any:
    """What accepting the prompt unchanged would answer, or None."""
    if question.default.is_suggested():
        return question.default.value
    kind = question.kind
    if isinstance(kind, ConfirmQuestion):
        return kind.default
    if isinstance(kind, OneOfQuestion):
        return kind.default
    if isinstance(kind, AnyOfQuestion):
        return list(kind.defaults)
    return getattr(kind, "default", None)


class ScriptedBackend(SurveyBackend):
    """
    Collection surface fed from scripted answers.

    Example:
        backend = (
            ScriptedBackend()
            .with_answer(ResponsePath.root("name"), "Alice")
            .with_attempts(ResponsePath.root("age"), -1, 30)
        )
    """

    def __init__(self, answers: Optional[Mapping[ResponsePath, Any]] = None, max_attempts: Optional[int] = None):
        self._answers: Dict[ResponsePath, List[Any]] = {}
        self.max_attempts = max_attempts if max_attempts is not None else load_settings().max_attempts
        for path, value in (answers or {}).items():
            self.with_answer(path, value)

    def with_answer(self, path: ResponsePath, value: Any) -> "ScriptedBackend":
        self._answers[path] = [value]
        return self

    def with_attempts(self, path: ResponsePath, *values: Any) -> "ScriptedBackend":
        """Script several answers for one path, tried in order until one validates."""
        self._answers[path] = list(values)
        return self

    def collect(
        self,
        definition: SurveyDefinition,
        validate: FieldValidator,
        validate_all: Optional[CompositeValidator] = None,
    ) -> Responses:
        return self.collect_from(self._answers, definition, validate, validate_all)

    def collect_from(
        self,
        answers: Mapping[ResponsePath, List[Any]],
        definition: SurveyDefinition,
        validate: FieldValidator,
        validate_all: Optional[CompositeValidator] = None,
    ) -> Responses:
        """Run one collection from `answers` (attempt lists per path), leaving the backend untouched."""
        run = _ScriptedRun(answers, self.max_attempts, validate)
        if definition.prelude:
            logger.info(definition.prelude)

        run.walk(definition.questions, ResponsePath())

        if validate_all is not None:
            run.submit(validate_all)

        if definition.epilogue:
            logger.info(definition.epilogue)
        return run.responses


class _ScriptedRun:
    """
    State of one collect() call: answers so far and attempts used per path.

    choices maps each answered selection path to its question, and branches
    maps it to the paths answered inside the chosen variant(s), so a
    selection flagged at submission can be swapped for another one.
    """

    def __init__(self, answers: Mapping[ResponsePath, List[Any]], max_attempts: int, validate: FieldValidator):
        self.answers = answers
        self.max_attempts = max_attempts
        self.validate = validate
        self.responses = Responses()
        self.used: Dict[ResponsePath, int] = {}
        self.kinds: Dict[ResponsePath, QuestionKind] = {}
        self.choices: Dict[ResponsePath, Tuple[ResponsePath, Question]] = {}
        self.branches: Dict[ResponsePath, Set[ResponsePath]] = {}

    def walk(self, questions: List[Question], prefix: ResponsePath) -> None:
        for question in questions:
            path = prefix.join(question.path)
            kind = question.kind

            if question.is_assumed() or kind.is_unit:
                continue

            if isinstance(kind, AllOfQuestion):
                self.walk(kind.questions, path)

            elif isinstance(kind, (OneOfQuestion, AnyOfQuestion)):
                key = selection_path(path, question)
                chosen = self.ask(key, question)
                self.choices[key] = (path, question)
                self.walk_chosen(path, question, chosen)

            else:
                self.ask(path, question)

    def walk_chosen(self, path: ResponsePath, question: Question, chosen: ResponseValue) -> None:
        """Answer the data of the chosen variant(s), recording which paths that touched."""
        kind = question.kind
        before = set(self.kinds)
        if isinstance(kind, OneOfQuestion):
            self.walk(variant_questions(kind.variants[chosen.payload]), one_of_namespace(path))
        else:
            for index in chosen.payload:
                self.walk(variant_questions(kind.variants[index]), any_of_namespace(path, index))
        self.branches[selection_path(path, question)] = set(self.kinds) - before

    def drop_branch(self, key: ResponsePath) -> Set[ResponsePath]:
        """Forget every answer given inside the variant(s) chosen at `key`."""
        dropped = self.branches.pop(key, set())
        for path in dropped:
            self.responses.remove(path)
            self.kinds.pop(path, None)
            self.used.pop(path, None)
            self.choices.pop(path, None)
            self.branches.pop(path, None)
        if dropped:
            logger.debug("Dropped %d answer(s) under '%s'", len(dropped), key)
        return dropped

    def _next_raw(self, path: ResponsePath, question: Question) -> Any:
        attempts = self.answers.get(path)
        used = self.used.get(path, 0)
        if attempts is None:
            if used == 0:
                fallback = _fallback(question)
                if fallback is not None:
                    self.used[path] = 1
                    return fallback
            raise SurveyCancelled(f"No answer for '{path}'")
        if used >= min(len(attempts), self.max_attempts):
            raise SurveyCancelled(f"No valid answer for '{path}' after {used} attempt(s)")
        self.used[path] = used + 1
        return attempts[used]

    def ask(self, path: ResponsePath, question: Question) -> ResponseValue:
        """Answer one prompt, retrying scripted attempts until one validates."""
        self.kinds[path] = question.kind
        while True:
            raw = self._next_raw(path, question)
            try:
                value = coerce_answer(question.kind, raw)
            except ValueError as e:
                logger.debug("Rejected answer for '%s': %s", path, e)
                continue
            self.responses.insert(path, value)
            message = self.validate(path, self.responses.read_only())
            if message is None:
                logger.debug("Answered '%s'", path)
                return value
            logger.debug("Validation failed for '%s': %s", path, message)
            self.responses.remove(path)

    def submit(self, validate_all: CompositeValidator) -> None:
        """Composite validation at submission, re-answering flagged paths."""
        while True:
            errors = dispatch_validation(list(self.kinds), self.responses, self.validate, [validate_all])
            if not errors:
                return
            dropped: Set[ResponsePath] = set()
            for path, message in errors.items():
                if path in dropped:
                    continue
                logger.debug("Submission rejected '%s': %s", path, message)
                kind = self.kinds.get(path)
                if kind is None:
                    raise SurveyCancelled(f"Survey rejected at '{path}': {message}")
                dropped |= self._reanswer(path, kind)

    def _reanswer(self, path: ResponsePath, kind: QuestionKind) -> Set[ResponsePath]:
        """
        Replace a flagged answer with the next scripted attempt.

        A new selection drops the answers of the previously chosen
        variant(s) and walks the newly chosen ones. Returns the dropped paths.
        """
        attempts = self.answers.get(path) or []
        while self.used.get(path, 0) < min(len(attempts), self.max_attempts):
            raw = attempts[self.used.get(path, 0)]
            self.used[path] = self.used.get(path, 0) + 1
            try:
                value = coerce_answer(kind, raw)
            except ValueError as e:
                logger.debug("Rejected answer for '%s': %s", path, e)
                continue
            self.responses.insert(path, value)
            if path not in self.choices:
                return set()
            dropped = self.drop_branch(path)
            self.walk_chosen(*self.choices[path], value)
            return dropped
        raise SurveyCancelled(f"No valid answer for '{path}' after {self.used.get(path, 0)} attempt(s)")
