"""
Survey Definition and traversal

SurveyDefinition is the root container for one survey: the top-level
questions plus optional prelude/epilogue messages.

Traversal order is fixed by declaration order. Collection surfaces walk
the tree depth-first:
    - AllOf: recurse into every child before the next sibling
    - OneOf: obtain a choice first, then walk only the chosen variant
    - AnyOf: obtain a subset, then walk each chosen variant in turn

iter_questions() implements the part of this walk that does not depend
on user choices. Variant sub-trees are reached through variant_questions()
once a choice is known.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from elicit.path import POSITIONAL_KEY, SELECTED_VARIANT_KEY, SELECTED_VARIANTS_KEY, ResponsePath
from elicit.question import AllOfQuestion, AnyOfQuestion, OneOfQuestion, Question, Variant


@dataclass
class SurveyDefinition:
    """
    Root container for a survey.

    Properties:
        questions: Top-level questions (may nest AllOf/OneOf/AnyOf)
        prelude: Optional message shown before the first question
        epilogue: Optional message shown after the last question
    """

    questions: List[Question] = field(default_factory=list)
    prelude: Optional[str] = None
    epilogue: Optional[str] = None

    def is_empty(self) -> bool:
        return not self.questions

    def __len__(self) -> int:
        return len(self.questions)


def iter_questions(
    questions: List[Question], prefix: ResponsePath = ResponsePath()
) -> Iterator[Tuple[ResponsePath, Question]]:
    """
    Yield (full_path, question) depth-first in declaration order.

    Descends into AllOf children. Does NOT descend into OneOf/AnyOf
    variants, since no variant has been chosen yet.
    """
    for question in questions:
        full_path = prefix.join(question.path)
        yield full_path, question
        if isinstance(question.kind, AllOfQuestion):
            yield from iter_questions(question.kind.questions, full_path)


def walk(definition: SurveyDefinition) -> Iterator[Tuple[ResponsePath, Question]]:
    return iter_questions(definition.questions)


def find_question(definition: SurveyDefinition, path: ResponsePath) -> Optional[Question]:
    """Find a question by full path (outside of unchosen variants)."""
    for full_path, question in walk(definition):
        if full_path == path:
            return question
    return None


def resolve_question(
    questions: List[Question], path: ResponsePath, prefix: ResponsePath = ResponsePath()
) -> Optional[Question]:
    """
    Find the question that answers at `path`, looking inside variants too.

    Unlike find_question(), this follows the response layout of every
    variant: OneOf variant data shares the question's namespace, AnyOf
    variant data sits under its ordinal. When several OneOf variants
    declare the same field, the first in declaration order wins.
    """
    for question in questions:
        full_path = prefix.join(question.path)
        if full_path == path:
            return question
        if not path.startswith(full_path):
            continue
        kind = question.kind
        if isinstance(kind, AllOfQuestion):
            found = resolve_question(kind.questions, path, full_path)
        elif isinstance(kind, OneOfQuestion):
            found = None
            for variant in kind.variants:
                found = resolve_question(variant_questions(variant), path, full_path)
                if found is not None:
                    break
        elif isinstance(kind, AnyOfQuestion):
            found = None
            remainder = path.strip_path_prefix(full_path)
            if remainder.first is not None and remainder.first.isdigit():
                index = int(remainder.first)
                if index < len(kind.variants):
                    found = resolve_question(
                        variant_questions(kind.variants[index]), path, any_of_namespace(full_path, index)
                    )
        else:
            found = None
        if found is not None:
            return found
    return None


def variant_questions(variant: Variant) -> List[Question]:
    """
    The questions a chosen variant asks, relative to its namespace.

    - AllOf variants ask their children
    - Unit variants ask nothing
    - any other kind is single positional data, asked at segment "0"
    """
    kind = variant.kind
    if isinstance(kind, AllOfQuestion):
        return kind.questions
    if kind.is_unit:
        return []
    return [Question(path=ResponsePath.root(POSITIONAL_KEY), ask=variant.name, kind=kind)]


def selection_path(path: ResponsePath, question: Question) -> ResponsePath:
    """Where a OneOf/AnyOf question stores its selection."""
    if isinstance(question.kind, OneOfQuestion):
        return path.child(SELECTED_VARIANT_KEY)
    if isinstance(question.kind, AnyOfQuestion):
        return path.child(SELECTED_VARIANTS_KEY)
    raise TypeError(f"Question at '{path}' has no variant selection")


def one_of_namespace(path: ResponsePath) -> ResponsePath:
    """A OneOf variant's data shares the question's own namespace."""
    return path


def any_of_namespace(path: ResponsePath, index: int) -> ResponsePath:
    """Each selected AnyOf variant gets its own namespace, keyed by ordinal."""
    return path.child(str(index))
