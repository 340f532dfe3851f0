"""
The Survey capability

A type that can be collected through a survey implements four things,
by hand, once per type:

    survey()            produce a fresh question tree
    from_responses()    rebuild an instance from a complete store
    validate_field()    per-path validation (optional)
    validate_all()      whole-survey validation (optional)

plus to_responses(), the inverse projection of from_responses(), used to
register an existing instance as suggestions or assumptions.

RECONSTRUCTION CONTRACT:
    from_responses() is a pure projection, not a parser. If every asked
    question was answered and every assumed value was pre-inserted, it
    cannot fail. It reads the store only through typed accessors.

ENUM-SHAPED DATA:
    OneOf at path p:
        selection   p.selected_variant    (CHOSEN_VARIANT)
        data        p.<field> or p.0      (single positional data)
    AnyOf at path p:
        selection   p.selected_variants   (CHOSEN_VARIANTS)
        data        p.<ordinal>.<field> or p.<ordinal>.0

The helpers below read and write that layout so hand-written schemas
never spell the reserved segments themselves.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from elicit.definition import SurveyDefinition, any_of_namespace, one_of_namespace, resolve_question
from elicit.path import SELECTED_VARIANT_KEY, SELECTED_VARIANTS_KEY, ResponsePath
from elicit.responses import Responses
from elicit.validation import check_bounds
from elicit.values import ResponseValue

if TYPE_CHECKING:
    from elicit.builder import SurveyBuilder


class Survey(ABC):
    """Base class for hand-written survey schemas."""

    @classmethod
    @abstractmethod
    def survey(cls) -> SurveyDefinition:
        """Return a FRESH question tree. Never return a shared instance."""

    @classmethod
    @abstractmethod
    def from_responses(cls, responses: Responses) -> "Survey":
        """Rebuild an instance from a complete store."""

    @abstractmethod
    def to_responses(self) -> Responses:
        """Project this instance onto the flat store layout."""

    @classmethod
    def validate_field(cls, path: ResponsePath, responses: Responses) -> Optional[str]:
        """
        Validate the value at `path`.

        The default enforces the min/max and item-count bounds declared on
        the matching question. Override to add checks, and call super()
        to keep the bounds.
        """
        value = responses.get(path)
        if value is None:
            return None
        question = resolve_question(cls.survey().questions, path)
        if question is None:
            return None
        return check_bounds(question.kind, value)

    @classmethod
    def validate_all(cls, responses: Responses) -> Dict[ResponsePath, str]:
        """Whole-survey validation. Default: nothing to report."""
        return {}

    @classmethod
    def builder(cls) -> "SurveyBuilder":
        from elicit.builder import SurveyBuilder

        return SurveyBuilder(cls)


def nested(responses: Responses, path: ResponsePath) -> Responses:
    """The sub-store a nested schema at `path` reconstructs from."""
    return responses.filter_prefix(path)


def read_one_of(responses: Responses, path: ResponsePath) -> Tuple[int, Responses]:
    """Return the chosen variant index and the store its data lives in."""
    index = responses.get_chosen_variant(path.child(SELECTED_VARIANT_KEY))
    return index, responses.filter_prefix(one_of_namespace(path))


def read_any_of(responses: Responses, path: ResponsePath) -> List[Tuple[int, Responses]]:
    """Return (index, data store) for every selected variant, in index order."""
    indices = responses.get_chosen_variants(path.child(SELECTED_VARIANTS_KEY))
    return [(index, responses.filter_prefix(any_of_namespace(path, index))) for index in indices]


def embed(responses: Responses, path: ResponsePath, sub: Responses) -> None:
    """Insert every entry of `sub` under `path` (inverse of filter_prefix)."""
    for sub_path, value in sub.items():
        responses.insert(path.join(sub_path), value)


def write_one_of(responses: Responses, path: ResponsePath, index: int, data: Optional[Responses] = None) -> None:
    responses.insert(path.child(SELECTED_VARIANT_KEY), ResponseValue.chosen_variant(index))
    if data is not None:
        embed(responses, one_of_namespace(path), data)


def write_any_of(responses: Responses, path: ResponsePath, items: List[Tuple[int, Optional[Responses]]]) -> None:
    """
    Write an AnyOf selection.

    Args:
        items: (variant index, data store or None) per selected variant.
               Selecting the same variant twice is a contract violation:
               both entries would share one namespace.
    """
    indices = [index for index, _ in items]
    if len(set(indices)) != len(indices):
        raise ValueError(f"Variant selected more than once at '{path}': {indices}")
    responses.insert(path.child(SELECTED_VARIANTS_KEY), ResponseValue.chosen_variants(indices))
    for index, data in items:
        if data is not None:
            embed(responses, any_of_namespace(path, index), data)
