"""
Question Tree

Defines what a survey asks.

A Question pairs a path, a prompt and a QuestionKind. Kinds are either
leaves (one scalar answer) or structural combinators:

    AllOfQuestion   answer every child question (nested structs)
    OneOfQuestion   pick exactly one named variant, then answer its data
    AnyOfQuestion   pick any number of variants, then answer each one's data

ARCHITECTURAL RULE:
    The tree is owned outright: every child list belongs to its parent
    node, there is no sharing and there are no cycles. A tree is produced
    fresh for each survey run and may be mutated freely by its owner.

Question paths are RELATIVE to the enclosing AllOf group. A question at
path "street" inside a group at "address" answers at "address.street".
"""

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from elicit.defaults import DefaultValue
from elicit.path import ResponsePath
from elicit.values import ResponseValue, ValueKind


class QuestionKind(ABC):
    """
    Base class for every question kind.

    value_kind is the ValueKind a collected answer carries, or None for
    kinds that do not store a value of their own (Unit, AllOf).
    """

    value_kind: Optional[ValueKind] = None

    def accepts(self, value: ResponseValue) -> bool:
        """True if `value` is a well-formed answer for this kind."""
        return self.value_kind is not None and value.kind is self.value_kind

    @property
    def is_unit(self) -> bool:
        return False

    @property
    def is_structural(self) -> bool:
        return False

    @property
    def is_basic(self) -> bool:
        return not (self.is_unit or self.is_structural)


@dataclass
class UnitQuestion(QuestionKind):
    """No data to collect (unit variants, unit structs)."""

    @property
    def is_unit(self) -> bool:
        return True


@dataclass
class InputQuestion(QuestionKind):
    """Single-line text input."""

    default: Optional[str] = None
    value_kind = ValueKind.TEXT


@dataclass
class MultilineQuestion(QuestionKind):
    """Multi-line text (an editor or a textarea)."""

    default: Optional[str] = None
    value_kind = ValueKind.TEXT


@dataclass
class MaskedQuestion(QuestionKind):
    """Masked text input, e.g. passwords. Surfaces must not echo it."""

    value_kind = ValueKind.TEXT


@dataclass
class IntQuestion(QuestionKind):
    """Integer input with optional inclusive bounds."""

    min: Optional[int] = None
    max: Optional[int] = None
    default: Optional[int] = None
    value_kind = ValueKind.INT


@dataclass
class FloatQuestion(QuestionKind):
    """Floating-point input with optional inclusive bounds."""

    min: Optional[float] = None
    max: Optional[float] = None
    default: Optional[float] = None
    value_kind = ValueKind.FLOAT


@dataclass
class ConfirmQuestion(QuestionKind):
    """Yes/no confirmation."""

    default: bool = False
    value_kind = ValueKind.BOOL


class ListElementKind(Enum):
    TEXT = "text"
    INT = "int"
    FLOAT = "float"


_LIST_VALUE_KINDS = {
    ListElementKind.TEXT: ValueKind.TEXT_LIST,
    ListElementKind.INT: ValueKind.INT_LIST,
    ListElementKind.FLOAT: ValueKind.FLOAT_LIST,
}


@dataclass
class ListQuestion(QuestionKind):
    """
    A list of primitive values of one element kind.

    Properties:
        element_kind: ListElementKind
        min / max: Optional bounds applied to each numeric element
        min_items / max_items: Optional bounds on the number of elements
    """

    element_kind: ListElementKind = ListElementKind.TEXT
    min: Optional[float] = None
    max: Optional[float] = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None

    @property
    def value_kind(self) -> ValueKind:
        return _LIST_VALUE_KINDS[self.element_kind]


@dataclass
class Variant:
    """
    One named option inside a OneOf or AnyOf question.

    Properties:
        name: Display name (e.g. "Cash", "Credit card")
        kind: What the variant collects once chosen
              - UnitQuestion for options without data
              - AllOfQuestion for options with named fields
              - any leaf kind for a single positional value

    IMPORTANT:
        A variant's identity is its ORDINAL position in the enclosing list.
        Renaming is safe; reordering changes which stored index means what.
    """

    name: str
    kind: QuestionKind = field(default_factory=UnitQuestion)

    @classmethod
    def unit(cls, name: str) -> "Variant":
        return cls(name=name, kind=UnitQuestion())


@dataclass
class AllOfQuestion(QuestionKind):
    """A group of questions that are all answered."""

    questions: List["Question"] = field(default_factory=list)

    @property
    def is_structural(self) -> bool:
        return True

    def accepts(self, value: ResponseValue) -> bool:
        return False


@dataclass
class OneOfQuestion(QuestionKind):
    """
    Choose exactly one variant, then answer that variant's questions.

    The selection is stored as CHOSEN_VARIANT at path.selected_variant.
    """

    variants: List[Variant] = field(default_factory=list)
    default: Optional[int] = None
    value_kind = ValueKind.CHOSEN_VARIANT

    @property
    def is_structural(self) -> bool:
        return True

    def accepts(self, value: ResponseValue) -> bool:
        return value.kind is ValueKind.CHOSEN_VARIANT and value.payload < len(self.variants)


@dataclass
class AnyOfQuestion(QuestionKind):
    """
    Choose any number of variants, then answer each chosen variant's questions.

    The selection is stored as CHOSEN_VARIANTS at path.selected_variants and
    each selected variant's data lives under path.<ordinal>.
    """

    variants: List[Variant] = field(default_factory=list)
    defaults: List[int] = field(default_factory=list)
    value_kind = ValueKind.CHOSEN_VARIANTS

    @property
    def is_structural(self) -> bool:
        return True

    def accepts(self, value: ResponseValue) -> bool:
        return value.kind is ValueKind.CHOSEN_VARIANTS and all(
            i < len(self.variants) for i in value.payload
        )


@dataclass
class Question:
    """
    One thing to ask.

    Properties:
        path: Path relative to the enclosing group (usually one segment)
        ask: Prompt text shown to the user
        kind: QuestionKind (leaf or structural)
        default: DefaultValue overlay (none / suggested / assumed)
    """

    path: ResponsePath
    ask: str
    kind: QuestionKind
    default: DefaultValue = field(default_factory=DefaultValue)

    def set_suggestion(self, value) -> None:
        self.default = DefaultValue.suggested(value)

    def set_assumption(self, value) -> None:
        self.default = DefaultValue.assumed(value)

    def clear_default(self) -> None:
        self.default = DefaultValue()

    def is_assumed(self) -> bool:
        return self.default.is_assumed()


def _items_are(raw: Any, types) -> bool:
    if not isinstance(raw, (list, tuple)):
        return False
    return all(isinstance(i, types) and not isinstance(i, bool) for i in raw)


def coerce_answer(kind: QuestionKind, raw: Any) -> ResponseValue:
    """
    Convert a raw answer or override into the ResponseValue `kind` expects.

    The target kind decides the tag: [] is an INT_LIST for an int list
    question and 2 is a FLOAT for a float question. A ResponseValue the kind
    already accepts is kept; one tagged for another kind is read back as
    plain Python and converted again.

    Raises:
        ValueError: the value cannot be read as that kind (a surface
                    treats this like a failed validation and asks again)
    """
    if isinstance(raw, ResponseValue):
        if kind.accepts(raw):
            return raw
        raw = raw.to_python()

    target = kind.value_kind
    try:
        if target is ValueKind.TEXT and isinstance(raw, str):
            value = ResponseValue.text(raw)
        elif target is ValueKind.INT and isinstance(raw, int) and not isinstance(raw, bool):
            value = ResponseValue.integer(raw)
        elif target is ValueKind.FLOAT and isinstance(raw, (int, float)) and not isinstance(raw, bool):
            value = ResponseValue.float_(raw)
        elif target is ValueKind.BOOL and isinstance(raw, bool):
            value = ResponseValue.boolean(raw)
        elif target is ValueKind.CHOSEN_VARIANT:
            value = ResponseValue.chosen_variant(raw)
        elif target is ValueKind.CHOSEN_VARIANTS and isinstance(raw, (list, tuple, set, frozenset)):
            value = ResponseValue.chosen_variants(raw)
        elif target is ValueKind.TEXT_LIST and _items_are(raw, str):
            value = ResponseValue.text_list(raw)
        elif target is ValueKind.INT_LIST and _items_are(raw, int):
            value = ResponseValue.int_list(raw)
        elif target is ValueKind.FLOAT_LIST and _items_are(raw, (int, float)):
            value = ResponseValue.float_list(raw)
        else:
            value = None
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid answer {raw!r}: {e}") from e
    if value is None:
        raise ValueError(f"Expected a {target.value if target else 'no'} answer, got {raw!r}")

    if not kind.accepts(value):
        raise ValueError(f"{type(kind).__name__} does not accept {value.type_name} {value.payload!r}")
    return value
