"""
Response Values

A ResponseValue is one collected answer: a tagged scalar or selection.

The tag (ValueKind) decides which accessor succeeds. Accessors on the
value itself return None on a tag mismatch; the store accessors in
`elicit.responses` raise instead.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Tuple, Union


class ValueKind(Enum):
    """
    Tags for collected answers.

    Keep this aligned with the leaf question kinds:
        TEXT            Input, Multiline, Masked
        INT / FLOAT     Int, Float
        BOOL            Confirm
        CHOSEN_VARIANT  OneOf selection (index)
        CHOSEN_VARIANTS AnyOf selection (set of indices)
        *_LIST          List questions
    """

    TEXT = "text"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    CHOSEN_VARIANT = "chosen_variant"
    CHOSEN_VARIANTS = "chosen_variants"
    TEXT_LIST = "text_list"
    INT_LIST = "int_list"
    FLOAT_LIST = "float_list"


Payload = Union[str, int, float, bool, Tuple[Any, ...]]


def _index(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Variant indices must be integers, got {value!r}")
    if value < 0:
        raise ValueError(f"Variant indices must be non-negative, got {value}")
    return value


@dataclass(frozen=True)
class ResponseValue:
    """
    One collected answer.

    Properties:
        kind: ValueKind tag
        payload: The Python value. CHOSEN_VARIANTS holds a sorted tuple of
                 unique indices (it is a set); list kinds hold tuples in
                 the order given.

    Build values with the named constructors (ResponseValue.text(...),
    ResponseValue.chosen_variant(...)) or coerce plain Python values with
    ResponseValue.of(...).
    """

    kind: ValueKind
    payload: Payload

    @classmethod
    def text(cls, value: str) -> "ResponseValue":
        return cls(ValueKind.TEXT, str(value))

    @classmethod
    def integer(cls, value: int) -> "ResponseValue":
        if isinstance(value, bool):
            raise TypeError("Use ResponseValue.boolean() for bool values")
        return cls(ValueKind.INT, int(value))

    @classmethod
    def float_(cls, value: float) -> "ResponseValue":
        return cls(ValueKind.FLOAT, float(value))

    @classmethod
    def boolean(cls, value: bool) -> "ResponseValue":
        return cls(ValueKind.BOOL, bool(value))

    @classmethod
    def chosen_variant(cls, index: int) -> "ResponseValue":
        return cls(ValueKind.CHOSEN_VARIANT, _index(index))

    @classmethod
    def chosen_variants(cls, indices: Iterable[int]) -> "ResponseValue":
        return cls(ValueKind.CHOSEN_VARIANTS, tuple(sorted({_index(i) for i in indices})))

    @classmethod
    def text_list(cls, items: Iterable[str]) -> "ResponseValue":
        return cls(ValueKind.TEXT_LIST, tuple(str(i) for i in items))

    @classmethod
    def int_list(cls, items: Iterable[int]) -> "ResponseValue":
        return cls(ValueKind.INT_LIST, tuple(int(i) for i in items))

    @classmethod
    def float_list(cls, items: Iterable[float]) -> "ResponseValue":
        return cls(ValueKind.FLOAT_LIST, tuple(float(i) for i in items))

    @classmethod
    def of(cls, value: Any) -> "ResponseValue":
        """
        Coerce a plain Python value.

        bool is checked before int (bool is an int subclass). Lists and
        tuples become list values by element type. Variant selections are
        never inferred: use chosen_variant()/chosen_variants().

        Raises:
            TypeError: for values with no unambiguous tag
        """
        if isinstance(value, ResponseValue):
            return value
        if isinstance(value, bool):
            return cls.boolean(value)
        if isinstance(value, int):
            return cls.integer(value)
        if isinstance(value, float):
            return cls.float_(value)
        if isinstance(value, str):
            return cls.text(value)
        if isinstance(value, (list, tuple)):
            items = list(value)
            if all(isinstance(i, str) for i in items):
                return cls.text_list(items)
            if all(isinstance(i, int) and not isinstance(i, bool) for i in items):
                return cls.int_list(items)
            if all(isinstance(i, (int, float)) and not isinstance(i, bool) for i in items):
                return cls.float_list(items)
        raise TypeError(f"Cannot convert {type(value).__name__} to a ResponseValue")

    @property
    def type_name(self) -> str:
        return self.kind.value

    def as_text(self) -> Optional[str]:
        return self.payload if self.kind is ValueKind.TEXT else None

    def as_int(self) -> Optional[int]:
        return self.payload if self.kind is ValueKind.INT else None

    def as_float(self) -> Optional[float]:
        return self.payload if self.kind is ValueKind.FLOAT else None

    def as_bool(self) -> Optional[bool]:
        return self.payload if self.kind is ValueKind.BOOL else None

    def as_chosen_variant(self) -> Optional[int]:
        return self.payload if self.kind is ValueKind.CHOSEN_VARIANT else None

    def as_chosen_variants(self) -> Optional[Tuple[int, ...]]:
        return self.payload if self.kind is ValueKind.CHOSEN_VARIANTS else None

    def to_python(self) -> Any:
        """Plain Python form (lists for tuple payloads), used by serialization."""
        if isinstance(self.payload, tuple):
            return list(self.payload)
        return self.payload
