"""Default overlay for a question: none, suggested, or assumed."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from elicit.values import ResponseValue


class DefaultKind(Enum):
    NONE = "none"
    SUGGESTED = "suggested"  # pre-filled, the user may change it
    ASSUMED = "assumed"      # fixed, the question is not asked at all


@dataclass(frozen=True)
class DefaultValue:
    """
    A question's effective default.

    Properties:
        kind: DefaultKind
        value: The ResponseValue for SUGGESTED/ASSUMED, None for NONE

    An ASSUMED question is removed from the tree a collection surface
    walks, and its value is inserted directly into the response store.
    """

    kind: DefaultKind = DefaultKind.NONE
    value: Optional[ResponseValue] = None

    def __post_init__(self):
        if self.kind is DefaultKind.NONE and self.value is not None:
            raise ValueError("DefaultKind.NONE cannot carry a value")
        if self.kind is not DefaultKind.NONE and self.value is None:
            raise ValueError(f"DefaultKind.{self.kind.name} requires a value")

    @classmethod
    def none(cls) -> "DefaultValue":
        return cls()

    @classmethod
    def suggested(cls, value) -> "DefaultValue":
        return cls(DefaultKind.SUGGESTED, ResponseValue.of(value))

    @classmethod
    def assumed(cls, value) -> "DefaultValue":
        return cls(DefaultKind.ASSUMED, ResponseValue.of(value))

    def is_none(self) -> bool:
        return self.kind is DefaultKind.NONE

    def is_suggested(self) -> bool:
        return self.kind is DefaultKind.SUGGESTED

    def is_assumed(self) -> bool:
        return self.kind is DefaultKind.ASSUMED
