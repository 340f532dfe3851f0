"""
Response Path Addressing

A ResponsePath names the location of one response inside a (possibly
nested) survey as an ordered sequence of string segments.

Examples:
    name                           -> ("name",)
    address.street                 -> ("address", "street")
    payment.selected_variant       -> ("payment", "selected_variant")
    features.1.email               -> ("features", "1", "email")

ARCHITECTURAL RULE:
    Paths are compared structurally, segment by segment.
    The dotted form produced by display() is for diagnostics only.
    It is NEVER parsed back into a path.

Reserved segments:
    The selection of a OneOf question lives under SELECTED_VARIANT_KEY,
    the selections of an AnyOf question under SELECTED_VARIANTS_KEY, and
    single positional variant data under POSITIONAL_KEY. These are a
    naming convention on top of ordinary segments, not a separate type.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple


SELECTED_VARIANT_KEY = "selected_variant"
SELECTED_VARIANTS_KEY = "selected_variants"
POSITIONAL_KEY = "0"

RESERVED_SEGMENTS = frozenset({SELECTED_VARIANT_KEY, SELECTED_VARIANTS_KEY})


def _check_segment(name: str) -> str:
    if not isinstance(name, str):
        raise TypeError(f"Path segments must be strings, got {type(name).__name__}")
    if name == "":
        raise ValueError("Path segments must not be empty")
    return name


@dataclass(frozen=True)
class ResponsePath:
    """
    Immutable, hashable address of a single response.

    Properties:
        parts: The ordered segments. The empty tuple is the root path,
               used when a whole schema answers at the store root
               (e.g. a top-level enum storing "selected_variant").

    IMPORTANT:
        child() and join() return NEW paths. Nothing mutates in place,
        so a path can be shared freely between questions and stores.
    """

    parts: Tuple[str, ...] = ()

    def __post_init__(self):
        # Accept any iterable of segments but always store a tuple.
        parts = tuple(self.parts)
        for segment in parts:
            _check_segment(segment)
        object.__setattr__(self, "parts", parts)

    @classmethod
    def root(cls, name: str) -> "ResponsePath":
        """Create a single-segment path."""
        return cls((_check_segment(name),))

    @classmethod
    def empty(cls) -> "ResponsePath":
        return cls(())

    @classmethod
    def of(cls, *segments: str) -> "ResponsePath":
        """Create a path from explicit segments, e.g. ResponsePath.of("a", "b")."""
        return cls(segments)

    def child(self, name: str) -> "ResponsePath":
        return ResponsePath(self.parts + (_check_segment(name),))

    def join(self, other: "ResponsePath") -> "ResponsePath":
        """Append every segment of another path."""
        return ResponsePath(self.parts + other.parts)

    @property
    def segments(self) -> Tuple[str, ...]:
        return self.parts

    @property
    def first(self) -> Optional[str]:
        return self.parts[0] if self.parts else None

    @property
    def last(self) -> Optional[str]:
        return self.parts[-1] if self.parts else None

    def parent(self) -> "ResponsePath":
        """Drop the last segment. The parent of a root path is the empty path."""
        return ResponsePath(self.parts[:-1])

    def is_empty(self) -> bool:
        return not self.parts

    def startswith(self, prefix: "ResponsePath") -> bool:
        return self.parts[: len(prefix.parts)] == prefix.parts

    def strip_prefix(self, name: str) -> Optional["ResponsePath"]:
        """
        Remove the leading segment if and only if it equals `name`.

        Returns:
            The remaining path, or None when the first segment differs.
        """
        if self.parts and self.parts[0] == name:
            return ResponsePath(self.parts[1:])
        return None

    def strip_path_prefix(self, prefix: "ResponsePath") -> Optional["ResponsePath"]:
        """Remove a multi-segment prefix, or return None if it does not match."""
        if not self.startswith(prefix):
            return None
        return ResponsePath(self.parts[len(prefix.parts):])

    def display(self) -> str:
        return ".".join(self.parts)

    def __str__(self) -> str:
        return self.display()

    def __len__(self) -> int:
        return len(self.parts)

    def __iter__(self) -> Iterator[str]:
        return iter(self.parts)
