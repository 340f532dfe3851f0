"""
Response Store

Collected answers for one survey run, keyed by ResponsePath.

The store is flat: a nested field like address.street is stored under
ResponsePath.of("address", "street"), not inside a nested mapping.
filter_prefix() carves out a nested schema's own sub-namespace so that
its reconstruction logic sees root-level paths.

ARCHITECTURAL RULE:
    Validators and reconstruction logic read the store ONLY through the
    typed accessors (get_text, get_int, ...). A missing path or a tag
    mismatch is a contract violation and raises; it is never a
    user-facing condition.
"""

from typing import Any, Dict, Iterator, Optional, Tuple

from elicit.errors import MissingResponseError, ReadOnlyResponsesError, ResponseTypeError
from elicit.path import ResponsePath
from elicit.values import ResponseValue, ValueKind


class Responses:
    """
    Mapping of ResponsePath -> ResponseValue.

    Inserting the same path twice overwrites. Absence is distinct from
    presence with empty text (see has_value()).
    """

    def __init__(self, values: Optional[Dict[ResponsePath, Any]] = None):
        self._values: Dict[ResponsePath, ResponseValue] = {}
        self._read_only = False
        for path, value in (values or {}).items():
            self.insert(path, value)

    # === Mutation ===

    def insert(self, path: ResponsePath, value: Any) -> None:
        """Insert (or overwrite) a value. Plain Python values are coerced."""
        self._check_writable()
        if not isinstance(path, ResponsePath):
            raise TypeError(f"Response keys must be ResponsePath, got {type(path).__name__}")
        self._values[path] = ResponseValue.of(value)

    def remove(self, path: ResponsePath) -> Optional[ResponseValue]:
        self._check_writable()
        return self._values.pop(path, None)

    def extend(self, other: "Responses") -> None:
        """Merge another store into this one; entries in `other` win."""
        self._check_writable()
        self._values.update(other._values)

    def _check_writable(self) -> None:
        if self._read_only:
            raise ReadOnlyResponsesError("This response store is read-only")

    # === Plain access ===

    def get(self, path: ResponsePath) -> Optional[ResponseValue]:
        return self._values.get(path)

    def contains(self, path: ResponsePath) -> bool:
        return path in self._values

    def has_value(self, path: ResponsePath) -> bool:
        """
        True if a response exists and is not empty text.

        Used for optional fields: a skipped optional text field is either
        missing or stored as "".
        """
        value = self._values.get(path)
        if value is None:
            return False
        if value.kind is ValueKind.TEXT:
            return value.payload != ""
        return True

    def items(self) -> Iterator[Tuple[ResponsePath, ResponseValue]]:
        return iter(self._values.items())

    def paths(self) -> Iterator[ResponsePath]:
        return iter(self._values.keys())

    def __contains__(self, path: object) -> bool:
        return path in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[ResponsePath]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Responses):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        inner = ", ".join(f"{p}={v.payload!r}" for p, v in sorted(self._values.items(), key=lambda kv: kv[0].parts))
        return f"Responses({inner})"

    # === Derived stores ===

    def copy(self) -> "Responses":
        clone = Responses()
        clone._values = dict(self._values)
        return clone

    def read_only(self) -> "Responses":
        """A snapshot that raises ReadOnlyResponsesError on any write."""
        snapshot = self.copy()
        snapshot._read_only = True
        return snapshot

    def filter_prefix(self, prefix: ResponsePath) -> "Responses":
        """
        Keep only entries under `prefix`, with the prefix removed from each key.

        Example:
            address.street -> "1 Main St"
            address.city   -> "Springfield"
            name           -> "Alice"

            filter_prefix(ResponsePath.root("address")) gives
            street -> "1 Main St", city -> "Springfield"
        """
        filtered = Responses()
        for path, value in self._values.items():
            stripped = path.strip_path_prefix(prefix)
            if stripped is not None:
                filtered._values[stripped] = value
        return filtered

    # === Typed accessors ===

    def _typed(self, path: ResponsePath, kind: ValueKind) -> Any:
        value = self._values.get(path)
        if value is None:
            raise MissingResponseError(path)
        if value.kind is not kind:
            raise ResponseTypeError(path, expected=kind.value, actual=value.kind.value)
        return value.payload

    def get_text(self, path: ResponsePath) -> str:
        return self._typed(path, ValueKind.TEXT)

    def get_int(self, path: ResponsePath) -> int:
        return self._typed(path, ValueKind.INT)

    def get_float(self, path: ResponsePath) -> float:
        return self._typed(path, ValueKind.FLOAT)

    def get_bool(self, path: ResponsePath) -> bool:
        return self._typed(path, ValueKind.BOOL)

    def get_chosen_variant(self, path: ResponsePath) -> int:
        return self._typed(path, ValueKind.CHOSEN_VARIANT)

    def get_chosen_variants(self, path: ResponsePath) -> Tuple[int, ...]:
        return self._typed(path, ValueKind.CHOSEN_VARIANTS)

    def get_text_list(self, path: ResponsePath) -> Tuple[str, ...]:
        return self._typed(path, ValueKind.TEXT_LIST)

    def get_int_list(self, path: ResponsePath) -> Tuple[int, ...]:
        return self._typed(path, ValueKind.INT_LIST)

    def get_float_list(self, path: ResponsePath) -> Tuple[float, ...]:
        return self._typed(path, ValueKind.FLOAT_LIST)
