"""
Validation Dispatch

Two validator shapes, used identically by every collection surface:

    FieldValidator      (path, responses) -> None | message
                        Judges the value at `path`. Receives the full store
                        so it may compare against sibling fields.

    CompositeValidator  (responses) -> {path: message}
                        Judges the whole survey; may flag zero, one or many
                        paths at once.

DISPATCH POLICY:
    Field validators run first, composite validators afterwards. Results
    land in one error map and a later error for a path replaces an
    earlier one (last write wins).

Validators read, never write: they are always handed a read-only snapshot.
The core does not retry. Retry loops belong to collection surfaces.
"""

import logging
from typing import Callable, Dict, Iterable, Optional

from elicit.path import ResponsePath
from elicit.question import FloatQuestion, IntQuestion, ListQuestion, QuestionKind
from elicit.responses import Responses
from elicit.values import ResponseValue

logger = logging.getLogger(__name__)

FieldValidator = Callable[[ResponsePath, Responses], Optional[str]]
CompositeValidator = Callable[[Responses], Dict[ResponsePath, str]]


def accept_all(path: ResponsePath, responses: Responses) -> Optional[str]:
    """Field validator that never fails."""
    return None


def chain_field_validators(*validators: FieldValidator) -> FieldValidator:
    """Combine field validators; the first failure wins."""

    def chained(path: ResponsePath, responses: Responses) -> Optional[str]:
        for validator in validators:
            message = validator(path, responses)
            if message is not None:
                return message
        return None

    return chained


def check_bounds(kind: QuestionKind, value: ResponseValue) -> Optional[str]:
    """
    Check numeric bounds and list lengths declared on a question kind.

    Returns:
        An error message, or None when the value is within bounds or the
        kind declares no bounds.
    """
    if isinstance(kind, (IntQuestion, FloatQuestion)):
        if not kind.accepts(value):
            return None
        if kind.min is not None and value.payload < kind.min:
            return f"Value must be at least {kind.min}"
        if kind.max is not None and value.payload > kind.max:
            return f"Value must be at most {kind.max}"
        return None

    if isinstance(kind, ListQuestion):
        if not kind.accepts(value):
            return None
        items = value.payload
        if kind.min_items is not None and len(items) < kind.min_items:
            return f"Enter at least {kind.min_items} item(s)"
        if kind.max_items is not None and len(items) > kind.max_items:
            return f"Enter at most {kind.max_items} item(s)"
        for item in items:
            if isinstance(item, str):
                continue
            if kind.min is not None and item < kind.min:
                return f"Each value must be at least {kind.min}"
            if kind.max is not None and item > kind.max:
                return f"Each value must be at most {kind.max}"
    return None


def dispatch_validation(
    paths: Iterable[ResponsePath],
    responses: Responses,
    field_validator: Optional[FieldValidator] = None,
    composite_validators: Iterable[CompositeValidator] = (),
) -> Dict[ResponsePath, str]:
    """
    Run one validation pass over a store.

    Args:
        paths: Paths to run the field validator on (typically every
               answered leaf path, or just the one being edited)
        responses: The full store; validators see a read-only snapshot
        field_validator: Per-path validator
        composite_validators: Whole-survey validators, run after fields

    Returns:
        Mapping of path -> message. Empty when everything is valid.
    """
    snapshot = responses.read_only()
    errors: Dict[ResponsePath, str] = {}

    if field_validator is not None:
        for path in paths:
            message = field_validator(path, snapshot)
            if message is not None:
                errors[path] = message

    for composite in composite_validators:
        for path, message in composite(snapshot).items():
            if path in errors:
                logger.debug("Composite error replaces field error at %s", path)
            errors[path] = message

    return errors
