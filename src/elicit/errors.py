"""
Exception taxonomy for elicit.

Exception families:

    SurveyError     Run-level conditions surfaced to the caller of a
                    collection (the user cancelled, the backend failed).
                    Applications are expected to handle these.

    ResponseError   Contract violations when reading the response store
    OverrideError   or registering overrides. These indicate a bug in a
                    schema or surface, not a user-facing condition.

Validation failures are NOT exceptions. They are path-keyed messages that
stay inside a collection surface's retry loop.
"""

from typing import Iterable, Optional


class ElicitError(Exception):
    """Base class for every exception raised by elicit."""
    pass


class SurveyError(ElicitError):
    """A survey run ended without producing a complete response store."""
    pass


class SurveyCancelled(SurveyError):
    """The run ended before every question was answered."""

    def __init__(self, message: str = "Survey cancelled"):
        super().__init__(message)


class BackendError(SurveyError):
    """
    An I/O or presentation fault unrelated to input validity.

    The underlying exception is kept on `cause` and should also be chained
    with `raise BackendError(...) from exc`.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ResponseError(ElicitError):
    """Store access that violates the reconstruction contract."""
    pass


class MissingResponseError(ResponseError, KeyError):
    """A path was read that was never inserted."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Missing response for path: {path}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return self.args[0]


class ResponseTypeError(ResponseError, TypeError):
    """A typed accessor was used against a value with a different tag."""

    def __init__(self, path, expected: str, actual: str):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(f"Type mismatch at path '{path}': expected {expected}, got {actual}")


class ReadOnlyResponsesError(ResponseError):
    """A write was attempted on a read-only store snapshot (e.g. from a validator)."""
    pass


class OverrideError(ElicitError, ValueError):
    """A suggestion or assumption that cannot be applied to the question tree."""
    pass


class InvalidOverrideError(OverrideError):
    """The override value does not fit the kind of the targeted question."""
    pass


class UnmatchedOverrideError(OverrideError):
    """Strict mode: overrides were registered for paths no question answers."""

    def __init__(self, paths: Iterable):
        self.paths = list(paths)
        listed = ", ".join(str(p) for p in self.paths)
        super().__init__(f"Overrides matched no question: {listed}")


class ConfigError(ElicitError):
    """Invalid configuration values."""
    pass
