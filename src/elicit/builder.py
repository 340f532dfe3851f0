"""
Survey builder: the application-facing entry point.

    profile = (
        UserProfile.builder()
        .suggest(ResponsePath.root("name"), "Alice")
        .assume(ResponsePath.root("age"), 30)
        .run(ScriptedBackend(...))
    )

run() produces a fresh tree, merges the registered overrides into it,
hands the pruned tree to the backend, and rebuilds the instance from the
assumed values plus the collected answers.
"""

import logging
from typing import Any, Dict, Optional, Type

from elicit.backends.base import SurveyBackend
from elicit.config import Settings, load_settings
from elicit.errors import BackendError, ElicitError, UnmatchedOverrideError
from elicit.merge import MergeResult, apply_overrides
from elicit.path import ResponsePath
from elicit.responses import Responses
from elicit.survey import Survey

logger = logging.getLogger(__name__)


class SurveyBuilder:
    """
    Collects suggestions and assumptions for one schema and runs it.

    Properties:
        schema: The Survey subclass to collect
        settings: Settings (strict_overrides decides whether an assumption
                  that matches no question is an error)
    """

    def __init__(self, schema: Type[Survey], settings: Optional[Settings] = None):
        self.schema = schema
        self.settings = settings if settings is not None else load_settings()
        # Raw values; the merge coerces each against the question it lands on.
        self.suggestions: Dict[ResponsePath, Any] = {}
        self.assumptions: Dict[ResponsePath, Any] = {}

    def suggest(self, path: ResponsePath, value: Any) -> "SurveyBuilder":
        """Pre-fill a question; the user may change it."""
        self.suggestions[path] = value
        return self

    def assume(self, path: ResponsePath, value: Any) -> "SurveyBuilder":
        """Fix a value; the question is not asked."""
        self.assumptions[path] = value
        return self

    def with_suggestions(self, instance: Survey) -> "SurveyBuilder":
        """Suggest every value of an existing instance."""
        for path, value in instance.to_responses().items():
            self.suggestions[path] = value
        return self

    def with_assumptions(self, instance: Survey) -> "SurveyBuilder":
        """Assume every value of an existing instance."""
        for path, value in instance.to_responses().items():
            self.assumptions[path] = value
        return self

    def prepare(self) -> MergeResult:
        """Merge the overrides into a fresh tree, without collecting anything."""
        result = apply_overrides(self.schema.survey(), self.suggestions, self.assumptions)
        if result.unmatched_assumptions and self.settings.strict_overrides:
            raise UnmatchedOverrideError(result.unmatched_assumptions)
        return result

    def run(self, backend: SurveyBackend) -> Survey:
        """
        Collect and rebuild an instance.

        Raises:
            SurveyCancelled: the backend ended the run early
            BackendError: the backend failed; unexpected backend exceptions
                          are wrapped and chained
        """
        merged = self.prepare()
        assumed = merged.responses
        schema = self.schema

        def context(collected: Responses) -> Responses:
            combined = collected.copy()
            combined.extend(assumed)
            return combined.read_only()

        def validate(path: ResponsePath, collected: Responses) -> Optional[str]:
            return schema.validate_field(path, context(collected))

        def validate_all(collected: Responses) -> Dict[ResponsePath, str]:
            return schema.validate_all(context(collected))

        logger.debug("Collecting %s with %s", schema.__name__, type(backend).__name__)
        try:
            collected = backend.collect(merged.definition, validate, validate_all)
        except ElicitError:
            raise
        except Exception as e:
            raise BackendError(f"{type(backend).__name__} failed: {e}", cause=e) from e

        final = collected.copy()
        final.extend(assumed)
        return schema.from_responses(final)
