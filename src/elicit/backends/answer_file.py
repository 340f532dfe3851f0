"""
Answer-file collection surface.

Answers a survey from a YAML or JSON document laid out as nested mappings,
one level per path segment:

    name: Alice
    address:
      street: 1 Main St
    payment:
      selected_variant: 1
      number: "4111"
    features:
      selected_variants: [0, 1]
      "1":
        email: true

The walk, coercion and validation are those of ScriptedBackend; a file
has exactly one attempt per path.
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from elicit.backends.scripted import ScriptedBackend
from elicit.definition import SurveyDefinition
from elicit.errors import BackendError
from elicit.responses import Responses
from elicit.serialization import flatten_answers
from elicit.validation import CompositeValidator, FieldValidator

logger = logging.getLogger(__name__)


class AnswerFileBackend(ScriptedBackend):
    """Collection surface reading answers from a file or an in-memory mapping."""

    def __init__(self, source: Union[str, Path, Mapping[str, Any]], max_attempts: Optional[int] = None):
        super().__init__(max_attempts=max_attempts)
        self.source = source

    def _load(self) -> Mapping[Any, Any]:
        if isinstance(self.source, Mapping):
            return self.source
        path = Path(self.source)
        try:
            text = path.read_text(encoding="utf-8")
            # JSON is a subset of YAML, so one loader reads both.
            data = yaml.safe_load(text)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise BackendError(f"Cannot read answers from {path}: {e}", cause=e) from e
        if data is None:
            return {}
        if not isinstance(data, Mapping):
            raise BackendError(f"Answer file {path} must contain a mapping, got {type(data).__name__}")
        return data

    def collect(
        self,
        definition: SurveyDefinition,
        validate: FieldValidator,
        validate_all: Optional[CompositeValidator] = None,
    ) -> Responses:
        loaded = flatten_answers(dict(self._load()))
        logger.debug("Loaded %d answer(s)", len(loaded))
        # Answers scripted on the backend apply unless the file gives the path.
        answers = dict(self._answers)
        answers.update((path, [value]) for path, value in loaded.items())
        return self.collect_from(answers, definition, validate, validate_all)
