"""
Collection surface interface.

A backend receives a (possibly assumption-pruned) SurveyDefinition and
returns a Responses store answering every remaining question. How it
presents the questions (wizard, form, scripted answers) is its own
business; so is its retry loop on validation failures.

ARCHITECTURAL RULE:
    collect() returns only when every remaining question has a valid
    answer. Otherwise it raises SurveyCancelled or BackendError.
    Validation messages never escape collect().
"""

from abc import ABC, abstractmethod
from typing import Optional

from elicit.definition import SurveyDefinition
from elicit.responses import Responses
from elicit.validation import CompositeValidator, FieldValidator


class SurveyBackend(ABC):
    """Base class for collection surfaces."""

    @abstractmethod
    def collect(
        self,
        definition: SurveyDefinition,
        validate: FieldValidator,
        validate_all: Optional[CompositeValidator] = None,
    ) -> Responses:
        """
        Collect responses for a survey.

        Args:
            definition: The question tree to walk
            validate: Field validator, called with the path being answered
                      and the store as collected so far
            validate_all: Optional composite validator. Form-style surfaces
                          run it on every change, wizard-style surfaces once
                          at submission.

        Returns:
            A store answering every question in `definition`

        Raises:
            SurveyCancelled: the run ended early
            BackendError: an I/O or presentation fault
        """
