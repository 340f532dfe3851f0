"""Collection surfaces for elicit surveys (scripted answers, answer files)."""

from .answer_file import AnswerFileBackend
from .base import SurveyBackend
from .scripted import ScriptedBackend

__all__ = ["AnswerFileBackend", "ScriptedBackend", "SurveyBackend"]
