"""
Survey Analyzer: diagnostics and inventory of question trees.

This module provides lightweight analysis of SurveyDefinition objects:
    - Question inventory by kind
    - Nesting depth
    - Duplicate paths within a sibling group
    - Fields that collide with reserved path segments
    - Inconsistent defaults and bounds

IMPORTANT: It does NOT modify the definition. It only produces read-only
reports. Hand-written schemas are expected to run it in their tests.

RESERVED SEGMENTS:
    A field literally named "selected_variant" or "selected_variants" can
    collide with a choice question's selection entry. Whether such a name
    is ever safe depends on where the field sits, so the analyzer FLAGS
    every such field and leaves the decision to the schema author.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Set

from elicit.definition import SurveyDefinition, any_of_namespace, variant_questions
from elicit.path import RESERVED_SEGMENTS, ResponsePath
from elicit.question import (
    AllOfQuestion,
    AnyOfQuestion,
    FloatQuestion,
    IntQuestion,
    ListQuestion,
    OneOfQuestion,
    Question,
)


@dataclass
class DefinitionReport:
    """Analysis report for a survey definition."""

    total_questions: int = 0
    kind_counts: Dict[str, int] = field(default_factory=dict)
    max_depth: int = 0
    variant_count: int = 0

    duplicate_paths: Set[ResponsePath] = field(default_factory=set)
    reserved_collisions: Set[ResponsePath] = field(default_factory=set)
    duplicate_variant_names: Dict[ResponsePath, List[str]] = field(default_factory=dict)
    empty_choices: Set[ResponsePath] = field(default_factory=set)
    assumed_questions: Set[ResponsePath] = field(default_factory=set)
    invalid_defaults: Set[ResponsePath] = field(default_factory=set)
    inverted_bounds: Set[ResponsePath] = field(default_factory=set)

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)

    @property
    def ok(self) -> bool:
        return not self.warnings


def _names(paths) -> str:
    return ", ".join(sorted(str(p) for p in paths))


def analyze_definition(definition: SurveyDefinition) -> DefinitionReport:
    """
    Analyze a question tree, including every variant's sub-tree.

    Returns a DefinitionReport with counts and warnings.
    """
    report = DefinitionReport()
    kinds: Counter = Counter()
    _visit(definition.questions, ResponsePath(), 1, report, kinds)
    report.kind_counts = dict(kinds)

    if report.duplicate_paths:
        report.add_warning(f"Duplicate paths within a group: {_names(report.duplicate_paths)}")
    if report.reserved_collisions:
        report.add_warning(
            f"Fields named like reserved segments (ambiguous with variant selections): "
            f"{_names(report.reserved_collisions)}"
        )
    for path, names in sorted(report.duplicate_variant_names.items(), key=lambda kv: kv[0].parts):
        report.add_warning(f"Duplicate variant names at {path}: {', '.join(names)}")
    if report.empty_choices:
        report.add_warning(f"Choice questions without variants: {_names(report.empty_choices)}")
    if report.assumed_questions:
        report.add_warning(f"Assumed questions still in the tree: {_names(report.assumed_questions)}")
    if report.invalid_defaults:
        report.add_warning(f"Default selections out of range: {_names(report.invalid_defaults)}")
    if report.inverted_bounds:
        report.add_warning(f"Minimum greater than maximum: {_names(report.inverted_bounds)}")

    return report


def _visit(
    questions: List[Question], prefix: ResponsePath, depth: int, report: DefinitionReport, kinds: Counter
) -> None:
    if questions:
        report.max_depth = max(report.max_depth, depth)

    seen = Counter(q.path for q in questions)
    for path, count in seen.items():
        if count > 1:
            report.duplicate_paths.add(prefix.join(path))

    for question in questions:
        path = prefix.join(question.path)
        kind = question.kind
        report.total_questions += 1
        kinds[type(kind).__name__] += 1

        if question.path.last in RESERVED_SEGMENTS:
            report.reserved_collisions.add(path)
        if question.is_assumed():
            report.assumed_questions.add(path)

        if isinstance(kind, (IntQuestion, FloatQuestion, ListQuestion)):
            if kind.min is not None and kind.max is not None and kind.min > kind.max:
                report.inverted_bounds.add(path)
        if isinstance(kind, ListQuestion):
            if kind.min_items is not None and kind.max_items is not None and kind.min_items > kind.max_items:
                report.inverted_bounds.add(path)

        if isinstance(kind, AllOfQuestion):
            _visit(kind.questions, path, depth + 1, report, kinds)

        elif isinstance(kind, (OneOfQuestion, AnyOfQuestion)):
            report.variant_count += len(kind.variants)
            if not kind.variants:
                report.empty_choices.add(path)

            names = Counter(v.name for v in kind.variants)
            duplicated = sorted(n for n, c in names.items() if c > 1)
            if duplicated:
                report.duplicate_variant_names[path] = duplicated

            if isinstance(kind, OneOfQuestion):
                if kind.default is not None and not 0 <= kind.default < len(kind.variants):
                    report.invalid_defaults.add(path)
                for variant in kind.variants:
                    _visit(variant_questions(variant), path, depth + 1, report, kinds)
            else:
                if any(not 0 <= i < len(kind.variants) for i in kind.defaults):
                    report.invalid_defaults.add(path)
                for index, variant in enumerate(kind.variants):
                    _visit(variant_questions(variant), any_of_namespace(path, index), depth + 1, report, kinds)
