"""
Serialization helpers for elicit objects (SurveyDefinition, Question, Responses).

Provides lossless JSON/YAML round-trip via intermediate dict representation.
Document generators and other read-only consumers of a question tree use
these dicts instead of importing the model classes.

Two store layouts are supported:
    - flat (lossless): a list of {"path": [...], "kind": ..., "value": ...}
    - nested (answers): segments become nested mapping keys, values are
      plain Python; used for hand-written answer files

Paths are always written as segment lists, never as dotted strings.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List

import yaml

from elicit.defaults import DefaultKind, DefaultValue
from elicit.definition import SurveyDefinition
from elicit.path import ResponsePath
from elicit.question import (
    AllOfQuestion,
    AnyOfQuestion,
    ConfirmQuestion,
    FloatQuestion,
    InputQuestion,
    IntQuestion,
    ListElementKind,
    ListQuestion,
    MaskedQuestion,
    MultilineQuestion,
    OneOfQuestion,
    Question,
    QuestionKind,
    UnitQuestion,
    Variant,
)
from elicit.responses import Responses
from elicit.values import ResponseValue, ValueKind


def value_to_dict(v: ResponseValue | None) -> Dict[str, Any] | None:
    if v is None:
        return None
    return {"kind": v.kind.value, "value": v.to_python()}


def value_from_dict(d: Dict[str, Any] | None) -> ResponseValue | None:
    if d is None:
        return None
    kind = ValueKind(d["kind"])
    raw = d["value"]
    if kind in (ValueKind.CHOSEN_VARIANTS, ValueKind.TEXT_LIST, ValueKind.INT_LIST, ValueKind.FLOAT_LIST):
        raw = tuple(raw)
    if kind is ValueKind.CHOSEN_VARIANTS:
        return ResponseValue.chosen_variants(raw)
    return ResponseValue(kind=kind, payload=raw)


def default_to_dict(d: DefaultValue) -> Dict[str, Any]:
    return {"kind": d.kind.value, "value": value_to_dict(d.value)}


def default_from_dict(d: Dict[str, Any] | None) -> DefaultValue:
    if d is None:
        return DefaultValue()
    return DefaultValue(kind=DefaultKind(d["kind"]), value=value_from_dict(d.get("value")))


def kind_to_dict(k: QuestionKind) -> Dict[str, Any]:
    if isinstance(k, UnitQuestion):
        return {"type": "unit"}
    if isinstance(k, InputQuestion):
        return {"type": "input", "default": k.default}
    if isinstance(k, MultilineQuestion):
        return {"type": "multiline", "default": k.default}
    if isinstance(k, MaskedQuestion):
        return {"type": "masked"}
    if isinstance(k, IntQuestion):
        return {"type": "int", "min": k.min, "max": k.max, "default": k.default}
    if isinstance(k, FloatQuestion):
        return {"type": "float", "min": k.min, "max": k.max, "default": k.default}
    if isinstance(k, ConfirmQuestion):
        return {"type": "confirm", "default": k.default}
    if isinstance(k, ListQuestion):
        return {
            "type": "list",
            "element_kind": k.element_kind.value,
            "min": k.min,
            "max": k.max,
            "min_items": k.min_items,
            "max_items": k.max_items,
        }
    if isinstance(k, AllOfQuestion):
        return {"type": "all_of", "questions": [question_to_dict(q) for q in k.questions]}
    if isinstance(k, OneOfQuestion):
        return {"type": "one_of", "variants": [variant_to_dict(v) for v in k.variants], "default": k.default}
    if isinstance(k, AnyOfQuestion):
        return {"type": "any_of", "variants": [variant_to_dict(v) for v in k.variants], "defaults": list(k.defaults)}
    raise TypeError(f"Unsupported QuestionKind type: {type(k)}")


def kind_from_dict(d: Dict[str, Any]) -> QuestionKind:
    t = d.get("type")
    if t == "unit":
        return UnitQuestion()
    if t == "input":
        return InputQuestion(default=d.get("default"))
    if t == "multiline":
        return MultilineQuestion(default=d.get("default"))
    if t == "masked":
        return MaskedQuestion()
    if t == "int":
        return IntQuestion(min=d.get("min"), max=d.get("max"), default=d.get("default"))
    if t == "float":
        return FloatQuestion(min=d.get("min"), max=d.get("max"), default=d.get("default"))
    if t == "confirm":
        return ConfirmQuestion(default=d.get("default", False))
    if t == "list":
        return ListQuestion(
            element_kind=ListElementKind(d.get("element_kind", "text")),
            min=d.get("min"),
            max=d.get("max"),
            min_items=d.get("min_items"),
            max_items=d.get("max_items"),
        )
    if t == "all_of":
        return AllOfQuestion(questions=[question_from_dict(q) for q in d.get("questions", [])])
    if t == "one_of":
        return OneOfQuestion(variants=[variant_from_dict(v) for v in d.get("variants", [])], default=d.get("default"))
    if t == "any_of":
        return AnyOfQuestion(
            variants=[variant_from_dict(v) for v in d.get("variants", [])], defaults=list(d.get("defaults", []))
        )
    raise TypeError(f"Unsupported question kind dict type: {t}")


def variant_to_dict(v: Variant) -> Dict[str, Any]:
    return {"name": v.name, "kind": kind_to_dict(v.kind)}


def variant_from_dict(d: Dict[str, Any]) -> Variant:
    return Variant(name=d["name"], kind=kind_from_dict(d.get("kind", {"type": "unit"})))


def question_to_dict(q: Question) -> Dict[str, Any]:
    return {
        "path": list(q.path.segments),
        "ask": q.ask,
        "kind": kind_to_dict(q.kind),
        "default": default_to_dict(q.default),
    }


def question_from_dict(d: Dict[str, Any]) -> Question:
    return Question(
        path=ResponsePath(tuple(d.get("path", []))),
        ask=d.get("ask", ""),
        kind=kind_from_dict(d["kind"]),
        default=default_from_dict(d.get("default")),
    )


def definition_to_dict(s: SurveyDefinition) -> Dict[str, Any]:
    return {
        "prelude": s.prelude,
        "questions": [question_to_dict(q) for q in s.questions],
        "epilogue": s.epilogue,
    }


def definition_from_dict(d: Dict[str, Any]) -> SurveyDefinition:
    return SurveyDefinition(
        questions=[question_from_dict(q) for q in d.get("questions", [])],
        prelude=d.get("prelude"),
        epilogue=d.get("epilogue"),
    )


def definition_to_json(s: SurveyDefinition) -> str:
    return json.dumps(definition_to_dict(s), sort_keys=True)


def definition_from_json(s: str) -> SurveyDefinition:
    return definition_from_dict(json.loads(s))


def definition_to_yaml(s: SurveyDefinition) -> str:
    return yaml.safe_dump(definition_to_dict(s))


def definition_from_yaml(s: str) -> SurveyDefinition:
    return definition_from_dict(yaml.safe_load(s))


# === Response stores ===


def responses_to_list(r: Responses) -> List[Dict[str, Any]]:
    entries = sorted(r.items(), key=lambda item: item[0].parts)
    return [{"path": list(p.segments), **value_to_dict(v)} for p, v in entries]


def responses_from_list(entries: List[Dict[str, Any]]) -> Responses:
    r = Responses()
    for entry in entries:
        r.insert(ResponsePath(tuple(entry["path"])), value_from_dict(entry))
    return r


def responses_to_json(r: Responses) -> str:
    return json.dumps(responses_to_list(r), sort_keys=True)


def responses_from_json(s: str) -> Responses:
    return responses_from_list(json.loads(s))


def responses_to_yaml(r: Responses) -> str:
    return yaml.safe_dump(responses_to_list(r))


def responses_from_yaml(s: str) -> Responses:
    return responses_from_list(yaml.safe_load(s) or [])


def nest_responses(r: Responses) -> Dict[str, Any]:
    """
    Nested answers layout: {"address": {"street": "1 Main St"}}.

    Raises:
        ValueError: a path is both a value and a prefix of another path
    """
    nested: Dict[str, Any] = {}
    for path, value in sorted(r.items(), key=lambda item: item[0].parts):
        if path.is_empty():
            raise ValueError("A value at the root path cannot be nested")
        node = nested
        for segment in path.segments[:-1]:
            node = node.setdefault(segment, {})
            if not isinstance(node, dict):
                raise ValueError(f"Path '{path}' nests under a value")
        if isinstance(node.get(path.last), dict):
            raise ValueError(f"Path '{path}' is both a value and a group")
        node[path.last] = value.to_python()
    return nested


def flatten_answers(nested: Dict[Any, Any], prefix: ResponsePath = ResponsePath()) -> Dict[ResponsePath, Any]:
    """Inverse of nest_responses(): nested mapping -> {path: plain value}."""
    flat: Dict[ResponsePath, Any] = {}
    for key, value in nested.items():
        path = prefix.child(str(key))
        if isinstance(value, dict):
            flat.update(flatten_answers(value, path))
        else:
            flat[path] = value
    return flat
