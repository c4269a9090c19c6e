"""
Serialization helpers for survey engine objects (Survey, Question, ResponseRecord).

Provides lossless JSON/YAML round-trip via intermediate dict representation.
Dict keys are camelCase: the persisted and exported record layout is a
compatibility surface shared with other clients of the same data.

Malformed input raises RecordFormatError, never a bare KeyError/TypeError.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List

import yaml

from surveyengine.answers import is_raw_answer, to_answer
from surveyengine.errors import RecordFormatError
from surveyengine.model import Question, QuestionType, ResponseRecord, Survey


def _require(d: Any, key: str) -> Any:
    if not isinstance(d, dict):
        raise RecordFormatError(f"Expected a mapping, got {type(d).__name__}")
    if key not in d:
        raise RecordFormatError(f"Missing required key: {key}")
    return d[key]


def _require_str(d: Any, key: str) -> str:
    value = _require(d, key)
    if not isinstance(value, str):
        raise RecordFormatError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _optional_number(d: Dict[str, Any], key: str) -> Any:
    value = d.get(key)
    # bool is an int subclass but never a duration
    if value is None or (isinstance(value, (int, float)) and not isinstance(value, bool)):
        return value
    raise RecordFormatError(f"{key} must be a number, got {value!r}")


def _optional_bool(d: Dict[str, Any], key: str, default: Any) -> Any:
    value = d.get(key, default)
    if value is None or isinstance(value, bool):
        return value
    raise RecordFormatError(f"{key} must be true, false or null, got {value!r}")


def _answer_from_raw(question_id: Any, raw: Any):
    if not isinstance(question_id, str) or not is_raw_answer(raw):
        raise RecordFormatError(f"Malformed answer for question {question_id!r}: {raw!r}")
    return to_answer(raw)


def question_to_dict(q: Question) -> Dict[str, Any]:
    d = {
        "id": q.id,
        "title": q.title,
        "description": q.description,
        "type": q.type.value,
        "required": q.required,
        "createdAt": q.created_at,
    }
    if q.options is not None:
        d["options"] = list(q.options)
    return d


def question_from_dict(d: Dict[str, Any]) -> Question:
    q_id = _require_str(d, "id")
    try:
        q_type = QuestionType(d.get("type", "text"))
    except ValueError as exc:
        raise RecordFormatError(f"Unknown question type: {d.get('type')!r}") from exc
    options = d.get("options")
    if options is not None and not isinstance(options, list):
        raise RecordFormatError(f"Question {q_id}: options must be a list")
    if options is not None and not all(isinstance(opt, str) for opt in options):
        raise RecordFormatError(f"Question {q_id}: options must be strings")
    return Question(
        id=q_id,
        title=d.get("title", ""),
        description=d.get("description", ""),
        type=q_type,
        required=bool(d.get("required", False)),
        options=options,
        created_at=d.get("createdAt", ""),
    )


def survey_to_dict(s: Survey) -> Dict[str, Any]:
    return {
        "id": s.id,
        "title": s.title,
        "description": s.description,
        "questions": [question_to_dict(q) for q in s.questions],
        "createdAt": s.created_at,
        "updatedAt": s.updated_at,
    }


def survey_from_dict(d: Dict[str, Any]) -> Survey:
    questions = d.get("questions", []) if isinstance(d, dict) else None
    if not isinstance(questions, list):
        raise RecordFormatError("Survey questions must be a list")
    return Survey(
        id=_require_str(d, "id"),
        title=d.get("title", ""),
        description=d.get("description", ""),
        questions=[question_from_dict(q) for q in questions],
        created_at=d.get("createdAt", ""),
        updated_at=d.get("updatedAt", ""),
    )


def response_to_dict(r: ResponseRecord) -> Dict[str, Any]:
    return {
        "id": r.id,
        "surveyId": r.survey_id,
        "answers": {qid: answer.to_raw() for qid, answer in r.answers.items()},
        "submittedAt": r.submitted_at,
        "timeSpentSeconds": r.time_spent_seconds,
        "completed": r.completed,
        "clientMeta": r.client_meta,
    }


def response_from_dict(d: Dict[str, Any]) -> ResponseRecord:
    answers = d.get("answers", {}) if isinstance(d, dict) else None
    if not isinstance(answers, dict):
        raise RecordFormatError("Response answers must be a mapping")
    return ResponseRecord(
        id=_require_str(d, "id"),
        survey_id=_require_str(d, "surveyId"),
        answers={qid: _answer_from_raw(qid, raw) for qid, raw in answers.items()},
        submitted_at=d.get("submittedAt", ""),
        time_spent_seconds=_optional_number(d, "timeSpentSeconds"),
        completed=_optional_bool(d, "completed", True),
        client_meta=d.get("clientMeta", ""),
    )


def surveys_from_records(records: List[Dict[str, Any]]) -> List[Survey]:
    return [survey_from_dict(d) for d in records]


def responses_from_records(records: List[Dict[str, Any]]) -> List[ResponseRecord]:
    return [response_from_dict(d) for d in records]


def survey_to_json(s: Survey) -> str:
    return json.dumps(survey_to_dict(s), sort_keys=True)


def survey_from_json(s: str) -> Survey:
    d = json.loads(s)
    return survey_from_dict(d)


def survey_to_yaml(s: Survey) -> str:
    return yaml.safe_dump(survey_to_dict(s))


def survey_from_yaml(s: str) -> Survey:
    d = yaml.safe_load(s)
    return survey_from_dict(d)
