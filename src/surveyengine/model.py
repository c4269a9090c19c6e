"""
Core Survey Model Objects

Defines the fundamental data structures of the survey engine:
    - Questions (single prompts with a type-determined answer shape)
    - Surveys (ordered collection of questions plus metadata)
    - Response records (one respondent's submission)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about storage, rendering or analytics
        - Are fully serializable
        - Represent structure, not behavior
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Union

from .answers import Answer


def utc_now_iso() -> str:
    """Current time as ISO-8601 UTC text with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_id() -> str:
    return uuid.uuid4().hex


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp as produced by utc_now_iso.

    A trailing ``Z`` is accepted. Naive timestamps are taken as UTC.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class QuestionType(Enum):
    """
    Question types understood by the engine.

    Choice types carry an options list. Every other type ignores it.
    """

    TEXT = "text"
    TEXTAREA = "textarea"
    MULTIPLE_CHOICE = "multiple-choice"
    CHECKBOX = "checkbox"
    DROPDOWN = "dropdown"
    RATING = "rating"

    @property
    def is_choice(self) -> bool:
        return self in CHOICE_TYPES

    @property
    def is_multi_valued(self) -> bool:
        return self is QuestionType.CHECKBOX


CHOICE_TYPES = frozenset(
    {QuestionType.MULTIPLE_CHOICE, QuestionType.CHECKBOX, QuestionType.DROPDOWN}
)


@dataclass
class Question:
    """
    A single prompt inside a survey.

    Properties:
        id:
            Unique within the owning survey. Assigned by SurveyStore.add_question
            when left empty.

        title:
            Prompt text shown to the respondent (must not be blank)

        type:
            QuestionType, accepts the enum or its string value

        options:
            Answer choices for choice types, None otherwise.
            Blank options never reach storage.

    A question is owned by exactly one survey. It is embedded, never shared.
    """

    title: str
    type: Union[QuestionType, str] = QuestionType.TEXT
    description: str = ""
    required: bool = False
    options: Optional[List[str]] = None
    id: str = ""
    created_at: str = ""

    def __post_init__(self):
        if not isinstance(self.type, QuestionType):
            self.type = QuestionType(self.type)


@dataclass
class Survey:
    """
    Root container for an authored survey.

    Properties:
        id: Opaque identifier assigned by SurveyStore.create
        title: Survey title (must not be blank)
        description: Free text, may be empty
        questions: Ordered question list
        created_at / updated_at: ISO-8601 timestamps

    INVARIANTS:
        - Question ids are unique within questions
        - updated_at moves forward on every mutation through the store
    """

    id: str
    title: str
    description: str = ""
    questions: List[Question] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    def get_question(self, question_id: str) -> Optional[Question]:
        """
        Retrieve a question by ID.

        Args:
            question_id: Question identifier

        Returns:
            Question object or None if not found
        """
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def question_ids(self) -> List[str]:
        return [q.id for q in self.questions]


@dataclass
class ResponseRecord:
    """
    One respondent's submission against a survey.

    Properties:
        id: Opaque identifier stamped by ResponseStore.submit
        survey_id: Weak reference to Survey.id (may dangle after a delete)
        answers: question id -> Answer variant
        submitted_at: ISO-8601 timestamp
        time_spent_seconds: Elapsed wall-clock time measured by the caller,
            None for legacy records that never recorded it
        completed: None is treated as completed by the analytics
        client_meta: Opaque client description (user agent)

    Records are append-only. Nothing mutates them after submit.
    Answer keys for questions deleted later are kept as they are.
    """

    id: str
    survey_id: str
    answers: Dict[str, Answer] = field(default_factory=dict)
    submitted_at: str = ""
    time_spent_seconds: Optional[float] = None
    completed: Optional[bool] = True
    client_meta: str = ""
