"""
Write-time checks for surveys, questions and submissions.

Every check either returns a cleaned value or raises ValidationError.
Callers run these BEFORE touching any state, so a rejected action leaves
the stores unchanged.
"""

from typing import Dict, Iterable, List, Optional

from .answers import Answer
from .errors import MissingRequiredAnswers, ValidationError
from .model import Question, QuestionType, Survey


def require_title(title: Optional[str], what: str = "survey") -> str:
    """Return the title unchanged, or raise if it is blank."""
    if title is None or not str(title).strip():
        raise ValidationError(f"Please enter a {what} title", field="title")
    return title


def sanitize_options(question_type: QuestionType, options: Optional[Iterable[str]]) -> Optional[List[str]]:
    """
    Normalize the options list for a question type.

    Choice types: each option is trimmed and blank ones dropped.
    Other types: options are discarded (None).

    Raises:
        ValidationError: choice type with nothing left after trimming
    """
    if not question_type.is_choice:
        return None
    cleaned = [str(opt).strip() for opt in (options or [])]
    cleaned = [opt for opt in cleaned if opt]
    if not cleaned:
        raise ValidationError(
            f"A {question_type.value} question needs at least one option",
            field="options",
        )
    return cleaned


def clean_question(question: Question) -> Question:
    """Validate a question in place and return it."""
    require_title(question.title, what="question")
    question.options = sanitize_options(question.type, question.options)
    return question


def missing_required(survey: Survey, answers: Dict[str, Answer]) -> List[Question]:
    """List required questions with no answer, or an empty one, in survey order."""
    missing = []
    for question in survey.questions:
        if not question.required:
            continue
        answer = answers.get(question.id)
        if answer is None or answer.is_empty():
            missing.append(question)
    return missing


def check_required_answers(survey: Survey, answers: Dict[str, Answer]) -> None:
    missing = missing_required(survey, answers)
    if missing:
        raise MissingRequiredAnswers(q.title for q in missing)


def clean_questions(questions: List[Question]) -> List[Question]:
    """
    Validate a whole question list, then clean it in place.

    Every question is checked before any is modified, so a rejected list
    is left exactly as it was passed in.

    Raises:
        ValidationError: blank title, choice question without options,
            or two questions sharing an id
    """
    seen = set()
    cleaned_options = []
    for question in questions:
        require_title(question.title, what="question")
        cleaned_options.append(sanitize_options(question.type, question.options))
        if question.id in seen:
            raise ValidationError(
                f"Duplicate question id {question.id!r}", field="questions"
            )
        seen.add(question.id)
    for question, options in zip(questions, cleaned_options):
        question.options = options
    return questions


def check_answers_belong(survey: Survey, survey_id: str, answers: Dict[str, Answer]) -> None:
    """Reject answers aimed at another survey or at questions it does not have."""
    if survey_id != survey.id:
        raise ValidationError(
            f"Answers for survey {survey_id!r} checked against survey {survey.id!r}",
            field="survey_id",
        )
    known = set(survey.question_ids())
    unknown = [qid for qid in answers if qid not in known]
    if unknown:
        raise ValidationError(
            f"Answers for unknown questions: {', '.join(map(str, unknown))}",
            field="answers",
        )
