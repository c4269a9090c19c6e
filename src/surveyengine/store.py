"""
Survey and response stores.

Each store owns exactly one collection and is the only writer of it.
Every public mutation reads-modifies-writes the whole collection and
immediately hands the complete list to the PersistenceAdapter.

There is one logical writer at a time, so no locking happens here.
Construct one store of each kind per session and pass them to whoever
needs them; there is no module-level instance.

Unknown ids:
    By default update/delete/question operations against an unknown id are
    silent no-ops (logged at DEBUG). With ``strict=True`` (or
    SURVEYENGINE_STRICT_LOOKUPS) they raise a NotFoundError subclass instead.
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from .answers import is_raw_answer, to_answer
from .config import Settings
from .errors import NoOpenSurvey, QuestionNotFound, RecordFormatError, SurveyNotFound, ValidationError
from .model import Question, ResponseRecord, Survey, new_id, utc_now_iso
from .persistence import PersistenceAdapter
from .serialization import (
    response_from_dict,
    response_to_dict,
    survey_from_dict,
    survey_to_dict,
)
from .validation import (
    check_answers_belong,
    check_required_answers,
    clean_question,
    clean_questions,
    require_title,
)

logger = logging.getLogger(__name__)


class _CollectionStore:
    """Shared load/save plumbing for a single named collection."""

    def __init__(self, adapter: PersistenceAdapter, collection: str, strict: bool):
        self.adapter = adapter
        self.collection = collection
        self.strict = strict

    def _load_records(self, parse: Callable[[Dict[str, Any]], Any]) -> List[Any]:
        """
        Load and parse the whole collection.

        One malformed record discards the whole load: the store starts
        empty rather than with a partial collection.
        """
        records = self.adapter.load(self.collection)
        try:
            return [parse(d) for d in records]
        except RecordFormatError as exc:
            logger.warning(
                "Collection %s is corrupt, starting empty: %s", self.collection, exc
            )
            return []

    def _save_records(self, records: List[Dict[str, Any]]) -> None:
        self.adapter.save(self.collection, records)

    def _missing(self, error_cls, message: str) -> None:
        if self.strict:
            raise error_cls(message)
        logger.debug("Ignored: %s", message)


class SurveyStore(_CollectionStore):
    """
    Owns the canonical survey collection and the currently open survey.

    The open survey is always the very object held in the collection
    (never a divergent copy), so edits through either view are the same edit.
    """

    def __init__(self, adapter: PersistenceAdapter, settings: Settings = None, strict: Optional[bool] = None):
        settings = settings or Settings()
        super().__init__(
            adapter,
            settings.SURVEYS_COLLECTION,
            settings.STRICT_LOOKUPS if strict is None else strict,
        )
        self._surveys: Dict[str, Survey] = {
            s.id: s for s in self._load_records(survey_from_dict)
        }
        self._current: Optional[Survey] = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._surveys)

    def __iter__(self) -> Iterator[Survey]:
        return iter(list(self._surveys.values()))

    def all(self) -> List[Survey]:
        return list(self._surveys.values())

    def get_by_id(self, survey_id: str) -> Optional[Survey]:
        return self._surveys.get(survey_id)

    @property
    def current(self) -> Optional[Survey]:
        return self._current

    # ------------------------------------------------------------------
    # Survey CRUD
    # ------------------------------------------------------------------

    def create(self, title: str, description: str = "") -> Survey:
        require_title(title)
        now = utc_now_iso()
        survey = Survey(
            id=new_id(),
            title=title,
            description=description or "",
            questions=[],
            created_at=now,
            updated_at=now,
        )
        self._surveys[survey.id] = survey
        self._current = survey
        self._persist()
        logger.info("Created survey %s (%r)", survey.id, survey.title)
        return survey

    def update(self, survey: Survey) -> None:
        """
        Replace the stored survey with the same id.

        An unknown id leaves the collection untouched and nothing is saved.
        Questions are validated like add_question: blank titles and
        choice questions without options are rejected, options are trimmed,
        and question ids must be unique within the survey.
        """
        if survey.id not in self._surveys:
            self._missing(SurveyNotFound, f"update of unknown survey {survey.id}")
            return
        require_title(survey.title)
        clean_questions(survey.questions)
        survey.updated_at = utc_now_iso()
        self._surveys[survey.id] = survey
        self._current = survey
        self._persist()

    def delete(self, survey_id: str) -> None:
        """
        Remove a survey.

        The open survey is NOT cleared. If it was the deleted one, the caller
        must call close() (or open another); until then question edits only
        touch the stale object and never reach storage.
        """
        if survey_id not in self._surveys:
            self._missing(SurveyNotFound, f"delete of unknown survey {survey_id}")
            return
        del self._surveys[survey_id]
        self._persist()
        logger.info("Deleted survey %s", survey_id)

    def open(self, survey_id: str) -> Optional[Survey]:
        survey = self._surveys.get(survey_id)
        if survey is None:
            self._missing(SurveyNotFound, f"open of unknown survey {survey_id}")
        self._current = survey
        return survey

    def close(self) -> None:
        self._current = None

    # ------------------------------------------------------------------
    # Question CRUD (against the open survey)
    # ------------------------------------------------------------------

    def add_question(self, question: Question) -> Optional[Question]:
        survey = self._open_survey("add_question")
        if survey is None:
            return None
        clean_question(question)
        question.id = new_id()
        question.created_at = utc_now_iso()
        survey.questions.append(question)
        self._touch(survey)
        return question

    def update_question(self, question: Question) -> None:
        survey = self._open_survey("update_question")
        if survey is None:
            return
        index = self._question_index(survey, question.id)
        if index is None:
            self._missing(QuestionNotFound, f"update of unknown question {question.id}")
            return
        clean_question(question)
        if not question.created_at:
            question.created_at = survey.questions[index].created_at
        survey.questions[index] = question
        self._touch(survey)

    def delete_question(self, question_id: str) -> None:
        survey = self._open_survey("delete_question")
        if survey is None:
            return
        index = self._question_index(survey, question_id)
        if index is None:
            self._missing(QuestionNotFound, f"delete of unknown question {question_id}")
            return
        del survey.questions[index]
        self._touch(survey)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _open_survey(self, operation: str) -> Optional[Survey]:
        if self._current is None:
            self._missing(NoOpenSurvey, f"{operation} with no open survey")
        return self._current

    @staticmethod
    def _question_index(survey: Survey, question_id: str) -> Optional[int]:
        for i, q in enumerate(survey.questions):
            if q.id == question_id:
                return i
        return None

    def _touch(self, survey: Survey) -> None:
        survey.updated_at = utc_now_iso()
        # a stale open survey (deleted from the collection) is not re-added
        if survey.id in self._surveys:
            self._surveys[survey.id] = survey
            self._persist()

    def _persist(self) -> None:
        self._save_records([survey_to_dict(s) for s in self._surveys.values()])


class ResponseStore(_CollectionStore):
    """Owns the append-only list of submitted responses."""

    def __init__(self, adapter: PersistenceAdapter, settings: Settings = None):
        settings = settings or Settings()
        super().__init__(adapter, settings.RESPONSES_COLLECTION, strict=settings.STRICT_LOOKUPS)
        self._responses: List[ResponseRecord] = self._load_records(response_from_dict)

    def __len__(self) -> int:
        return len(self._responses)

    def all(self) -> List[ResponseRecord]:
        return list(self._responses)

    def list_by_survey(self, survey_id: str) -> List[ResponseRecord]:
        return [r for r in self._responses if r.survey_id == survey_id]

    def submit(
        self,
        survey_id: str,
        answers: Mapping[str, Any],
        time_spent_seconds: Optional[float] = None,
        completed: Optional[bool] = True,
        client_meta: str = "",
        survey: Optional[Survey] = None,
    ) -> ResponseRecord:
        """
        Record one submission.

        Args:
            survey_id: Survey the answers belong to (not checked for existence)
            answers: question id -> raw value or Answer; lists become MultiAnswer
            time_spent_seconds: Elapsed time measured by the caller since the
                respondent started
            completed: Completion flag, stored as given
            client_meta: Opaque client description (user agent)
            survey: When given, answers must belong to it and its required
                questions are enforced

        Raises:
            ValidationError: an answer is not a value or a flat list of
                values; or, with ``survey``, survey_id differs from its id
                or an answer targets a question it does not have
            MissingRequiredAnswers: a required question of ``survey`` is
                unanswered

        Nothing is stored when a check fails.
        """
        for qid, raw in answers.items():
            if not is_raw_answer(raw):
                raise ValidationError(f"Malformed answer for question {qid!r}", field="answers")
        converted = {qid: to_answer(raw) for qid, raw in answers.items()}
        if survey is not None:
            check_answers_belong(survey, survey_id, converted)
            check_required_answers(survey, converted)

        record = ResponseRecord(
            id=new_id(),
            survey_id=survey_id,
            answers=converted,
            submitted_at=utc_now_iso(),
            time_spent_seconds=time_spent_seconds,
            completed=completed,
            client_meta=client_meta or "",
        )
        self._responses.append(record)
        self._save_records([response_to_dict(r) for r in self._responses])
        logger.info("Recorded response %s for survey %s", record.id, survey_id)
        return record
