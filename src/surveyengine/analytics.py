"""
Analytics Aggregation Engine — derived statistics over survey responses.

This module turns raw response records into:
    - Completion rate and average time spent
    - Responses per calendar day
    - Per-question answer tallies
    - Cross-survey overview (totals, trend, top surveys)

IMPORTANT: Everything here is read-only. Functions take snapshots (plain
lists) and return new report objects; nothing is persisted.

SYNTHETIC FIGURES:
    Demographics, device breakdown, engagement, response-rate, drop-off and
    trend numbers are placeholders. The data model holds no demographic or
    device input, so these are random values inside fixed bounds. Their KEYS
    and RANGES are the contract; the numbers mean nothing. Do not derive
    decisions from them.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from surveyengine.answers import MultiAnswer, SingleAnswer
from surveyengine.backends.export import ExportFormat, export_responses
from surveyengine.config import Settings
from surveyengine.model import ResponseRecord, Survey, parse_timestamp

logger = logging.getLogger(__name__)

# (low, high) inclusive bounds for the synthetic generators
AGE_BANDS: Dict[str, Tuple[int, int]] = {
    "18-24": (10, 39),
    "25-34": (20, 59),
    "35-44": (15, 39),
    "45-54": (10, 29),
    "55+": (5, 19),
}
GENDERS: Dict[str, Tuple[int, int]] = {
    "Male": (25, 74),
    "Female": (25, 74),
    "Other": (1, 5),
}
LOCATIONS: Dict[str, Tuple[int, int]] = {
    "North America": (30, 69),
    "Europe": (20, 49),
    "Asia": (15, 39),
    "Other": (5, 19),
}
DEVICES: Dict[str, Tuple[int, int]] = {
    "desktop": (40, 79),
    "mobile": (30, 64),
    "tablet": (10, 24),
}
RESPONSE_RATE_BOUNDS = (60, 89)
TOP_SURVEY_RESPONSES_BOUNDS = (20, 119)
TOP_SURVEY_COMPLETION_BOUNDS = (60, 99)
TREND_COUNT_BOUNDS = (10, 59)
ENGAGEMENT_BOUNDS: Dict[str, Tuple[int, int]] = {
    "daily_active_users": (100, 599),
    "weekly_active_users": (500, 2499),
    "monthly_active_users": (1000, 5999),
    "avg_session_duration": (180, 479),
}
DROPOFF_POINTS: Tuple[Tuple[int, int], ...] = ((1, 5), (2, 8), (3, 12), (4, 15), (5, 20))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _draw(rng: random.Random, bounds: Tuple[int, int]) -> int:
    low, high = bounds
    return rng.randint(low, high)


def _draw_all(rng: random.Random, table: Dict[str, Tuple[int, int]]) -> Dict[str, int]:
    return {key: _draw(rng, bounds) for key, bounds in table.items()}


# =========================================================================
# REPORT OBJECTS
# =========================================================================


@dataclass
class DateCount:
    """Number of responses on one calendar day (``date`` is YYYY-MM-DD)."""
    date: str
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "count": self.count}


@dataclass
class QuestionTally:
    """Answer distribution for one question."""
    total_responses: int = 0
    answer_counts: Dict[Any, int] = field(default_factory=dict)

    def record(self, value: Any) -> None:
        self.answer_counts[value] = self.answer_counts.get(value, 0) + 1

    def percentage(self, value: Any) -> float:
        """Share of responding records that chose ``value``."""
        if self.total_responses == 0:
            return 0.0
        return (self.answer_counts.get(value, 0) / self.total_responses) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {"totalResponses": self.total_responses, "answerCounts": dict(self.answer_counts)}


@dataclass
class DropoffPoint:
    question: int
    dropoff: int


@dataclass
class TopSurvey:
    id: str
    title: str
    responses: int
    completion_rate: int


@dataclass
class UserEngagement:
    daily_active_users: int = 0
    weekly_active_users: int = 0
    monthly_active_users: int = 0
    avg_session_duration: int = 0


@dataclass
class SurveyAnalytics:
    """Snapshot for a single survey."""

    total_responses: int = 0
    completion_rate: int = 0
    average_time: int = 0
    responses_by_date: List[DateCount] = field(default_factory=list)
    question_analytics: Dict[str, QuestionTally] = field(default_factory=dict)
    demographics: Dict[str, Dict[str, int]] = field(default_factory=dict)
    dropoff_points: List[DropoffPoint] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalResponses": self.total_responses,
            "completionRate": self.completion_rate,
            "averageTime": self.average_time,
            "responsesByDate": [d.to_dict() for d in self.responses_by_date],
            "questionAnalytics": {qid: t.to_dict() for qid, t in self.question_analytics.items()},
            "demographics": self.demographics,
            "dropoffPoints": [{"question": p.question, "dropoff": p.dropoff} for p in self.dropoff_points],
        }


@dataclass
class OverallAnalytics:
    """Cross-survey snapshot."""

    total_surveys: int = 0
    total_responses: int = 0
    avg_response_rate: int = 0
    top_performing_surveys: List[TopSurvey] = field(default_factory=list)
    responses_trend: List[DateCount] = field(default_factory=list)
    user_engagement: UserEngagement = field(default_factory=UserEngagement)
    device_breakdown: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        engagement = self.user_engagement
        return {
            "totalSurveys": self.total_surveys,
            "totalResponses": self.total_responses,
            "avgResponseRate": self.avg_response_rate,
            "topPerformingSurveys": [
                {"id": s.id, "title": s.title, "responses": s.responses, "completionRate": s.completion_rate}
                for s in self.top_performing_surveys
            ],
            "responsesTrend": [d.to_dict() for d in self.responses_trend],
            "userEngagement": {
                "dailyActiveUsers": engagement.daily_active_users,
                "weeklyActiveUsers": engagement.weekly_active_users,
                "monthlyActiveUsers": engagement.monthly_active_users,
                "avgSessionDuration": engagement.avg_session_duration,
            },
            "deviceBreakdown": dict(self.device_breakdown),
        }


AnalyticsSnapshot = Union[SurveyAnalytics, OverallAnalytics]


# =========================================================================
# 1. RESPONSE-DERIVED STATISTICS
# =========================================================================


def completion_rate(responses: Sequence[ResponseRecord]) -> int:
    """
    Percentage of responses not explicitly marked incomplete.

    ``completed=None`` counts as completed. Empty input gives 0.
    """
    total = len(responses)
    if total == 0:
        return 0
    completed = sum(1 for r in responses if r.completed is not False)
    return _round_half_up(100 * completed / total)


def average_time_spent(
    responses: Sequence[ResponseRecord],
    rng: Optional[random.Random] = None,
    fallback_range: Tuple[float, float] = Settings.TIME_SPENT_FALLBACK,
) -> int:
    """
    Rounded mean of time_spent_seconds.

    Records without a time spent get a uniform placeholder drawn from
    ``fallback_range`` so legacy records never break the computation.
    Empty input gives 0.
    """
    if not responses:
        return 0
    rng = rng or random.Random()
    low, high = fallback_range
    times = []
    for r in responses:
        if r.time_spent_seconds is None:
            times.append(rng.uniform(low, high))
        else:
            times.append(float(r.time_spent_seconds))
    return _round_half_up(sum(times) / len(times))


def responses_by_date(responses: Sequence[ResponseRecord]) -> List[DateCount]:
    """
    Count responses per local calendar date of submitted_at.

    Dates keep first-seen order. Records whose timestamp cannot be parsed
    are left out.
    """
    buckets: Dict[str, DateCount] = {}
    for r in responses:
        try:
            day = parse_timestamp(r.submitted_at).astimezone().date().isoformat()
        except (ValueError, AttributeError):
            logger.debug("Skipping response %s with unparsable timestamp %r", r.id, r.submitted_at)
            continue
        if day not in buckets:
            buckets[day] = DateCount(date=day)
        buckets[day].count += 1
    return list(buckets.values())


def per_question_tally(responses: Sequence[ResponseRecord]) -> Dict[str, QuestionTally]:
    """
    Tally answers per question.

    A MultiAnswer increments one bucket per selected value, so one record
    can land in several buckets of the same question. total_responses grows
    once per record that answered the question at all.
    """
    tallies: Dict[str, QuestionTally] = {}
    for r in responses:
        for question_id, answer in r.answers.items():
            tally = tallies.setdefault(question_id, QuestionTally())
            tally.total_responses += 1
            if isinstance(answer, MultiAnswer):
                for value in answer.choices:
                    tally.record(value)
            elif isinstance(answer, SingleAnswer):
                tally.record(answer.value)
    return tallies


# =========================================================================
# 2. SYNTHETIC PLACEHOLDERS
# =========================================================================


def demographic_breakdown(rng: Optional[random.Random] = None) -> Dict[str, Dict[str, int]]:
    """Synthetic age/gender/location shares. Not derived from any response."""
    rng = rng or random.Random()
    return {
        "ageGroups": _draw_all(rng, AGE_BANDS),
        "gender": _draw_all(rng, GENDERS),
        "location": _draw_all(rng, LOCATIONS),
    }


def device_breakdown(rng: Optional[random.Random] = None) -> Dict[str, int]:
    """Synthetic desktop/mobile/tablet shares."""
    return _draw_all(rng or random.Random(), DEVICES)


def dropoff_points() -> List[DropoffPoint]:
    return [DropoffPoint(question=q, dropoff=d) for q, d in DROPOFF_POINTS]


def user_engagement(rng: Optional[random.Random] = None) -> UserEngagement:
    return UserEngagement(**_draw_all(rng or random.Random(), ENGAGEMENT_BOUNDS))


def responses_trend(
    rng: Optional[random.Random] = None,
    days: int = 31,
    today: Optional[date] = None,
) -> List[DateCount]:
    """Synthetic daily counts for ``days`` consecutive days ending today, oldest first."""
    rng = rng or random.Random()
    today = today or date.today()
    return [
        DateCount(date=(today - timedelta(days=offset)).isoformat(), count=_draw(rng, TREND_COUNT_BOUNDS))
        for offset in range(days - 1, -1, -1)
    ]


def top_performing_surveys(
    surveys: Sequence[Survey],
    rng: Optional[random.Random] = None,
    limit: int = 5,
) -> List[TopSurvey]:
    """
    Rank surveys by a synthetic response count and keep the first ``limit``.

    Ties keep collection order.
    """
    rng = rng or random.Random()
    scored = [
        TopSurvey(
            id=s.id,
            title=s.title,
            responses=_draw(rng, TOP_SURVEY_RESPONSES_BOUNDS),
            completion_rate=_draw(rng, TOP_SURVEY_COMPLETION_BOUNDS),
        )
        for s in surveys
    ]
    scored.sort(key=lambda s: s.responses, reverse=True)
    return scored[:limit]


# =========================================================================
# 3. SNAPSHOTS
# =========================================================================


def survey_analytics(
    responses: Sequence[ResponseRecord],
    rng: Optional[random.Random] = None,
    fallback_range: Tuple[float, float] = Settings.TIME_SPENT_FALLBACK,
) -> SurveyAnalytics:
    """Build the per-survey snapshot from that survey's responses."""
    rng = rng or random.Random()
    return SurveyAnalytics(
        total_responses=len(responses),
        completion_rate=completion_rate(responses),
        average_time=average_time_spent(responses, rng=rng, fallback_range=fallback_range),
        responses_by_date=responses_by_date(responses),
        question_analytics=per_question_tally(responses),
        demographics=demographic_breakdown(rng),
        dropoff_points=dropoff_points(),
    )


def overall_analytics(
    surveys: Sequence[Survey],
    responses: Sequence[ResponseRecord],
    rng: Optional[random.Random] = None,
    top_n: int = 5,
    trend_days: int = 31,
) -> OverallAnalytics:
    """Build the cross-survey snapshot. Only the two totals come from the data."""
    rng = rng or random.Random()
    return OverallAnalytics(
        total_surveys=len(surveys),
        total_responses=len(responses),
        avg_response_rate=_draw(rng, RESPONSE_RATE_BOUNDS),
        top_performing_surveys=top_performing_surveys(surveys, rng=rng, limit=top_n),
        responses_trend=responses_trend(rng=rng, days=trend_days),
        user_engagement=user_engagement(rng),
        device_breakdown=device_breakdown(rng),
    )


def export(responses: Sequence[ResponseRecord], fmt: Union[ExportFormat, str] = ExportFormat.CSV) -> str:
    """
    Export responses as CSV or JSON text.

    Callers must check the ``export_data`` permission first; this function
    does not.
    """
    return export_responses(responses, fmt)


class AnalyticsEngine:
    """
    Binds the aggregation functions to the live stores.

    Every call reads fresh snapshots from the stores; nothing is cached.
    The engine's only state is the random generator for synthetic figures
    (seeded from SURVEYENGINE_RANDOM_SEED when set).
    """

    def __init__(self, surveys, responses, settings: Settings = None, rng: Optional[random.Random] = None):
        self.surveys = surveys
        self.responses = responses
        self.settings = settings or Settings()
        self.rng = rng or random.Random(self.settings.RANDOM_SEED)

    def responses_for(self, survey_id: Optional[str] = None) -> List[ResponseRecord]:
        if survey_id is None:
            return self.responses.all()
        return self.responses.list_by_survey(survey_id)

    def compute(self, survey_id: Optional[str] = None) -> AnalyticsSnapshot:
        """Per-survey snapshot for an id, cross-survey snapshot for None."""
        if survey_id is None:
            return overall_analytics(
                self.surveys.all(),
                self.responses.all(),
                rng=self.rng,
                top_n=self.settings.TOP_SURVEYS,
                trend_days=self.settings.TREND_DAYS,
            )
        return survey_analytics(
            self.responses_for(survey_id),
            rng=self.rng,
            fallback_range=self.settings.TIME_SPENT_FALLBACK,
        )

    def export(self, survey_id: str, fmt: Union[ExportFormat, str] = ExportFormat.CSV) -> str:
        return export(self.responses_for(survey_id), fmt)
