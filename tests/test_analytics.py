"""
Tests for the Analytics Aggregation Engine.

Tests verify that the engine correctly:
    - Computes completion rate and average time (with empty-input guards)
    - Groups responses by local calendar date in first-seen order
    - Tallies single and multi-valued answers per question
    - Keeps synthetic figures inside their documented keys and ranges
    - Builds per-survey and cross-survey snapshots from live stores
"""

import random
from datetime import date

import pytest

from surveyengine.analytics import (
    AGE_BANDS,
    DEVICES,
    ENGAGEMENT_BOUNDS,
    GENDERS,
    LOCATIONS,
    AnalyticsEngine,
    OverallAnalytics,
    SurveyAnalytics,
    average_time_spent,
    completion_rate,
    demographic_breakdown,
    device_breakdown,
    dropoff_points,
    export,
    overall_analytics,
    per_question_tally,
    responses_by_date,
    responses_trend,
    top_performing_surveys,
    user_engagement,
)
from surveyengine.answers import to_answer
from surveyengine.model import Question, ResponseRecord, Survey, parse_timestamp
from surveyengine.persistence import MemoryAdapter
from surveyengine.store import ResponseStore, SurveyStore


def make_response(rid="r", survey_id="s1", answers=None, completed=True,
                  time_spent=None, submitted_at="2024-03-10T12:00:00.000Z"):
    return ResponseRecord(
        id=rid,
        survey_id=survey_id,
        answers={k: to_answer(v) for k, v in (answers or {}).items()},
        submitted_at=submitted_at,
        time_spent_seconds=time_spent,
        completed=completed,
    )


def local_day(stamp):
    return parse_timestamp(stamp).astimezone().date().isoformat()


class TestCompletionRate:
    """Test completion rate."""

    def test_empty(self):
        assert completion_rate([]) == 0

    def test_all_completed(self):
        assert completion_rate([make_response(), make_response()]) == 100

    def test_none_counts_as_completed(self):
        responses = [make_response(completed=None), make_response(completed=False)]
        assert completion_rate(responses) == 50

    def test_rounds_half_up(self):
        responses = [make_response(completed=c) for c in (True, False, False, False, False, False, False, False)]
        # 12.5 -> 13
        assert completion_rate(responses) == 13

    def test_rounding(self):
        responses = [make_response(completed=c) for c in (True, True, False)]
        assert completion_rate(responses) == 67

    @pytest.mark.parametrize("seed", range(10))
    def test_bounds(self, seed):
        rng = random.Random(seed)
        responses = [make_response(completed=rng.choice([True, False, None]))
                     for _ in range(rng.randint(1, 30))]
        assert 0 <= completion_rate(responses) <= 100


class TestAverageTime:
    """Test average time spent."""

    def test_empty(self):
        assert average_time_spent([]) == 0

    def test_mean_is_rounded(self):
        responses = [make_response(time_spent=10), make_response(time_spent=15)]
        assert average_time_spent(responses) == 13

    def test_zero_is_a_real_value(self):
        assert average_time_spent([make_response(time_spent=0)]) == 0

    def test_missing_values_use_fallback_range(self):
        responses = [make_response(time_spent=None) for _ in range(50)]
        avg = average_time_spent(responses, rng=random.Random(1), fallback_range=(60, 360))
        assert 60 <= avg <= 360

    def test_fallback_is_per_record(self):
        responses = [make_response(time_spent=100), make_response(time_spent=None)]
        avg = average_time_spent(responses, rng=random.Random(3), fallback_range=(100, 100))
        assert avg == 100


class TestResponsesByDate:
    """Test grouping by calendar date."""

    def test_empty(self):
        assert responses_by_date([]) == []

    def test_groups_and_keeps_first_seen_order(self):
        stamps = [
            "2024-03-12T12:00:00.000Z",
            "2024-03-10T12:00:00.000Z",
            "2024-03-12T12:30:00.000Z",
        ]
        result = responses_by_date([make_response(submitted_at=s) for s in stamps])
        assert [(d.date, d.count) for d in result] == [
            (local_day(stamps[0]), 2),
            (local_day(stamps[1]), 1),
        ]

    def test_unparsable_timestamp_skipped(self):
        result = responses_by_date([make_response(submitted_at="not a date"),
                                    make_response(submitted_at="2024-03-10T12:00:00Z")])
        assert sum(d.count for d in result) == 1

    def test_date_format(self):
        result = responses_by_date([make_response(submitted_at="2024-03-10T12:00:00Z")])
        assert len(result[0].date) == 10
        assert result[0].to_dict() == {"date": result[0].date, "count": 1}


class TestPerQuestionTally:
    """Test answer tallies."""

    def test_single_values(self):
        responses = [
            make_response(answers={"q1": "Yes"}),
            make_response(answers={"q1": "No"}),
            make_response(answers={"q1": "Yes"}),
        ]
        tally = per_question_tally(responses)["q1"]
        assert tally.total_responses == 3
        assert tally.answer_counts == {"Yes": 2, "No": 1}

    def test_multi_values_counted_independently(self):
        responses = [
            make_response(answers={"q1": ["a", "b"]}),
            make_response(answers={"q1": ["b"]}),
        ]
        tally = per_question_tally(responses)["q1"]
        assert tally.total_responses == 2
        assert tally.answer_counts == {"a": 1, "b": 2}

    @pytest.mark.parametrize("k", [1, 2, 3])
    def test_conservation(self, k):
        """Every response selecting k options contributes exactly k counts."""
        options = ["a", "b", "c", "d"]
        rng = random.Random(k)
        responses = [make_response(answers={"q1": rng.sample(options, k)}) for _ in range(20)]
        tally = per_question_tally(responses)["q1"]
        assert sum(tally.answer_counts.values()) == k * tally.total_responses

    def test_questions_tallied_separately(self):
        tallies = per_question_tally([make_response(answers={"q1": 4, "q2": ["x"]})])
        assert set(tallies) == {"q1", "q2"}

    def test_stale_question_keys_kept(self):
        tallies = per_question_tally([make_response(answers={"deleted-question": "v"})])
        assert tallies["deleted-question"].total_responses == 1

    def test_percentage(self):
        tally = per_question_tally([
            make_response(answers={"q1": ["a", "b"]}),
            make_response(answers={"q1": ["a"]}),
        ])["q1"]
        assert tally.percentage("a") == 100.0
        assert tally.percentage("b") == 50.0
        assert tally.percentage("zzz") == 0.0

    def test_empty(self):
        assert per_question_tally([]) == {}


class TestSyntheticFigures:
    """Synthetic figures keep their keys and ranges."""

    @pytest.mark.parametrize("seed", range(20))
    def test_demographics(self, seed):
        result = demographic_breakdown(random.Random(seed))
        for group, table in (("ageGroups", AGE_BANDS), ("gender", GENDERS), ("location", LOCATIONS)):
            assert list(result[group]) == list(table)
            for key, value in result[group].items():
                low, high = table[key]
                assert low <= value <= high

    def test_demographic_keys(self):
        result = demographic_breakdown()
        assert set(result["ageGroups"]) == {"18-24", "25-34", "35-44", "45-54", "55+"}
        assert set(result["gender"]) == {"Male", "Female", "Other"}

    @pytest.mark.parametrize("seed", range(20))
    def test_devices(self, seed):
        result = device_breakdown(random.Random(seed))
        assert set(result) == {"desktop", "mobile", "tablet"}
        for key, value in result.items():
            low, high = DEVICES[key]
            assert low <= value <= high

    def test_engagement(self):
        engagement = user_engagement(random.Random(0))
        for name, (low, high) in ENGAGEMENT_BOUNDS.items():
            assert low <= getattr(engagement, name) <= high

    def test_seeded_generators_repeat(self):
        assert device_breakdown(random.Random(5)) == device_breakdown(random.Random(5))

    def test_dropoff_points_fixed(self):
        assert [(p.question, p.dropoff) for p in dropoff_points()] == [
            (1, 5), (2, 8), (3, 12), (4, 15), (5, 20),
        ]

    def test_trend_covers_consecutive_days(self):
        trend = responses_trend(random.Random(0), days=31, today=date(2024, 3, 31))
        assert len(trend) == 31
        assert trend[0].date == "2024-03-01"
        assert trend[-1].date == "2024-03-31"
        assert all(10 <= d.count <= 59 for d in trend)

    def test_top_surveys_ranked_and_limited(self):
        surveys = [Survey(id=f"s{i}", title=f"S{i}") for i in range(8)]
        top = top_performing_surveys(surveys, random.Random(2), limit=5)
        assert len(top) == 5
        counts = [s.responses for s in top]
        assert counts == sorted(counts, reverse=True)
        assert all(60 <= s.completion_rate <= 99 for s in top)

    def test_top_surveys_fewer_than_limit(self):
        top = top_performing_surveys([Survey(id="s1", title="Only")], random.Random(0), limit=5)
        assert [s.id for s in top] == ["s1"]


class TestOverallAnalytics:
    """Test the cross-survey snapshot."""

    def test_totals_and_shape(self):
        surveys = [Survey(id="s1", title="A"), Survey(id="s2", title="B")]
        responses = [make_response(), make_response(survey_id="s2"), make_response()]
        result = overall_analytics(surveys, responses, rng=random.Random(0))
        assert result.total_surveys == 2
        assert result.total_responses == 3
        assert 60 <= result.avg_response_rate <= 89
        assert len(result.responses_trend) == 31
        assert len(result.top_performing_surveys) == 2
        assert set(result.device_breakdown) == {"desktop", "mobile", "tablet"}

    def test_empty(self):
        result = overall_analytics([], [], rng=random.Random(0))
        assert result.total_surveys == 0
        assert result.total_responses == 0
        assert result.top_performing_surveys == []

    def test_to_dict_keys(self):
        d = overall_analytics([], [], rng=random.Random(0)).to_dict()
        assert set(d) == {
            "totalSurveys", "totalResponses", "avgResponseRate", "topPerformingSurveys",
            "responsesTrend", "userEngagement", "deviceBreakdown",
        }


class TestAnalyticsEngine:
    """Test the engine bound to live stores."""

    @pytest.fixture
    def stores(self):
        adapter = MemoryAdapter()
        return SurveyStore(adapter, strict=False), ResponseStore(adapter)

    def test_satisfaction_scenario(self, stores):
        surveys, responses = stores
        survey = surveys.create("Satisfaction", "")
        question = surveys.add_question(Question(title="Rate us", type="rating", required=True))
        responses.submit(survey.id, {question.id: 4}, time_spent_seconds=42, completed=True,
                         survey=survey)

        engine = AnalyticsEngine(surveys, responses, rng=random.Random(0))
        snapshot = engine.compute(survey.id)

        assert isinstance(snapshot, SurveyAnalytics)
        tallies = {qid: t.to_dict() for qid, t in snapshot.question_analytics.items()}
        assert tallies == {question.id: {"totalResponses": 1, "answerCounts": {4: 1}}}
        assert snapshot.average_time == 42
        assert snapshot.completion_rate == 100
        assert snapshot.total_responses == 1

    def test_compute_filters_by_survey(self, stores):
        surveys, responses = stores
        a = surveys.create("A")
        b = surveys.create("B")
        responses.submit(a.id, {"q": 1})
        responses.submit(b.id, {"q": 2})
        responses.submit(b.id, {"q": 3})

        engine = AnalyticsEngine(surveys, responses, rng=random.Random(0))
        assert engine.compute(a.id).total_responses == 1
        assert engine.compute(b.id).total_responses == 2

    def test_compute_overall(self, stores):
        surveys, responses = stores
        s = surveys.create("A")
        responses.submit(s.id, {})
        snapshot = AnalyticsEngine(surveys, responses, rng=random.Random(0)).compute()
        assert isinstance(snapshot, OverallAnalytics)
        assert snapshot.total_surveys == 1
        assert snapshot.total_responses == 1

    def test_unknown_survey_gives_empty_snapshot(self, stores):
        surveys, responses = stores
        snapshot = AnalyticsEngine(surveys, responses, rng=random.Random(0)).compute("missing")
        assert snapshot.total_responses == 0
        assert snapshot.completion_rate == 0
        assert snapshot.average_time == 0
        assert snapshot.responses_by_date == []
        assert snapshot.question_analytics == {}

    def test_snapshot_reads_fresh_state(self, stores):
        surveys, responses = stores
        s = surveys.create("A")
        engine = AnalyticsEngine(surveys, responses, rng=random.Random(0))
        assert engine.compute(s.id).total_responses == 0
        responses.submit(s.id, {})
        assert engine.compute(s.id).total_responses == 1

    def test_export_uses_survey_responses(self, stores):
        surveys, responses = stores
        s = surveys.create("A")
        record = responses.submit(s.id, {}, client_meta="UA")
        responses.submit("other", {})
        text = AnalyticsEngine(surveys, responses).export(s.id, "csv")
        assert text.splitlines()[1] == f"{record.id},{s.id},{record.submitted_at},UA"
        assert len(text.splitlines()) == 2

    def test_snapshot_to_dict(self, stores):
        surveys, responses = stores
        s = surveys.create("A")
        d = AnalyticsEngine(surveys, responses, rng=random.Random(0)).compute(s.id).to_dict()
        assert set(d) == {
            "totalResponses", "completionRate", "averageTime", "responsesByDate",
            "questionAnalytics", "demographics", "dropoffPoints",
        }


def test_module_export_delegates():
    record = ResponseRecord(id="1", survey_id="s1", submitted_at="2024-01-01T00:00:00Z", client_meta="UA")
    assert export([record], "csv").endswith("1,s1,2024-01-01T00:00:00Z,UA")
