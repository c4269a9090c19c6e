"""
Demo: Build the example survey, submit responses and print the analytics.
"""

import json

from surveyengine.analytics import AnalyticsEngine
from surveyengine.config import configure_logging
from surveyengine.examples import build_example_satisfaction_survey, submit_example_responses
from surveyengine.persistence import MemoryAdapter
from surveyengine.store import ResponseStore, SurveyStore


def print_report(survey, report):
    """Pretty-print a SurveyAnalytics snapshot."""
    print()
    print("=" * 70)
    print(f"SURVEY ANALYTICS: {survey.title}")
    print("=" * 70)
    print()

    print("📊 BASIC METRICS")
    print(f"  Total Responses:       {report.total_responses}")
    print(f"  Completion Rate:       {report.completion_rate}%")
    print(f"  Average Time:          {report.average_time}s")
    print()

    print("📅 RESPONSES BY DATE")
    for entry in report.responses_by_date:
        print(f"  {entry.date}: {entry.count}")
    print()

    print("❓ QUESTIONS")
    for question in survey.questions:
        tally = report.question_analytics.get(question.id)
        if tally is None:
            print(f"  {question.title}: no answers")
            continue
        print(f"  {question.title} ({tally.total_responses} answered)")
        for value, count in sorted(tally.answer_counts.items(), key=lambda kv: -kv[1]):
            print(f"    {value}: {count} ({tally.percentage(value):.0f}%)")
    print()

    print("⚠️  Demographics below are synthetic placeholders")
    print(json.dumps(report.demographics, indent=2))
    print()


if __name__ == "__main__":
    configure_logging("WARNING")

    adapter = MemoryAdapter()
    surveys = SurveyStore(adapter)
    responses = ResponseStore(adapter)

    survey = build_example_satisfaction_survey(surveys)
    submit_example_responses(survey, responses, count=12)

    engine = AnalyticsEngine(surveys, responses)
    print_report(survey, engine.compute(survey.id))

    overall = engine.compute()
    print("OVERALL")
    print(json.dumps(overall.to_dict(), indent=2))
