#!/usr/bin/env python3
"""
Demo: Export the example survey's responses as CSV and JSON files.

Export needs the ``export_data`` permission; pass a role on the command line.
"""

import argparse

from surveyengine.analytics import AnalyticsEngine
from surveyengine.backends import ExportFormat, export_filename, save_export_file
from surveyengine.config import build_adapter, configure_logging
from surveyengine.errors import PermissionDenied
from surveyengine.examples import build_example_satisfaction_survey, submit_example_responses
from surveyengine.permissions import EXPORT_DATA, RolePermissions, require_permission
from surveyengine.store import ResponseStore, SurveyStore


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--role", default="manager", help="admin, manager or user")
    args = parser.parse_args()

    configure_logging()
    adapter = build_adapter()
    surveys = SurveyStore(adapter)
    responses = ResponseStore(adapter)

    survey = build_example_satisfaction_survey(surveys)
    submit_example_responses(survey, responses)
    engine = AnalyticsEngine(surveys, responses)

    try:
        require_permission(RolePermissions(args.role), EXPORT_DATA)
    except PermissionDenied as exc:
        print(f"Export refused: {exc}")
        return 1

    print("=" * 80)
    print("EXPORT DEMO")
    print("=" * 80)
    for fmt in ExportFormat:
        filename = export_filename(survey.id, fmt)
        text = engine.export(survey.id, fmt)
        save_export_file(engine.responses_for(survey.id), filename, fmt)
        print(f"\n{fmt.value.upper()} ({fmt.mime_type}) -> {filename}")
        print("-" * 80)
        for line in text.splitlines()[:5]:
            print(f"   {line}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
