"""
Example survey builder for demos and tests.

Builds a small customer satisfaction survey through the stores (so ids,
timestamps and option sanitation are the real ones) and optionally
submits a handful of responses against it.
"""
import random

from surveyengine.model import Question, QuestionType, Survey
from surveyengine.store import ResponseStore, SurveyStore

FEATURES = ["Speed", "Price", "Support", "Design"]
CHANNELS = ["Search engine", "Friend", "Advertisement"]


def build_example_satisfaction_survey(store: SurveyStore) -> Survey:
    survey = store.create("Customer Satisfaction", "Quarterly pulse survey")

    store.add_question(Question(
        title="How would you rate us overall?",
        type=QuestionType.RATING,
        required=True,
    ))
    store.add_question(Question(
        title="Which features do you use?",
        type=QuestionType.CHECKBOX,
        options=FEATURES + [" ", ""],
    ))
    store.add_question(Question(
        title="How did you hear about us?",
        type=QuestionType.MULTIPLE_CHOICE,
        options=CHANNELS,
    ))
    store.add_question(Question(
        title="Anything else?",
        type=QuestionType.TEXTAREA,
    ))

    return survey


def submit_example_responses(survey: Survey, responses: ResponseStore, count: int = 10, seed: int = 7) -> None:
    rng = random.Random(seed)
    rating, features, channel, comment = survey.questions
    for i in range(count):
        answers = {
            rating.id: rng.randint(1, 5),
            features.id: rng.sample(FEATURES, rng.randint(1, len(FEATURES))),
            channel.id: rng.choice(CHANNELS),
        }
        if i % 3 == 0:
            answers[comment.id] = "Keep it up"
        responses.submit(
            survey.id,
            answers,
            time_spent_seconds=rng.randint(30, 400),
            completed=i % 5 != 4,
            client_meta="Mozilla/5.0 (X11; Linux x86_64)",
            survey=survey,
        )
