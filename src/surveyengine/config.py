"""
Runtime configuration.

Settings come from SURVEYENGINE_* environment variables, with a .env file
in the working directory loaded first (python-dotenv). build_adapter turns
the storage settings into a PersistenceAdapter, and configure_logging
installs the package log format.
"""

import logging
import os

from dotenv import load_dotenv

from .persistence import JsonFileAdapter, PersistenceAdapter, YamlFileAdapter

load_dotenv()

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default=None):
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


class Settings:
    """
    Configuration values, one class attribute per setting.

    The environment (and .env) is read once, when this module is first
    imported. Changing a variable afterwards has no effect on Settings;
    override the attribute on an instance instead:

        settings = Settings()
        settings.STRICT_LOOKUPS = True
        store = SurveyStore(adapter, settings=settings)
    """

    DATA_DIR = os.getenv("SURVEYENGINE_DATA_DIR", "data")
    STORAGE_FORMAT = os.getenv("SURVEYENGINE_STORAGE_FORMAT", "json")
    SURVEYS_COLLECTION = os.getenv("SURVEYENGINE_SURVEYS_COLLECTION", "surveys")
    RESPONSES_COLLECTION = os.getenv("SURVEYENGINE_RESPONSES_COLLECTION", "surveyResponses")
    # unknown ids raise NotFoundError instead of being ignored
    STRICT_LOOKUPS = _env_bool("SURVEYENGINE_STRICT_LOOKUPS")
    RANDOM_SEED = _env_int("SURVEYENGINE_RANDOM_SEED")
    TOP_SURVEYS = _env_int("SURVEYENGINE_TOP_SURVEYS", 5)
    TREND_DAYS = _env_int("SURVEYENGINE_TREND_DAYS", 31)
    # placeholder range (seconds) for records without a time spent
    TIME_SPENT_FALLBACK = (60, 360)
    LOG_LEVEL = os.getenv("SURVEYENGINE_LOG_LEVEL", "INFO")


def build_adapter(settings: Settings = None) -> PersistenceAdapter:
    settings = settings or Settings()
    fmt = settings.STORAGE_FORMAT.lower()
    if fmt == "json":
        return JsonFileAdapter(settings.DATA_DIR)
    if fmt in ("yaml", "yml"):
        return YamlFileAdapter(settings.DATA_DIR)
    raise ValueError(f"Unsupported storage format: {settings.STORAGE_FORMAT}")


def configure_logging(level=None) -> logging.Logger:
    """Attach a stream handler to the package logger. Safe to call twice."""
    logger = logging.getLogger("surveyengine")
    level = level or Settings.LOG_LEVEL
    logger.setLevel(level)
    if not any(getattr(h, "_surveyengine", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._surveyengine = True
        logger.addHandler(handler)
    return logger
