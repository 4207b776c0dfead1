import logging
import os

from dotenv import load_dotenv

from .rubric import RubricConfig, get_rubric

load_dotenv()

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB

RUBRIC_PRESET = os.getenv("ATS_RUBRIC_PRESET", "devops")
RUBRIC_FILE = os.getenv("ATS_RUBRIC_FILE")
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

logger = logging.getLogger(__name__)


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_rubric() -> RubricConfig:
    """
    Rubric selected by the environment: a JSON file from ATS_RUBRIC_FILE if set,
    otherwise the ATS_RUBRIC_PRESET preset.
    """
    if RUBRIC_FILE:
        logger.info(f"Loading rubric from {RUBRIC_FILE}")
        return RubricConfig.from_file(RUBRIC_FILE)
    return get_rubric(RUBRIC_PRESET)
