import logging
import os
from pathlib import Path

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "4000"))
LESSONS_DIR = os.getenv("LESSONS_DIR", str(Path(__file__).resolve().parents[2] / "lessons"))
WEB_DIR = os.getenv("WEB_DIR", str(Path(__file__).resolve().parents[2] / "web"))
LESSON_ALLOW_RAW_HTML = os.getenv("LESSON_ALLOW_RAW_HTML", "0").lower() in {"1", "true", "yes"}
SANDBOX_MAX_CODE_SIZE = int(os.getenv("SANDBOX_MAX_CODE_SIZE", "20000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LESSON_API_URL = os.getenv("LESSON_API_URL", "http://localhost:4000")
LESSON_PROGRESS_PATH = os.getenv(
    "LESSON_PROGRESS_PATH", str(Path.home() / ".lesson-viewer" / "progress.json")
)
PROGRESS_STORAGE_KEY = "lesson-progress"


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
