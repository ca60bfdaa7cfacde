"""
Flat-file content store backing the lesson catalog.

Every call re-reads the directory from scratch; there is no in-memory index,
so edits to lesson files show up on the next request.
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from pydantic import ValidationError

from .errors import (
    ContentStoreError,
    LessonNotFound,
    LessonParseError,
    LessonValidationError,
    MalformedLesson,
)
from .metrics import record_lesson_lookup, record_lesson_skipped, record_store_scan
from .parser import (
    INTEGER_ID,
    JsonSource,
    candidate_id,
    extract_fields,
    is_lesson_file,
    read_source,
    render_markdown,
)
from .schemas import DEFAULT_TRACK, Lesson, LessonSummary

logger = logging.getLogger(__name__)


def validation_message(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(item) for item in error.get("loc", ())) or "lesson"
        parts.append(f"{loc}: {error.get('msg')}")
    return "; ".join(parts)


class ContentStore:
    def __init__(self, root, allow_raw_html: bool = False):
        self.root = Path(root)
        self.allow_raw_html = allow_raw_html

    def default_track(self, path: Path) -> str:
        relative = path.relative_to(self.root)
        if len(relative.parts) > 1:
            return relative.parts[0]
        return DEFAULT_TRACK

    def lesson_files(self) -> List[Path]:
        if not self.root.is_dir():
            raise ContentStoreError(f"Content directory {self.root} is not readable.")
        try:
            return sorted(
                path
                for path in self.root.rglob("*")
                if path.is_file()
                and is_lesson_file(path)
                and not any(part.startswith(".") for part in path.relative_to(self.root).parts)
            )
        except OSError as exc:
            raise ContentStoreError(f"Content directory {self.root} is not readable: {exc}") from exc

    def load(self, path: Path) -> Lesson:
        """Parse and validate one file. Raises LessonParseError or LessonValidationError."""
        source = read_source(path)
        fields = extract_fields(source)
        values = fields.values
        # Root-level <n>.json files without an id take it from the filename.
        if (
            isinstance(source, JsonSource)
            and "id" not in values
            and path.parent == self.root
            and INTEGER_ID.fullmatch(path.stem)
        ):
            values["id"] = int(path.stem)
        if not values.get("track"):
            values["track"] = self.default_track(path)
        try:
            return Lesson.model_validate(values)
        except ValidationError as exc:
            raise LessonValidationError(path, validation_message(exc), candidate_id(fields)) from exc

    def iter_lessons(self) -> Iterator[Lesson]:
        """Yield every valid lesson once, skipping broken files and duplicate ids."""
        seen = {}
        for path in self.lesson_files():
            try:
                lesson = self.load(path)
            except LessonParseError as exc:
                logger.warning("Skipping %s: %s", path, exc.reason)
                record_lesson_skipped("parse")
                continue
            except LessonValidationError as exc:
                logger.warning("Skipping %s: invalid lesson (%s)", path, exc.reason)
                record_lesson_skipped("validation")
                continue
            if lesson.id in seen:
                logger.warning(
                    "Skipping %s: lesson id %s already defined by %s", path, lesson.id, seen[lesson.id]
                )
                record_lesson_skipped("duplicate")
                continue
            seen[lesson.id] = path
            yield lesson

    def list_lessons(self) -> List[LessonSummary]:
        start = time.perf_counter()
        lessons = sorted(self.iter_lessons(), key=lambda lesson: lesson.id)
        record_store_scan(time.perf_counter() - start)
        return [lesson.summary() for lesson in lessons]

    def get_lesson(self, lesson_id: int) -> Lesson:
        """Return the first valid record claiming ``lesson_id`` in sorted path order.

        This is the record ``iter_lessons`` keeps, so the detail view matches the
        catalog. Invalid files claiming the id only count when no valid one does.
        """
        malformed = None
        for path in self.lesson_files():
            try:
                lesson = self.load(path)
            except LessonParseError as exc:
                logger.warning("Skipping %s: %s", path, exc.reason)
                continue
            except LessonValidationError as exc:
                if exc.lesson_id == lesson_id and malformed is None:
                    malformed = exc
                continue
            if lesson.id == lesson_id:
                record_lesson_lookup("found")
                return lesson

        if malformed is not None:
            logger.warning("Lesson %s in %s is malformed: %s", lesson_id, malformed.path, malformed.reason)
            record_lesson_lookup("malformed")
            raise MalformedLesson(lesson_id, malformed.reason) from malformed
        record_lesson_lookup("not_found")
        raise LessonNotFound(lesson_id)

    def neighbours(
        self, lesson_id: int, summaries: Optional[List[LessonSummary]] = None
    ) -> Tuple[Optional[int], Optional[int]]:
        if summaries is None:
            summaries = self.list_lessons()
        ids = [summary.id for summary in summaries]
        previous_id = max((i for i in ids if i < lesson_id), default=None)
        next_id = min((i for i in ids if i > lesson_id), default=None)
        return previous_id, next_id

    def render_body(self, lesson: Lesson) -> str:
        return render_markdown(lesson.body, allow_raw_html=self.allow_raw_html)
