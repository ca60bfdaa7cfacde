class LessonError(Exception):
    pass


class ContentStoreError(LessonError):
    """The content directory itself could not be read."""


class LessonParseError(LessonError):
    def __init__(self, path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class LessonValidationError(LessonError):
    def __init__(self, path, reason: str, lesson_id: int | None = None):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
        self.lesson_id = lesson_id


class LessonNotFound(LessonError):
    def __init__(self, lesson_id: int):
        super().__init__(f"Lesson {lesson_id} not found.")
        self.lesson_id = lesson_id


class MalformedLesson(LessonError):
    def __init__(self, lesson_id: int, reason: str):
        super().__init__(f"Lesson {lesson_id} is malformed: {reason}")
        self.lesson_id = lesson_id
        self.reason = reason
