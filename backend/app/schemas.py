"""
Lesson record schemas.

`Lesson` validates content loaded from either file format; field names on the
wire are camelCase (`starterCode`), matching what the browser client reads.
"""

from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt

Difficulty = Literal["beginner", "intermediate", "advanced"]

DEFAULT_TRACK = "general"


class LessonSummary(BaseModel):
    id: int
    title: str
    track: str
    difficulty: Difficulty


class Lesson(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: StrictInt
    title: str = Field(min_length=1)
    track: str = DEFAULT_TRACK
    difficulty: Difficulty = "beginner"
    body: str = Field(validation_alias=AliasChoices("body", "explanation"))
    starter_code: str = Field(
        validation_alias=AliasChoices("starterCode", "starter_code"),
        serialization_alias="starterCode",
    )
    solution: str

    def summary(self) -> LessonSummary:
        return LessonSummary(
            id=self.id,
            title=self.title,
            track=self.track,
            difficulty=self.difficulty,
        )

    def public(self, html: str) -> dict:
        return {**self.model_dump(by_alias=True), "html": html}
