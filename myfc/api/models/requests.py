"""
Pydantic models for API request bodies.
"""

from pydantic import AliasChoices, BaseModel, Field


class ToggleBookmarkBody(BaseModel):
    """Toggle request body; the workout id may also arrive as a query parameter."""

    workout_id: str | int | None = Field(
        default=None, validation_alias=AliasChoices("workoutId", "workout_id")
    )

    model_config = {"extra": "ignore"}
