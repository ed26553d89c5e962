"""Settings model for Git Productivity."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_TIMER_MINUTES = 30
DEFAULT_COMMIT_TEMPLATE = "Log coding activity: {timestamp}"


class Settings(BaseModel):
    """User settings, read once per workspace session creation."""

    timer_duration_minutes: float = Field(default=DEFAULT_TIMER_MINUTES, gt=0)
    commit_message_template: str = DEFAULT_COMMIT_TEMPLATE
    debug_log: Path = Path.home() / ".git-productivity" / "debug.log"

    @field_validator("commit_message_template")
    @classmethod
    def _template_has_timestamp(cls, value: str) -> str:
        if "{timestamp}" not in value:
            raise ValueError("commit_message_template must contain '{timestamp}'")
        return value

    @property
    def timer_duration(self) -> float:
        """Get the timer duration in seconds."""
        return self.timer_duration_minutes * 60

    model_config = {"arbitrary_types_allowed": True}
