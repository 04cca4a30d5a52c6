from pydantic import BaseModel, Field, ValidationError, field_validator

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class EngineSettings(BaseModel):
    max_reasons: int = Field(3, ge=0, le=10)
    history_window_days: int = Field(7, ge=1, le=365)
    cache_enabled: bool = True
    log_level: str = "INFO"
    db_path: str = "wellness.db"
    calorie_goal: int = Field(2000, gt=0)
    protein_goal: int = Field(150, gt=0)
    water_goal: int = Field(8, gt=0)
    exercise_goal_minutes: int = Field(30, gt=0)
    api_token: str | None = None

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    def goals(self) -> dict:
        return {
            "calories": self.calorie_goal,
            "protein": self.protein_goal,
            "water": self.water_goal,
            "exercise_minutes": self.exercise_goal_minutes,
        }


def validate_settings(data: dict) -> EngineSettings:
    try:
        return EngineSettings(**data)
    except ValidationError as e:
        raise ValueError(str(e))
