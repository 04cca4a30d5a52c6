import datetime
from typing import Dict, List

from fastapi import Body, FastAPI, Header, HTTPException
from pydantic import BaseModel, Field

from config import APP_VERSION, YamlConfig, configure_logging
from cycling_service import UnknownPatternError, list_patterns
from db import HistoryRepository
from engine_service import WellnessEngine
from exercise_library import injury_prevention_plan, plateau_strategies
from history_service import NO_DATA
from settings_schema import EngineSettings, validate_settings


class DailyTotals(BaseModel):
    calories: float | None = None
    protein: float | None = None
    water: float | None = None
    exercise_minutes: float | None = None
    sleep_hours: float | None = None
    fasting_completed: bool | None = None
    habits_completed: int | None = None
    habits_total: int | None = None


class Goals(BaseModel):
    calories: float | None = None
    protein: float | None = None
    water: float | None = None
    exercise_minutes: float | None = None


class FitnessRequest(BaseModel):
    totals: DailyTotals = Field(default_factory=DailyTotals)
    goals: Goals | None = None
    date: str | None = None


class RecoveryRequest(BaseModel):
    hrv: float | None = None
    hrv_baseline: float | None = None
    resting_hr: float | None = None
    resting_hr_baseline: float | None = None
    sleep_hours: float | None = None
    sleep_quality: float | None = None
    soreness: Dict[str, float] | None = None
    energy: float | None = None


class DeloadRequest(BaseModel):
    weeks_since_deload: int | None = None
    sleep_quality: float | None = None
    performance_trend: str | None = None
    mood: float | None = None
    soreness: float | None = None
    motivation: float | None = None


class PlanRequest(BaseModel):
    goal: str = "general"
    experience_level: float = 3
    days_per_week: float = 4
    weeks_duration: int = 12
    equipment: List[str] = Field(default_factory=list)
    injuries: str = ""


class CyclingRequest(BaseModel):
    baseline_goal: int
    overrides: Dict[int, str] = Field(default_factory=dict)
    maintenance_calories: int | None = None
    week_start: str | None = None


class Workout(BaseModel):
    type: str = ""
    duration_minutes: float = 0


def _parse_date(value: str | None, name: str = "date") -> datetime.date:
    if value is None:
        return datetime.date.today()
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        raise HTTPException(
            status_code=400, detail=f"{name} must be in YYYY-MM-DD format"
        )


class EngineAPI:
    """Provides REST endpoints for the scoring and planning engine."""

    def __init__(
        self, db_path: str = "wellness.db", yaml_path: str = "settings.yaml"
    ) -> None:
        self.config = YamlConfig(yaml_path)
        self.settings = validate_settings(self.config.load())
        self.db_path = db_path
        self.engine = WellnessEngine(
            self.settings,
            store_factory=lambda kind: HistoryRepository(self.db_path, kind),
        )
        self.app = FastAPI(title="Wellness Engine API", version=APP_VERSION)
        self._setup_routes()

    def _check_key(self, x_api_key: str | None) -> None:
        token = self.settings.api_token
        if token and x_api_key != token:
            raise HTTPException(status_code=401, detail="invalid API key")

    def _public_settings(self) -> dict:
        data = self.settings.model_dump()
        data["api_token"] = self.settings.api_token is not None
        return data

    def _setup_routes(self) -> None:
        @self.app.get("/health")
        def health():
            return {"status": "ok", "version": APP_VERSION}

        @self.app.post("/scores/fitness")
        def fitness_score(req: FitnessRequest, x_api_key: str | None = Header(None)):
            totals = req.totals.model_dump(exclude_none=True)
            goals = req.goals.model_dump(exclude_none=True) if req.goals else None
            if req.date is not None:
                self._check_key(x_api_key)
                day = _parse_date(req.date)
                breakdown = self.engine.record_fitness(day, totals, goals)
            else:
                breakdown = self.engine.fitness_score(totals, goals)
            return breakdown.to_dict()

        @self.app.post("/scores/recovery")
        def recovery_score(req: RecoveryRequest):
            return self.engine.recovery_score(req.model_dump(exclude_none=True)).to_dict()

        @self.app.post("/strain")
        def strain(workouts: List[Workout] = Body(...)):
            return {
                "strain": self.engine.daily_strain([w.model_dump() for w in workouts])
            }

        @self.app.post("/deload")
        def deload(req: DeloadRequest):
            return self.engine.deload(req.model_dump(exclude_none=True)).to_dict()

        @self.app.post("/training_plans")
        def training_plan(req: PlanRequest):
            try:
                plan = self.engine.training_plan(req.model_dump())
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return plan.to_dict()

        @self.app.get("/injury_prevention")
        def injury_prevention(areas: str | None = None):
            if areas is None:
                return injury_prevention_plan()
            return injury_prevention_plan([a for a in areas.split(",") if a.strip()])

        @self.app.get("/plateau_strategies/{plateau_type}")
        def plateau(plateau_type: str):
            return plateau_strategies(plateau_type)

        @self.app.get("/cycling/patterns")
        def cycling_patterns():
            return list_patterns()

        @self.app.post("/cycling/{pattern}/schedule")
        def cycling_schedule(pattern: str, req: CyclingRequest):
            week_start = (
                _parse_date(req.week_start, "week_start") if req.week_start else None
            )
            try:
                schedule = self.engine.cycling_schedule(
                    pattern,
                    req.baseline_goal,
                    req.overrides,
                    req.maintenance_calories,
                    week_start,
                )
            except UnknownPatternError as e:
                raise HTTPException(status_code=404, detail=str(e.args[0]))
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return schedule.to_dict()

        @self.app.get("/refeed")
        def refeed(deficit_percent: float, maintenance_calories: int | None = None):
            try:
                result = self.engine.refeed(deficit_percent, maintenance_calories)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return result.to_dict()

        @self.app.put("/history/{kind}/{date}")
        def save_history(
            kind: str,
            date: str,
            record: dict = Body(...),
            x_api_key: str | None = Header(None),
        ):
            self._check_key(x_api_key)
            day = _parse_date(date)
            try:
                saved = self.engine.history(kind).save(day, record)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"kind": kind, "date": saved}

        @self.app.delete("/history/{kind}/{date}")
        def delete_history(kind: str, date: str, x_api_key: str | None = Header(None)):
            self._check_key(x_api_key)
            day = _parse_date(date)
            try:
                deleted = self.engine.history(kind).delete(day)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return {"kind": kind, "date": deleted, "status": "deleted"}

        @self.app.get("/history/{kind}")
        def list_history(kind: str, end_date: str | None = None, days: int | None = None):
            end = _parse_date(end_date, "end_date")
            entries = self.engine.history(kind).window(end, days)
            return [e.to_dict() for e in entries]

        @self.app.get("/history/{kind}/average")
        def history_average(
            kind: str,
            end_date: str | None = None,
            days: int | None = None,
            field: str = "score",
        ):
            end = _parse_date(end_date, "end_date")
            value = self.engine.history(kind).average(end, days, field)
            if value is NO_DATA:
                return {"has_data": False, "average": None}
            return {"has_data": True, "average": value}

        @self.app.get("/history/{kind}/trend")
        def history_trend(
            kind: str,
            end_date: str | None = None,
            days: int | None = None,
            field: str = "score",
        ):
            end = _parse_date(end_date, "end_date")
            trend = self.engine.history(kind).trend(end, days, field)
            if trend is NO_DATA:
                return {"has_data": False}
            return {"has_data": True, **trend.to_dict()}

        @self.app.get("/history/{kind}/weekly")
        def history_weekly(kind: str, end_date: str | None = None, field: str = "score"):
            end = _parse_date(end_date, "end_date")
            return self.engine.history(kind).weekly_series(end, field)

        @self.app.get("/settings/general")
        def get_general_settings():
            return self._public_settings()

        @self.app.post("/settings/general")
        def update_general_settings(
            changes: dict = Body(...), x_api_key: str | None = Header(None)
        ):
            self._check_key(x_api_key)
            unknown = sorted(set(changes) - set(EngineSettings.model_fields))
            if unknown:
                raise HTTPException(
                    status_code=400, detail=f"unknown settings: {', '.join(unknown)}"
                )
            data = self.settings.model_dump(exclude_none=True)
            data.update(changes)
            try:
                settings = validate_settings(data)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            self.config.save(settings.model_dump(exclude_none=True))
            self.settings = settings
            self.engine.update_settings(settings)
            return self._public_settings()


api = EngineAPI()
app = api.app

if __name__ == "__main__":
    import uvicorn

    configure_logging(api.settings.log_level)
    uvicorn.run(app)
