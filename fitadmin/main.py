from contextlib import asynccontextmanager

from fastapi import FastAPI

import fitadmin.models as _models  # noqa: F401  registers tables with SQLModel metadata
from fitadmin.config import get_settings
from fitadmin.database import create_db_and_tables
from fitadmin.errors import install_error_handlers
from fitadmin.logging_config import setup_logger
from fitadmin.routers import (
    day_sections,
    equipment,
    exercises,
    plans,
    section_exercises,
    workout_days,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logger(get_settings().log_level)
    create_db_and_tables()
    yield


app = FastAPI(title="Fitness Admin", lifespan=lifespan)
install_error_handlers(app)

app.include_router(plans.router, prefix="/api/plans", tags=["plans"])
app.include_router(workout_days.router, prefix="/api/workout-days", tags=["workout-days"])
app.include_router(day_sections.router, prefix="/api/day-sections", tags=["day-sections"])
app.include_router(
    section_exercises.router, prefix="/api/section-exercises", tags=["section-exercises"]
)
app.include_router(exercises.router, prefix="/api/exercises", tags=["exercises"])
app.include_router(equipment.router, prefix="/api/equipment", tags=["equipment"])
