# app/main.py
from contextlib import asynccontextmanager
from fastapi import FastAPI
from app.config import settings
from app.database import engine, Base
from app.routers import criteria, employees, scores, ranking
import logging
from sqlalchemy import exc as sa_exc

# Register every table on Base.metadata
from app.models.criterion import EvaluationCriterion
from app.models.employee import Employee
from app.models.score import EmployeeScore
from app.models.ranking import EmployeeRanking

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# Create DB Tables (development convenience; production uses Alembic)
@asynccontextmanager
async def lifespan(app: FastAPI):
    # ignore duplicate-object errors from previous partial runs
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.IntegrityError as e:
            msg = str(getattr(e, "orig", e))
            if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                logger.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise
    yield
    await engine.dispose()


app = FastAPI(title="Staff Ranking Service", version="1.0", lifespan=lifespan)

# Include Routers
app.include_router(criteria.router)
app.include_router(employees.router)
app.include_router(scores.router)
app.include_router(ranking.router)

@app.get("/")
def read_root():
    return {"message": "Welcome to the Staff Ranking Service"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
