import asyncio
from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.database import Base
from app.models.criterion import EvaluationCriterion
from app.models.employee import Employee
from app.models.ranking import EmployeeRanking
from app.models.score import EmployeeScore
from app.services.ranking import RankingService
from app.services.ranking_cache import RankingCache


@pytest.fixture
def session_factory(tmp_path):
    # NullPool: every asyncio.run / TestClient request gets a fresh connection on its own loop
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ranking.db'}", poolclass=NullPool)

    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_tables())
    yield async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
    asyncio.run(engine.dispose())


@pytest.fixture
def service(session_factory):
    return RankingService(session_factory, RankingCache(ttl_seconds=300), batch_size=2)


class Store:
    """Synchronous helpers to seed and inspect the test database."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def add(self, *objects):
        async def _add():
            async with self.session_factory() as session:
                session.add_all(objects)
                await session.commit()
        asyncio.run(_add())
        return objects

    def criterion(self, name, weight, direction="higher_is_better", key=None, display_order=0, active=True):
        return self.add(EvaluationCriterion(
            name=name, weight=weight, direction=direction, key=key,
            display_order=display_order, active=active,
        ))[0]

    def employee(self, name, department="Operations", position="Analyst", active=True):
        return self.add(Employee(name=name, department=department, position=position, active=active))[0]

    def score(self, employee, criterion, period, raw_value):
        return self.add(EmployeeScore(
            employee_id=employee.id, criterion_id=criterion.id, period=period, raw_value=raw_value,
        ))[0]

    def all(self, model, *where):
        async def _all():
            async with self.session_factory() as session:
                result = await session.execute(select(model).where(*where).order_by(model.id))
                return list(result.scalars().all())
        return asyncio.run(_all())

    def rankings(self, period: date):
        rows = self.all(EmployeeRanking, EmployeeRanking.period == period)
        return sorted(rows, key=lambda r: r.rank_position)

    def scores(self, period=None):
        if period is None:
            return self.all(EmployeeScore)
        return self.all(EmployeeScore, EmployeeScore.period == period)

    def update(self, model, object_id, **values):
        async def _update():
            async with self.session_factory() as session:
                obj = await session.get(model, object_id)
                for field, value in values.items():
                    setattr(obj, field, value)
                await session.commit()
        asyncio.run(_update())


@pytest.fixture
def store(session_factory):
    return Store(session_factory)
