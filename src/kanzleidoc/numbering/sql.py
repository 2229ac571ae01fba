#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.


from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import Column, DateTime, Integer, String, create_engine, update
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"

    tenant_id = Column(String, primary_key=True)
    last_number = Column(Integer, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


def _ensure_sqlite_dir(url: str) -> None:
    parsed = make_url(url)
    if not parsed.drivername.startswith("sqlite"):
        return
    database = parsed.database
    if not database or database == ":memory:":
        return
    Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)


class SqlCounterStore:
    """Counters in the ``sequence_counters`` table.

    The primary key guards the first insert and the update is conditional on
    the value read before, which makes it a compare-and-set.
    """

    def __init__(self, url: str | None = None, *, engine: Engine | None = None) -> None:
        if engine is None:
            if not url:
                raise ValueError("a database url or engine is required")
            _ensure_sqlite_dir(url)
            engine = create_engine(url, pool_pre_ping=True)
        self.engine = engine
        self._sessions = sessionmaker(bind=engine, autocommit=False, autoflush=False)
        Base.metadata.create_all(engine)

    def get(self, tenant_id: str) -> int | None:
        with self._sessions() as session:
            row = session.get(SequenceCounter, tenant_id)
            return None if row is None else int(row.last_number)

    def create(self, tenant_id: str, value: int) -> bool:
        with self._sessions() as session:
            session.add(SequenceCounter(tenant_id=tenant_id, last_number=value))
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                return False
        return True

    def compare_and_set(self, tenant_id: str, expected: int, new: int) -> bool:
        statement = (
            update(SequenceCounter)
            .where(SequenceCounter.tenant_id == tenant_id)
            .where(SequenceCounter.last_number == expected)
            .values(last_number=new, updated_at=_utcnow())
            .execution_options(synchronize_session=False)
        )
        with self._sessions() as session:
            result = session.execute(statement)
            session.commit()
            return result.rowcount == 1

    def dispose(self) -> None:
        self.engine.dispose()
