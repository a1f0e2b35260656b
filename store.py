"""
Scenario persistence.

A scenario is a named snapshot of business inputs together with the
results computed from them at creation time.  Results are stored as
JSON text and are never recomputed on read, so a saved scenario keeps
the figures it was created with even if the calculation changes later.

The store wraps a SQLAlchemy engine and is passed explicitly to the
API and the Streamlit form.  The ``scenarios`` table is created when the
store is constructed if it does not exist yet.
"""

import json
import logging
import uuid
from typing import Dict, List

from sqlalchemy import Column, DateTime, String, Text, create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from calculator import calculate_results, json_safe
from errors import ConflictError, NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

Base = declarative_base()


class ScenarioRecord(Base):
    __tablename__ = "scenarios"

    id = Column(String, primary_key=True)
    name = Column(String, unique=True)
    inputs = Column(Text)
    results = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    def summary(self) -> Dict:
        return {"id": self.id, "name": self.name}

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "inputs": json.loads(self.inputs),
            "results": json.loads(self.results),
            "created_at": self.created_at,
        }


class ScenarioStore:
    """Create, list, fetch and delete saved scenarios."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        try:
            Base.metadata.create_all(engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc

    def create(self, name: str, inputs: Dict) -> Dict:
        """Compute results for ``inputs`` and save them under ``name``.

        Raises
        ------
        ValidationError
            If ``name`` is empty or missing.
        ConflictError
            If a scenario with the same name already exists.
        PersistenceError
            For any other database failure.
        """
        if not name:
            raise ValidationError("Scenario name required")
        scenario_id = str(uuid.uuid4())
        results = calculate_results(inputs)
        record = ScenarioRecord(
            id=scenario_id,
            name=name,
            inputs=json.dumps(inputs),
            results=json.dumps(json_safe(results)),
        )
        try:
            with self._session_factory() as session, session.begin():
                session.add(record)
        except IntegrityError as exc:
            raise ConflictError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
        logger.info("Created scenario %s (%s)", scenario_id, name)
        return {"id": scenario_id, "name": name}

    def list(self) -> List[Dict]:
        try:
            with self._session_factory() as session:
                records = session.scalars(select(ScenarioRecord)).all()
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
        return [record.summary() for record in records]

    def get(self, scenario_id: str) -> Dict:
        """Return the full stored record, raising ``NotFoundError`` if absent."""
        try:
            with self._session_factory() as session:
                record = session.get(ScenarioRecord, scenario_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
        if record is None:
            raise NotFoundError("Not found")
        logger.debug("Loaded scenario %s", scenario_id)
        return record.to_dict()

    def delete(self, scenario_id: str) -> bool:
        try:
            with self._session_factory() as session, session.begin():
                removed = session.query(ScenarioRecord).filter(
                    ScenarioRecord.id == scenario_id).delete()
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
        if removed == 0:
            raise NotFoundError("Not found")
        logger.info("Deleted scenario %s", scenario_id)
        return True


def store_from_url(database_url: str) -> ScenarioStore:
    """Open (and if needed initialise) the store at ``database_url``."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # The development server may hand requests to other threads.
        connect_args["check_same_thread"] = False
    return ScenarioStore(create_engine(database_url, connect_args=connect_args))
