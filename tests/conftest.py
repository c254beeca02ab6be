"""Shared test fixtures."""

import json

import pytest

from shop_pipeline.database.connection import DatabaseConnection
from shop_pipeline.database.models import Quote, WorkOrder
from shop_pipeline.database.repository import Repository
from shop_pipeline.database.schema import initialize_database


@pytest.fixture
def db_path(tmp_path):
    """Provide a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def db(db_path):
    """Provide an initialized database connection."""
    conn = DatabaseConnection(db_path)
    initialize_database(conn)
    return conn


@pytest.fixture
def repo(db):
    """Provide a repository with an initialized database."""
    return Repository(db)


@pytest.fixture
def make_work_order():
    """Build an in-memory WorkOrder from plain Python values."""
    def _make(id="OT-0001", stage="reception", status="scheduled",
              diagnostic=None, quote_ids=None, **kwargs):
        return WorkOrder(
            id=id,
            stage=stage,
            status=status,
            diagnostic_data=json.dumps(diagnostic or {}),
            linked_quote_ids=json.dumps(quote_ids or []),
            **kwargs,
        )
    return _make


@pytest.fixture
def stored_order(repo):
    """Create a work order plus quotes in the database.

    ``quotes`` is a list of quote statuses; the quotes are created and
    linked in that order.
    """
    def _create(stage="pending_quote", status="scheduled",
                diagnostic=None, quotes=()):
        wo = WorkOrder(
            client_name="Ana Ruiz",
            vehicle="Toyota Corolla (ABC-123)",
            service_requested="Brake noise",
            stage=stage,
            status=status,
            diagnostic_data=json.dumps(
                {"notes": "ok"} if diagnostic is None else diagnostic
            ),
        )
        repo.create_work_order(wo)
        quote_ids = []
        for quote_status in quotes:
            quote_ids.append(repo.create_quote(Quote(
                work_order_id=wo.id, status=quote_status, total=100.0,
            )))
        if quote_ids:
            repo.set_linked_quote_ids(wo.id, quote_ids)
        return repo.get_work_order_by_id(wo.id)
    return _create
