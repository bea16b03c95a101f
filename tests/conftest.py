"""Pytest fixtures and configuration for FusionCaller lead intake tests."""

import os
import uuid
import pytest
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generator, List, Optional
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

# Set test environment variables before importing app
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-key")
os.environ.setdefault("OPENAI_API_KEY", "sk-test")
os.environ.setdefault("VAPI_API_KEY", "vapi-test")
os.environ.setdefault("DEBUG", "true")

from fusioncaller.core.config import Settings
from fusioncaller.core.database import DatabaseService
from fusioncaller.intelligence.service_detector import ServiceDetector
from fusioncaller.models import CallNotPlaced, ClassifierOutput, WorkflowRunResult
from fusioncaller.services.form_intake import FormIntakeOrchestrator
from fusioncaller.services.lead_repository import LeadRepository


ORG_ID = "org-1"
OTHER_ORG_ID = "org-2"


# ===========================================
# In-memory Supabase
# ===========================================

class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]]):
        self.data = data


class FakeQuery:
    """Chainable stand-in for the postgrest query builder."""

    def __init__(self, client: "FakeSupabaseClient", table: str):
        self._client = client
        self._table = table
        self._op = "select"
        self._payload: Any = None
        self._filters: List[Callable[[Dict[str, Any]], bool]] = []
        self._limit: Optional[int] = None

    def select(self, *columns, **kwargs):
        self._op = "select"
        return self

    def insert(self, payload):
        self._op = "insert"
        self._payload = payload
        return self

    def update(self, payload):
        self._op = "update"
        self._payload = payload
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, *args, **kwargs):
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _matching(self) -> List[Dict[str, Any]]:
        rows = self._client.tables.setdefault(self._table, [])
        return [row for row in rows if all(f(row) for f in self._filters)]

    def execute(self) -> FakeResponse:
        self._client.executed.append((self._table, self._op))
        if self._table in self._client.failing_tables:
            raise RuntimeError(f"connection to {self._table} failed")

        if self._op == "insert":
            rows = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = []
            for row in rows:
                stored = deepcopy(row)
                stored.setdefault("id", str(uuid.uuid4()))
                stored.setdefault("created_at", datetime.now(timezone.utc).isoformat())
                self._client.tables.setdefault(self._table, []).append(stored)
                inserted.append(deepcopy(stored))
            return FakeResponse(inserted)

        matching = self._matching()

        if self._op == "update":
            for row in matching:
                row.update(deepcopy(self._payload))
            return FakeResponse([deepcopy(row) for row in matching])

        if self._limit is not None:
            matching = matching[:self._limit]
        return FakeResponse([deepcopy(row) for row in matching])


class FakeSupabaseClient:
    """Dictionary-of-lists database with the Supabase client's table() entry point."""

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = tables or {}
        self.failing_tables: set = set()
        self.executed: List[tuple] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, name: str) -> List[Dict[str, Any]]:
        return self.tables.get(name, [])


class FakeClassifier:
    """Classifier double that records prompts and replays a fixed outcome."""

    def __init__(self, output: Optional[ClassifierOutput] = None, error: Optional[Exception] = None):
        self.output = output
        self.error = error
        self.prompts: List[str] = []

    async def classify(self, prompt: str, system_prompt: str) -> ClassifierOutput:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.output


# ===========================================
# Sample Data Fixtures
# ===========================================

@pytest.fixture
def sample_form_data() -> Dict[str, Any]:
    """Facebook lead ad submission without an explicit service type."""
    return {
        "organizationId": ORG_ID,
        "name": "Jane Doe",
        "phone": "+15551234567",
        "message": "need my driveway cleaned",
        "source": "facebook",
    }


@pytest.fixture
def sample_lead_row() -> Dict[str, Any]:
    return {
        "id": "lead-1",
        "organization_id": ORG_ID,
        "name": "Jane Doe",
        "phone": "+15551234567",
        "email": None,
        "service_type": "Driveway Cleaning",
        "property_type": "unknown",
        "status": "new",
        "notes": None,
        "created_at": "2026-10-19T14:00:00+00:00",
    }


@pytest.fixture
def fake_supabase() -> FakeSupabaseClient:
    """Database seeded with two organizations and an outbound-ready setup for org-1."""
    return FakeSupabaseClient({
        "organizations": [{"id": ORG_ID}, {"id": OTHER_ORG_ID}],
        "leads": [],
        "agent_configs": [{
            "id": "agent-config-1",
            "organization_id": ORG_ID,
            "outbound_agent_id": "asst_outbound_1",
            "outbound_enabled": True,
            "schedule": {
                "enabledDays": [
                    "monday", "tuesday", "wednesday", "thursday",
                    "friday", "saturday", "sunday"
                ],
                "startTime": "00:00",
                "endTime": "23:59",
                "timezone": "UTC",
            },
            "calls_made_today": 0,
        }],
        "phone_numbers": [{
            "id": "phone-1",
            "organization_id": ORG_ID,
            "phone_number": "+15550001111",
            "provider_phone_id": "vapi_phone_1",
            "type": "outbound",
            "daily_limit": 50,
            "calls_today": 0,
            "last_reset_date": "2026-10-19",
            "active": True,
        }],
        "call_limits": [],
        "calls": [],
        "workflows": [],
        "workflow_executions": [],
    })


@pytest.fixture
def database(fake_supabase) -> DatabaseService:
    return DatabaseService(client=fake_supabase)


@pytest.fixture
def lead_repo(database) -> LeadRepository:
    return LeadRepository(database)


@pytest.fixture
def failing_classifier() -> FakeClassifier:
    return FakeClassifier(error=RuntimeError("OpenAI unavailable"))


@pytest.fixture
def open_settings() -> Settings:
    """Settings with no webhook secret (open mode)."""
    return Settings(_env_file=None, FORM_WEBHOOK_SECRET=None)


@pytest.fixture
def mock_dialer() -> AsyncMock:
    dialer = AsyncMock()
    dialer.initiate_call.return_value = CallNotPlaced(reason="Agent not configured")
    return dialer


@pytest.fixture
def mock_workflows() -> AsyncMock:
    workflows = AsyncMock()
    workflows.trigger.return_value = WorkflowRunResult(executed=0)
    return workflows


@pytest.fixture
def orchestrator(
    database,
    lead_repo,
    failing_classifier,
    mock_dialer,
    mock_workflows,
    open_settings
) -> FormIntakeOrchestrator:
    """Orchestrator over the fake database with a classifier that always fails."""
    return FormIntakeOrchestrator(
        database=database,
        detector=ServiceDetector(classifier=failing_classifier),
        leads=lead_repo,
        dialer=mock_dialer,
        workflows=mock_workflows,
        settings=open_settings,
    )


# ===========================================
# Client Fixtures
# ===========================================

@pytest.fixture
def client(orchestrator, lead_repo, mock_workflows) -> Generator[TestClient, None, None]:
    """Test client with pipeline components swapped for fakes."""
    from fusioncaller.main import app
    from fusioncaller.api.dependencies import (
        get_form_intake,
        get_lead_repository,
        get_workflow_engine,
    )

    app.dependency_overrides[get_form_intake] = lambda: orchestrator
    app.dependency_overrides[get_lead_repository] = lambda: lead_repo
    app.dependency_overrides[get_workflow_engine] = lambda: mock_workflows

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ===========================================
# Pytest Configuration
# ===========================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
