from __future__ import annotations

from dataclasses import dataclass, field

import pytest
from fastapi.testclient import TestClient

from app.domain.visibility import (
    FailedKeyword,
    PublishOutcome,
    PublishReport,
    PublishStatus,
    RunSummary,
)
from app.errors import ConfigurationError
from app.main import app
from app.services.visibility_run_service import get_visibility_run_service


@dataclass
class FakeRunService:
    calls: list[dict] = field(default_factory=list)
    error: Exception | None = None

    def run(self, **kwargs) -> RunSummary:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        keywords = kwargs["keywords"] or []
        return RunSummary(
            run_date="2025-01-15",
            keywords_total=len(keywords),
            keywords_succeeded=len(keywords) - 1,
            keywords_failed=1,
            offers_total=7,
            rows_total=len(keywords),
            rows_published=len(keywords),
            rows_failed=0,
            failed_keywords=[FailedKeyword(keyword=keywords[-1], error="timeout")],
            publish_outcomes=[
                PublishOutcome(keyword=keyword, status=PublishStatus.DONE, attempts=1)
                for keyword in keywords
            ],
        )

    def replay(self, **kwargs) -> PublishReport:
        self.calls.append(kwargs)
        return PublishReport(
            outcomes=[PublishOutcome(keyword="sales", status=PublishStatus.FAILED, attempts=4, retries=3)]
        )


@pytest.fixture()
def fake_service():
    service = FakeRunService()
    app.dependency_overrides[get_visibility_run_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


def test_run_endpoint_returns_summary(client: TestClient, fake_service: FakeRunService) -> None:
    response = client.post(
        "/visibility/run",
        params=[("keyword", "sales"), ("keyword", "vertrieb"), ("mode", "api"), ("dry_run", "true")],
    )

    assert response.status_code == 200
    body = response.json()
    assert body["keywords_total"] == 2
    assert body["failed_keywords"] == [{"keyword": "vertrieb", "error": "timeout"}]
    assert [outcome["status"] for outcome in body["publish_outcomes"]] == ["done", "done"]
    assert fake_service.calls == [
        {"keywords": ["sales", "vertrieb"], "mode": "api", "publish": True, "dry_run": True}
    ]


def test_run_endpoint_maps_configuration_error_to_400(
    client: TestClient,
    fake_service: FakeRunService,
) -> None:
    fake_service.error = ConfigurationError("Unknown harvest mode='x'.")

    response = client.post("/visibility/run", params={"keyword": "sales", "mode": "x"})

    assert response.status_code == 400
    assert "Unknown harvest mode" in response.json()["detail"]


def test_publish_endpoint_returns_report(client: TestClient, fake_service: FakeRunService) -> None:
    response = client.post("/visibility/publish")

    assert response.status_code == 200
    assert response.json()["failed"] == 1
    assert response.json()["outcomes"][0]["retries"] == 3


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
