"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from onbored.git.history import NotARepositoryError
from onbored.models import Report
from onbored.service import create_app


class _StubOrchestrator:
    def __init__(self) -> None:
        self.calls: list[dict[str, object]] = []

    def run(self, path: str, *, output_dir=None, ai_provider=None) -> Report:
        self.calls.append({"path": path, "output_dir": output_dir, "ai_provider": ai_provider})
        if not Path(path).exists():
            raise FileNotFoundError(f"Repository path not found: {path}")
        if not (Path(path) / ".git").exists():
            raise NotARepositoryError(f"{path} is not a git repository")
        return Report(repo_name=Path(path).name, total_commits=3)


@pytest.fixture
def orchestrator() -> _StubOrchestrator:
    return _StubOrchestrator()


@pytest.fixture
def client(orchestrator: _StubOrchestrator) -> TestClient:
    return TestClient(create_app(lambda: orchestrator))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_analyze_endpoint_returns_report(client: TestClient, orchestrator, tmp_path: Path) -> None:
    repo_path = tmp_path / "repo"
    (repo_path / ".git").mkdir(parents=True)

    response = client.post("/analyze", json={"path": str(repo_path), "ai_provider": "ollama"})

    assert response.status_code == 200
    data = response.json()
    assert data["repoName"] == "repo"
    assert data["totalCommits"] == 3
    assert data["compliance"]["score"] == 0
    assert orchestrator.calls == [
        {"path": str(repo_path), "output_dir": None, "ai_provider": "ollama"}
    ]


def test_analyze_missing_path_returns_404(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/analyze", json={"path": str(tmp_path / "missing")})

    assert response.status_code == 404
    assert "not found" in response.json()["detail"]


def test_analyze_non_repository_returns_400(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/analyze", json={"path": str(tmp_path)})

    assert response.status_code == 400
    assert "not a git repository" in response.json()["detail"]


def test_analyze_rejects_unknown_provider(client: TestClient, orchestrator, tmp_path: Path) -> None:
    response = client.post("/analyze", json={"path": str(tmp_path), "ai_provider": "gemini"})

    assert response.status_code == 400
    assert orchestrator.calls == []


def test_analyze_requires_path(client: TestClient) -> None:
    response = client.post("/analyze", json={})

    assert response.status_code == 422
