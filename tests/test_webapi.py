"""Tests for the HTTP binding of the job service."""

import threading

import pytest
from fastapi.testclient import TestClient

from conftest import FakeConverter, wait_until
from docling_jobs.config import Settings
from docling_jobs.jobs import JobService, PageRange
from docling_jobs.webapi import create_app


@pytest.fixture
def converter() -> FakeConverter:
    return FakeConverter()


@pytest.fixture
def client(converter):
    app = create_app(service=JobService(converter, workers=2), settings=Settings())
    with TestClient(app) as c:
        yield c


def _wait_terminal(client: TestClient, job_id: str) -> dict:
    holder: dict = {}

    def done() -> bool:
        holder["job"] = client.get(f"/jobs/{job_id}").json()
        return holder["job"]["state"] in {"completed", "failed"}

    wait_until(done)
    return holder["job"]


def test_root_and_health(client):
    assert client.get("/").json() == {"message": "Docling job service is running."}
    health = client.get("/health")
    assert health.status_code == 200
    body = health.json()
    assert body["status"] == "ok"
    assert body["message"]
    assert set(body["jobs"]) == {"pending", "processing", "completed", "failed"}


def test_submit_returns_accepted_with_pending_job(client):
    response = client.post("/jobs", json={"source": "doc-A"})
    assert response.status_code == 202
    body = response.json()
    assert body["state"] == "pending"
    assert body["links"] == {"self": f"/jobs/{body['id']}", "result": f"/jobs/{body['id']}/result"}
    assert response.headers["location"] == f"/jobs/{body['id']}"

    status = client.get(f"/jobs/{body['id']}")
    assert status.status_code == 200
    assert status.json()["state"] in {"pending", "processing", "completed"}


def test_doc_a_scenario_completes_with_exported_text(client):
    job_id = client.post("/jobs", json={"source": "doc-A"}).json()["id"]
    job = _wait_terminal(client, job_id)
    assert job["state"] == "completed"
    assert job["error"] is None

    result = client.get(f"/jobs/{job_id}/result")
    assert result.status_code == 200
    assert result.json() == {"id": job_id, "result": "converted:doc-A"}


def test_failing_converter_scenario():
    converter = FakeConverter(fail_with="docling could not read the file")
    app = create_app(service=JobService(converter, workers=1), settings=Settings())
    with TestClient(app) as client:
        job_id = client.post("/jobs", json={"source": "broken.pdf"}).json()["id"]
        job = _wait_terminal(client, job_id)
        assert job["state"] == "failed"
        assert job["result"] is None

        result = client.get(f"/jobs/{job_id}/result")
        assert result.status_code == 500
        detail = result.json()["detail"]
        assert detail["code"] == "job_failed"
        assert detail["error"] == "docling could not read the file"


def test_page_range_reaches_converter(client, converter):
    job_id = client.post("/jobs", json={"source": "doc-B", "page_range": [2, 5]}).json()["id"]
    _wait_terminal(client, job_id)
    assert converter.calls == [("doc-B", (PageRange(2, 5),), {})]


def test_without_page_range_converter_gets_no_restriction(client, converter):
    job_id = client.post("/jobs", json={"source": "doc-C"}).json()["id"]
    _wait_terminal(client, job_id)
    assert converter.calls == [("doc-C", (), {})]


def test_result_still_processing_returns_202():
    gate = threading.Event()
    app = create_app(service=JobService(FakeConverter(gate=gate), workers=1), settings=Settings())
    with TestClient(app) as client:
        try:
            job_id = client.post("/jobs", json={"source": "slow"}).json()["id"]
            response = client.get(f"/jobs/{job_id}/result")
            assert response.status_code == 202
            assert response.json()["code"] == "still_processing"
            assert response.json()["state"] in {"pending", "processing"}
        finally:
            gate.set()


@pytest.mark.parametrize("path", ["/jobs/unknown", "/jobs/unknown/result"])
def test_unknown_job_is_404(client, path):
    client.post("/jobs", json={"source": "doc-A"})
    response = client.get(path)
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "not_found"


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"source": ""},
        {"source": "   "},
        {"source": "doc", "page_range": [5]},
        {"source": "doc", "page_range": [5, 2]},
        {"source": "doc", "page_range": [0, 3]},
    ],
)
def test_invalid_submissions_are_rejected(client, body):
    assert client.post("/jobs", json=body).status_code == 422


def test_queue_full_returns_503():
    service = JobService(FakeConverter(), workers=1, max_queued=1)
    app = create_app(service=service, settings=Settings())
    # Not entered as a context manager: workers never start, so the queue stays full.
    app.state.service = service
    client = TestClient(app)
    assert client.post("/jobs", json={"source": "a"}).status_code == 202
    response = client.post("/jobs", json={"source": "b"})
    assert response.status_code == 503
    assert response.json()["detail"]["code"] == "queue_full"


def test_requests_before_startup_are_503():
    app = create_app(service=JobService(FakeConverter()), settings=Settings())
    client = TestClient(app)
    assert client.get("/jobs/anything").status_code == 503
