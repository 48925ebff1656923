"""Flask API: sessions, uploads, job polling, results and rankings."""

import io

import pytest

from screening.pipeline.artifacts import ArtifactStore
from screening.pipeline.extract import PDF_MIME
from screening.pipeline.orchestrator import WorkerContext
from resume_triage.document_store import LocalDocumentStore
from resume_triage.runtime import ScreeningRuntime

from app import create_app


@pytest.fixture
def runtime(tmp_path, fake_completion):
    context = WorkerContext(
        documents=LocalDocumentStore(tmp_path / "docs"),
        completion=fake_completion(score_reply="0.8"),
        store=ArtifactStore(tmp_path / "artifacts"),
    )
    rt = ScreeningRuntime(context, concurrency=1)
    yield rt
    rt.stop()


@pytest.fixture
def client(runtime):
    app = create_app(runtime)
    app.config["TESTING"] = True
    return app.test_client()


def test_full_flow(client, runtime, sample_requirements, pdf_bytes):
    resp = client.post("/api/sessions", json=sample_requirements)
    assert resp.status_code == 201
    session_id = resp.get_json()["id"]

    resp = client.post(
        f"/api/sessions/{session_id}/resumes",
        data={"resumes": [(io.BytesIO(pdf_bytes(["Python Django PostgreSQL"])), "cv.pdf", PDF_MIME)]},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 202
    (job,) = resp.get_json()["jobs"]

    runtime.wait_idle(timeout=30)

    statuses = client.get(f"/api/jobs?ids={job['job_id']},unknown").get_json()
    assert statuses[job["job_id"]]["status"] == "completed"
    assert statuses[job["job_id"]]["progress"] == 100
    assert statuses["unknown"]["status"] == "not_found"

    result = client.get(f"/api/resumes/{job['resume_id']}").get_json()
    assert result["resume"]["status"] == "processed"
    assert result["bucket"] in ("Excellent", "Good", "No Go")

    rankings = client.get(f"/api/sessions/{session_id}/rankings").get_json()
    assert [r["resume_id"] for r in rankings] == [job["resume_id"]]


def test_invalid_requirements(client):
    resp = client.post("/api/sessions", json={"title": "Missing fields"})
    assert resp.status_code == 400
    assert "Invalid job requirements" in resp.get_json()["error"]


def test_upload_errors(client, sample_requirements):
    session_id = client.post("/api/sessions", json=sample_requirements).get_json()["id"]

    resp = client.post(f"/api/sessions/{session_id}/resumes", data={}, content_type="multipart/form-data")
    assert resp.status_code == 400

    resp = client.post(
        f"/api/sessions/{session_id}/resumes",
        data={"resumes": [(io.BytesIO(b"hello"), "notes.txt", "text/plain")]},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400

    resp = client.post(
        "/api/sessions/missing/resumes",
        data={"resumes": [(io.BytesIO(b"%PDF"), "cv.pdf", PDF_MIME)]},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 404


def test_missing_records(client):
    assert client.get("/api/resumes/missing").status_code == 404
    assert client.get("/api/sessions/missing/rankings").status_code == 404
    assert client.get("/api/jobs").status_code == 400
