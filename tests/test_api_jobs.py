"""
Tests for the data-ingestion job endpoints.

Verifies:
- POST /jobs/add creates a pending job and a 'Data Ingestion Job Added' event
- start/complete/fail follow the lifecycle and return {message, job}
- Illegal transitions return 409 and leave status and event log untouched
- Unknown job IDs return 404
"""

import pytest


def _create_job(client, uri="https://example.com/data.csv"):
    response = client.post("/jobs/add", json={"data_source_uri": uri})
    assert response.status_code == 201
    return response.json()


def _events_for(client, job_id):
    response = client.get("/events", params={"reference_id": job_id})
    assert response.status_code == 200
    return response.json()


class TestCreateJob:
    """Tests for POST /jobs/add."""

    def test_create_job(self, client):
        job = _create_job(client)

        assert job["id"] is not None
        assert job["data_source_uri"] == "https://example.com/data.csv"
        assert job["status"] == "pending"
        assert job["created_at"] is not None
        assert job["completed_at"] is None

    def test_create_job_records_event(self, client):
        job = _create_job(client)

        events = _events_for(client, job["id"])
        assert len(events) == 1
        assert events[0]["event_type"] == "Data Ingestion Job Added"
        assert events[0]["description"] == f"Job ID {job['id']} was added."

    def test_create_job_missing_uri(self, client):
        response = client.post("/jobs/add", json={})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_create_job_blank_uri(self, client):
        response = client.post("/jobs/add", json={"data_source_uri": "   "})
        assert response.status_code == 400

    def test_list_and_get(self, client):
        first = _create_job(client, "uri://a")
        _create_job(client, "uri://b")

        listed = client.get("/jobs").json()
        assert [j["data_source_uri"] for j in listed] == ["uri://a", "uri://b"]

        response = client.get(f"/jobs/{first['id']}")
        assert response.status_code == 200
        assert response.json() == first

    def test_get_unknown_job(self, client):
        response = client.get("/jobs/999")
        assert response.status_code == 404
        body = response.json()
        assert body["error"]["code"] == "NOT_FOUND"
        assert body["error"]["message"] == "Job not found"


class TestJobLifecycle:
    """Tests for POST /jobs/{start,complete,fail}/{id}."""

    def test_start(self, client):
        job = _create_job(client)

        response = client.post(f"/jobs/start/{job['id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == f"Job ID {job['id']} has started."
        assert body["job"]["status"] == "in_progress"
        assert body["job"]["completed_at"] is None

    def test_start_then_complete(self, client):
        job = _create_job(client)
        client.post(f"/jobs/start/{job['id']}")

        response = client.post(f"/jobs/complete/{job['id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == f"Job ID {job['id']} has been completed."
        assert body["job"]["status"] == "completed"
        assert body["job"]["completed_at"] is not None

    def test_start_then_fail(self, client):
        job = _create_job(client)
        client.post(f"/jobs/start/{job['id']}")

        response = client.post(f"/jobs/fail/{job['id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == f"Job ID {job['id']} has failed."
        assert body["job"]["status"] == "failed"
        assert body["job"]["completed_at"] is not None

    def test_start_twice(self, client):
        job = _create_job(client)

        assert client.post(f"/jobs/start/{job['id']}").status_code == 200
        response = client.post(f"/jobs/start/{job['id']}")

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "CONFLICT"
        assert error["message"] == "Job not in pending state"
        assert client.get(f"/jobs/{job['id']}").json()["status"] == "in_progress"

    def test_complete_pending_job(self, client):
        job = _create_job(client)

        response = client.post(f"/jobs/complete/{job['id']}")

        assert response.status_code == 409
        assert client.get(f"/jobs/{job['id']}").json()["status"] == "pending"

    @pytest.mark.parametrize("terminal", ["complete", "fail"])
    @pytest.mark.parametrize("action", ["start", "complete", "fail"])
    def test_terminal_jobs_reject_everything(self, client, terminal, action):
        job = _create_job(client)
        client.post(f"/jobs/start/{job['id']}")
        final = client.post(f"/jobs/{terminal}/{job['id']}").json()["job"]
        events_before = _events_for(client, job["id"])

        response = client.post(f"/jobs/{action}/{job['id']}")

        assert response.status_code == 409
        assert client.get(f"/jobs/{job['id']}").json() == final
        assert _events_for(client, job["id"]) == events_before

    @pytest.mark.parametrize("action", ["start", "complete", "fail"])
    def test_unknown_job(self, client, action):
        response = client.post(f"/jobs/{action}/4242")

        assert response.status_code == 404
        assert response.json()["error"]["details"] == {
            "entity_kind": "Job",
            "entity_id": 4242,
        }

    def test_each_transition_records_event(self, client):
        job = _create_job(client)
        client.post(f"/jobs/start/{job['id']}")
        client.post(f"/jobs/fail/{job['id']}")

        events = _events_for(client, job["id"])
        assert [e["event_type"] for e in events] == [
            "Data Ingestion Job Added",
            "Data Ingestion Job Started",
            "Data Ingestion Job Failed",
        ]
        assert all(e["reference_id"] == job["id"] for e in events)

    def test_events_are_scoped_to_job(self, client):
        first = _create_job(client, "uri://a")
        second = _create_job(client, "uri://b")
        client.post(f"/jobs/start/{second['id']}")

        assert len(_events_for(client, first["id"])) == 1
        assert len(_events_for(client, second["id"])) == 2
