"""
API tests for the submission endpoints, run against SQLite and a temporary upload directory
"""

import os

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from main import create_app
from submissions.crud import InMemorySubmissionRepository


def submit(client, name="Ada", email="ada@example.com", message="Hello there", files=None):
    data = {"name": name, "email": email, "message": message}
    return client.post("/api/submit", data={k: v for k, v in data.items() if v is not None}, files=files)


class TestLiveness:

    def test_root_returns_plain_ok(self, client: TestClient):
        response = client.get("/")
        assert response.status_code == status.HTTP_200_OK
        assert response.text == "OK"

    def test_ready_after_startup(self, client: TestClient):
        response = client.get("/ready")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "ready"}


class TestSubmit:

    def test_submit_without_image(self, client: TestClient):
        response = submit(client)
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["message"] == "Submission received successfully"
        assert body["data"] == {
            "name": "Ada",
            "email": "ada@example.com",
            "message": "Hello there",
            "image": None,
        }

        submissions = client.get("/api/submissions").json()
        assert len(submissions) == 1
        assert submissions[0]["name"] == "Ada"
        assert submissions[0]["image"] is None
        assert submissions[0]["created_at"] is not None

    @pytest.mark.parametrize("missing", ["name", "email", "message"])
    def test_missing_field_is_rejected(self, client: TestClient, settings, missing):
        fields = {"name": "Ada", "email": "ada@example.com", "message": "Hello"}
        fields[missing] = None
        response = submit(
            client,
            files={"image": ("photo.png", b"png-bytes", "image/png")},
            **fields
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Name, email and message are required"
        assert client.get("/api/submissions").json() == []
        assert os.listdir(settings.upload_dir) == []

    def test_blank_field_is_rejected(self, client: TestClient):
        response = submit(client, message="   ")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert client.get("/api/submissions").json() == []

    def test_uploaded_image_is_served_back(self, client: TestClient):
        content = b"\x89PNG\r\n\x1a\nnot-really-a-png"
        response = submit(client, files={"image": ("photo.PNG", content, "image/png")})
        assert response.status_code == status.HTTP_200_OK

        image_ref = response.json()["data"]["image"]
        assert image_ref.startswith("uploads/")
        assert image_ref.endswith(".png")

        served = client.get(f"/{image_ref}")
        assert served.status_code == status.HTTP_200_OK
        assert served.content == content

        assert client.get("/api/submissions").json()[0]["image"] == image_ref


class TestList:

    def test_empty_list(self, client: TestClient):
        response = client.get("/api/submissions")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []

    def test_newest_first(self, client: TestClient):
        for name in ["first", "second", "third"]:
            assert submit(client, name=name).status_code == status.HTTP_200_OK

        names = [s["name"] for s in client.get("/api/submissions").json()]
        assert names == ["third", "second", "first"]


class TestDelete:

    def test_delete_removes_row_and_file(self, client: TestClient, settings):
        response = submit(client, files={"image": ("photo.jpg", b"jpeg-bytes", "image/jpeg")})
        image_ref = response.json()["data"]["image"]
        submission_id = client.get("/api/submissions").json()[0]["id"]

        response = client.delete(f"/api/submissions/{submission_id}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"message": "Submission deleted successfully"}

        assert client.get("/api/submissions").json() == []
        assert client.get(f"/{image_ref}").status_code == status.HTTP_404_NOT_FOUND
        assert os.listdir(settings.upload_dir) == []

    def test_delete_missing_id_succeeds(self, client: TestClient):
        submit(client)
        existing = client.get("/api/submissions").json()

        response = client.delete("/api/submissions/9999")
        assert response.status_code == status.HTTP_200_OK
        assert client.get("/api/submissions").json() == existing

    def test_delete_twice_is_idempotent(self, client: TestClient):
        submit(client, name="keep")
        submit(client, name="drop", files={"image": ("a.gif", b"gif", "image/gif")})
        listing = client.get("/api/submissions").json()
        drop_id = next(s["id"] for s in listing if s["name"] == "drop")

        assert client.delete(f"/api/submissions/{drop_id}").status_code == status.HTTP_200_OK
        after_first = client.get("/api/submissions").json()
        assert client.delete(f"/api/submissions/{drop_id}").status_code == status.HTTP_200_OK
        after_second = client.get("/api/submissions").json()

        assert after_first == after_second
        assert [s["name"] for s in after_second] == ["keep"]

    def test_delete_huge_missing_id_succeeds(self, client: TestClient):
        submit(client)
        existing = client.get("/api/submissions").json()

        response = client.delete(f"/api/submissions/{10**20}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"message": "Submission deleted successfully"}
        assert client.get("/api/submissions").json() == existing

    def test_delete_removes_file_with_odd_extension(self, client: TestClient, settings):
        response = submit(client, files={"image": ("photo.a\\b", b"bytes", "application/octet-stream")})
        assert response.status_code == status.HTTP_200_OK
        assert len(os.listdir(settings.upload_dir)) == 1

        submission_id = client.get("/api/submissions").json()[0]["id"]
        assert client.delete(f"/api/submissions/{submission_id}").status_code == status.HTTP_200_OK
        assert os.listdir(settings.upload_dir) == []

    def test_delete_non_integer_id(self, client: TestClient):
        response = client.delete("/api/submissions/abc")
        assert response.status_code == 422


class UnreachableRepository(InMemorySubmissionRepository):
    """Repository whose backend cannot be reached"""

    def initialize(self):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


class BrokenRepository(InMemorySubmissionRepository):
    """Repository that initializes but fails every query"""

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("server has gone away"))

    list_all = _fail
    create = _fail
    find_image_by_id = _fail
    delete_by_id = _fail


class TestStorageFailures:

    def test_not_ready_when_initialization_fails(self, settings):
        app = create_app(settings, repository=UnreachableRepository())
        with TestClient(app) as client:
            assert client.get("/").status_code == status.HTTP_200_OK
            assert client.get("/ready").status_code == status.HTTP_503_SERVICE_UNAVAILABLE

            response = submit(client)
            assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
            assert response.json()["detail"] == "Service not ready"
            assert client.get("/api/submissions").status_code == status.HTTP_503_SERVICE_UNAVAILABLE
            assert client.delete("/api/submissions/1").status_code == status.HTTP_503_SERVICE_UNAVAILABLE

    def test_strict_startup_aborts(self, settings):
        strict = settings.model_copy(update={"strict_startup": True})
        app = create_app(strict, repository=UnreachableRepository())
        with pytest.raises(OperationalError):
            with TestClient(app):
                pass

    def test_query_errors_are_500(self, settings):
        app = create_app(settings, repository=BrokenRepository())
        with TestClient(app) as client:
            response = client.get("/api/submissions")
            assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
            assert response.json() == {"detail": "Failed to fetch submissions"}

            response = submit(client)
            assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
            assert response.json() == {"detail": "Failed to submit form"}

            response = client.delete("/api/submissions/1")
            assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
            assert response.json() == {"detail": "Failed to delete submission"}


class TestMemoryBackend:

    def test_seeded_memory_backend(self, settings):
        memory = settings.model_copy(update={"storage_backend": "memory", "seed_sample_data": True})
        with TestClient(create_app(memory)) as client:
            listing = client.get("/api/submissions").json()
            assert len(listing) == 3

            assert submit(client, name="newest").status_code == status.HTTP_200_OK
            assert client.get("/api/submissions").json()[0]["name"] == "newest"
