"""Integration tests for /api/templates endpoints (app/routers/templates.py)"""
from decimal import Decimal
from unittest.mock import Mock, patch

from sqlalchemy.exc import SQLAlchemyError

from app.errors import StorageError
from app.models.template import Template
from app.services.file_storage import write_upload


def _mock_template(id=1, is_active=True):
    t = Mock(spec=Template)
    t.id = id
    t.name = "Landing Page"
    t.is_active = is_active
    return t


def _zip(name="site.zip", content=b"PK\x03\x04zip"):
    return ("template", (name, content, "application/zip"))


def _background(name="bg.png", content=b"\x89PNG", content_type="image/png"):
    return ("background", (name, content, content_type))


FORM = {
    "name": "Landing Page",
    "description": "One page site",
    "price": "500.00",
    "preview_html": "<h1>Hi</h1>",
}


class TestListTemplates:
    def test_lists_active_templates_newest_first(self, sqlite_client, make_template):
        client, db, _ = sqlite_client
        make_template(name="Old")
        make_template(name="Retired", is_active=False)
        make_template(name="New", price="1200.00")

        response = client.get("/api/templates")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [t["name"] for t in body["data"]] == ["New", "Old"]
        assert Decimal(body["data"][0]["price"]) == Decimal("1200.00")
        assert "zip_file_path" not in body["data"][0]

    def test_empty_catalog(self, sqlite_client):
        client, _, _ = sqlite_client

        response = client.get("/api/templates")

        assert response.status_code == 200
        assert response.json()["data"] == []


class TestCreateTemplate:
    def test_admin_uploads_template(self, sqlite_client, upload_dir):
        client, db, _ = sqlite_client

        response = client.post("/api/templates", data=FORM, files=[_zip(), _background()])

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Template added successfully"

        template = db.get(Template, body["data"]["template_id"])
        assert template.name == "Landing Page"
        assert template.price == Decimal("500.00")
        assert template.is_active is True
        assert template.downloads_count == 0
        assert (upload_dir / template.zip_file_path).read_bytes() == b"PK\x03\x04zip"
        assert template.background_path.startswith("backgrounds/")
        assert template.background_url == f"/uploads/{template.background_path}"

    def test_background_is_optional(self, sqlite_client, upload_dir):
        client, db, _ = sqlite_client

        response = client.post("/api/templates", data=FORM, files=[_zip()])

        assert response.status_code == 201
        template = db.get(Template, response.json()["data"]["template_id"])
        assert template.background_path is None

    def test_missing_archive_returns_400(self, sqlite_client, upload_dir):
        client, _, _ = sqlite_client

        response = client.post("/api/templates", data=FORM, files=[_background()])

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["message"] == "Template file is required"

    def test_non_zip_archive_rejected_before_writing(self, sqlite_client, upload_dir):
        client, db, _ = sqlite_client

        response = client.post(
            "/api/templates",
            data=FORM,
            files=[("template", ("site.txt", b"text", "text/plain")), _background()],
        )

        assert response.status_code == 400
        assert db.query(Template).count() == 0
        assert not (upload_dir / "backgrounds").exists()

    def test_bad_background_type_leaves_no_archive(self, sqlite_client, upload_dir):
        client, db, _ = sqlite_client

        response = client.post(
            "/api/templates",
            data=FORM,
            files=[_zip(), _background(name="bg.svg", content_type="image/svg+xml")],
        )

        assert response.status_code == 400
        assert not (upload_dir / "templates").exists()

    def test_non_positive_price_rejected(self, sqlite_client, upload_dir):
        client, _, _ = sqlite_client

        response = client.post("/api/templates", data={**FORM, "price": "0"}, files=[_zip()])

        assert response.status_code == 400
        assert response.json()["message"] == "Missing or invalid fields"

    def test_missing_fields_rejected(self, sqlite_client, upload_dir):
        client, _, _ = sqlite_client

        response = client.post("/api/templates", data={"name": "Only name"}, files=[_zip()])

        assert response.status_code == 400
        errors = response.json()["data"]["errors"]
        assert any(e.startswith("description") for e in errors)
        assert any(e.startswith("price") for e in errors)

    def test_commit_failure_removes_written_files(self, sqlite_client, upload_dir):
        client, db, _ = sqlite_client

        with patch.object(db, "commit", side_effect=SQLAlchemyError("database is locked")):
            response = client.post("/api/templates", data=FORM, files=[_zip(), _background()])

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to add template"
        assert list((upload_dir / "templates").iterdir()) == []
        assert list((upload_dir / "backgrounds").iterdir()) == []

    def test_background_write_failure_removes_archive(self, sqlite_client, upload_dir):
        client, db, _ = sqlite_client

        def write_or_fail(purpose, original_name, content):
            if purpose == "background":
                raise StorageError("Failed to store uploaded file")
            return write_upload(purpose, original_name, content)

        with patch("app.routers.templates.write_upload", side_effect=write_or_fail):
            response = client.post("/api/templates", data=FORM, files=[_zip(), _background()])

        assert response.status_code == 500
        assert list((upload_dir / "templates").iterdir()) == []
        assert db.query(Template).count() == 0

    def test_requires_admin(self, unauthenticated_client):
        client, mock_db = unauthenticated_client

        response = client.post("/api/templates", data=FORM, files=[_zip()])

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Authentication required"}
        mock_db.add.assert_not_called()


class TestDeleteTemplate:
    def test_soft_deletes_active_template(self, client_with_admin):
        client, mock_db, _ = client_with_admin
        template = _mock_template()
        mock_db.first.return_value = template

        response = client.delete("/api/templates/1")

        assert response.status_code == 200
        assert response.json()["message"] == "Template deleted successfully"
        assert template.is_active is False
        mock_db.delete.assert_not_called()
        mock_db.commit.assert_called_once()

    def test_unknown_or_inactive_template_returns_404(self, client_with_admin):
        client, mock_db, _ = client_with_admin
        mock_db.first.return_value = None

        response = client.delete("/api/templates/99")

        assert response.status_code == 404
        assert response.json()["message"] == "Template not found"
        mock_db.commit.assert_not_called()

    def test_second_delete_is_404(self, sqlite_client, make_template):
        client, db, _ = sqlite_client
        template = make_template()

        assert client.delete(f"/api/templates/{template.id}").status_code == 200
        assert client.delete(f"/api/templates/{template.id}").status_code == 404

        db.expire_all()
        assert db.get(Template, template.id).is_active is False

    def test_requires_admin(self, unauthenticated_client):
        client, _ = unauthenticated_client

        response = client.delete("/api/templates/1")

        assert response.status_code == 401
