"""
Test suite for the job application endpoints.

Tests cover:
- Creation and tag storage
- Listing and ordering
- Retrieval and the tag round-trip boundary
- Full-replacement updates
- Deletion
"""

from jobtrackr.models.application import Application
from tests.conftest import bearer_headers, create_user


def create_application(client, data, **overrides):
    payload = {**data, **overrides}
    response = client.post("/api/applications", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestApplicationCreation:
    """Tests for POST /api/applications"""

    def test_create_application_success(self, auth_client, user, sample_application_data):
        """Test successful creation returns 201 and the new record"""
        response = auth_client.post("/api/applications", json=sample_application_data)

        assert response.status_code == 201
        data = response.json()
        assert data["id"]
        assert data["userId"] == user.id
        assert data["company"] == "Google"
        assert data["contactName"] == "Jane Doe"
        assert data["tags"] == ["React", "Node.js", "Paris"]
        assert data["appliedAt"].startswith("2025-03-01")

    def test_tags_are_stored_comma_joined(self, auth_client, db_session, sample_application_data):
        """Test the tag list is persisted as a single comma-joined string"""
        created = create_application(auth_client, sample_application_data)

        row = db_session.query(Application).filter(Application.id == created["id"]).first()
        assert row.tags == "React,Node.js,Paris"

    def test_create_without_tags(self, auth_client, db_session, sample_application_data):
        """Test omitted tags are treated as an empty list"""
        payload = dict(sample_application_data)
        del payload["tags"]

        response = auth_client.post("/api/applications", json=payload)

        assert response.status_code == 201
        assert response.json()["tags"] == []
        row = db_session.query(Application).first()
        assert row.tags == ""

    def test_create_with_empty_tags(self, auth_client, sample_application_data):
        """Test an empty tag list is accepted"""
        created = create_application(auth_client, sample_application_data, tags=[])
        assert created["tags"] == []

    def test_create_with_non_list_tags(self, auth_client, db_session, sample_application_data):
        """Test tags sent as a string are rejected instead of faulting"""
        response = auth_client.post(
            "/api/applications",
            json={**sample_application_data, "tags": "React,Paris"}
        )

        assert response.status_code == 400
        assert db_session.query(Application).count() == 0

    def test_create_missing_required_fields(self, auth_client, db_session):
        """Test creation with missing required fields"""
        response = auth_client.post("/api/applications", json={"company": "Google"})

        assert response.status_code == 400
        assert db_session.query(Application).count() == 0

    def test_create_with_plain_date(self, auth_client, sample_application_data):
        """Test appliedAt accepts the YYYY-MM-DD form of a date input"""
        created = create_application(auth_client, sample_application_data, appliedAt="2025-04-15")
        assert created["appliedAt"].startswith("2025-04-15")

    def test_create_accepts_snake_case_keys(self, auth_client, sample_application_data):
        """Test field names are accepted as well as camelCase aliases"""
        payload = dict(sample_application_data)
        payload["contact_name"] = payload.pop("contactName")
        payload["applied_at"] = payload.pop("appliedAt")

        created = create_application(auth_client, payload)
        assert created["contactName"] == "Jane Doe"


class TestApplicationListing:
    """Tests for GET /api/applications"""

    def test_list_ordered_by_applied_at_desc(self, auth_client, sample_application_data):
        """Test most recently applied applications come first"""
        create_application(auth_client, sample_application_data, company="Oldest", appliedAt="2025-01-10")
        create_application(auth_client, sample_application_data, company="Newest", appliedAt="2025-06-01")
        create_application(auth_client, sample_application_data, company="Middle", appliedAt="2025-03-20")

        response = auth_client.get("/api/applications")

        assert response.status_code == 200
        assert [a["company"] for a in response.json()] == ["Newest", "Middle", "Oldest"]

    def test_list_only_returns_own_applications(self, auth_client, db_session, user, other_user, sample_application_data):
        """Test other users' applications never show up"""
        create_application(auth_client, sample_application_data, company="Mine")
        auth_client.post(
            "/api/applications",
            json={**sample_application_data, "company": "Theirs"},
            headers=bearer_headers(other_user),
        )

        data = auth_client.get("/api/applications").json()

        assert [a["company"] for a in data] == ["Mine"]
        assert all(a["userId"] == user.id for a in data)

    def test_list_empty(self, auth_client):
        """Test a new user has no applications"""
        response = auth_client.get("/api/applications")

        assert response.status_code == 200
        assert response.json() == []

    def test_list_with_deleted_user_row(self, client, db_session):
        """Test a valid session whose user row is gone answers 404, not an empty list"""
        ghost = create_user(db_session, email="ghost@example.com")
        headers = bearer_headers(ghost)
        db_session.delete(ghost)
        db_session.commit()

        response = client.get("/api/applications", headers=headers)

        assert response.status_code == 404
        assert "not found" in response.json()["detail"].lower()


class TestApplicationRetrieval:
    """Tests for GET /api/applications/{id}"""

    def test_get_application_by_id(self, auth_client, sample_application_data):
        """Test retrieving an application by ID"""
        created = create_application(auth_client, sample_application_data)

        response = auth_client.get(f"/api/applications/{created['id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == created["id"]
        assert data["position"] == sample_application_data["position"]

    def test_tags_round_trip(self, auth_client, sample_application_data):
        """Test tags without commas come back exactly as sent"""
        tags = ["React", "TypeScript", "Télétravail"]
        created = create_application(auth_client, sample_application_data, tags=tags)

        data = auth_client.get(f"/api/applications/{created['id']}").json()

        assert data["tags"] == tags

    def test_tag_containing_comma_is_not_round_trip_safe(self, auth_client, sample_application_data):
        """Test the known limitation: a comma inside a tag splits it on read"""
        tags = ["Paris, France", "Remote"]
        created = create_application(auth_client, sample_application_data, tags=tags)

        data = auth_client.get(f"/api/applications/{created['id']}").json()

        assert data["tags"] != tags
        assert data["tags"] == ["Paris", " France", "Remote"]

    def test_get_nonexistent_application(self, auth_client):
        """Test retrieving an application that doesn't exist"""
        response = auth_client.get("/api/applications/does-not-exist")

        assert response.status_code == 404
        assert "not found" in response.json()["detail"].lower()

    def test_get_other_users_application(self, auth_client, other_user, sample_application_data):
        """Test another user's application reads as not found"""
        created = create_application(auth_client, sample_application_data)

        response = auth_client.get(
            f"/api/applications/{created['id']}",
            headers=bearer_headers(other_user),
        )

        assert response.status_code == 404


class TestApplicationUpdate:
    """Tests for PUT /api/applications/{id}"""

    def test_update_application(self, auth_client, db_session, sample_application_data):
        """Test every field is replaced by the payload"""
        created = create_application(auth_client, sample_application_data)
        payload = {
            **sample_application_data,
            "status": "Entretien",
            "tags": ["Vue", "Lyon"],
            "appliedAt": "2025-05-02",
        }

        response = auth_client.put(f"/api/applications/{created['id']}", json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Entretien"
        assert data["tags"] == ["Vue", "Lyon"]
        assert data["appliedAt"].startswith("2025-05-02")

        row = db_session.query(Application).filter(Application.id == created["id"]).first()
        assert row.tags == "Vue,Lyon"

    def test_update_clears_omitted_fields(self, auth_client, sample_application_data):
        """Test update is a full overwrite, not a partial patch"""
        created = create_application(auth_client, sample_application_data)
        payload = {
            "company": "Google",
            "position": "Développeur Backend",
            "contract": "CDI",
            "status": "Relancé",
            "appliedAt": "2025-03-01",
        }

        data = auth_client.put(f"/api/applications/{created['id']}", json=payload).json()

        assert data["position"] == "Développeur Backend"
        assert data["link"] is None
        assert data["contactName"] is None
        assert data["notes"] is None
        assert data["tags"] == []

    def test_update_nonexistent_application(self, auth_client, sample_application_data):
        """Test updating an unknown id answers 404"""
        response = auth_client.put("/api/applications/does-not-exist", json=sample_application_data)

        assert response.status_code == 404

    def test_update_other_users_application(self, auth_client, db_session, other_user, sample_application_data):
        """Test another user's application cannot be overwritten"""
        created = create_application(auth_client, sample_application_data)

        response = auth_client.put(
            f"/api/applications/{created['id']}",
            json={**sample_application_data, "company": "Hijacked"},
            headers=bearer_headers(other_user),
        )

        assert response.status_code == 404
        row = db_session.query(Application).filter(Application.id == created["id"]).first()
        db_session.refresh(row)
        assert row.company == "Google"

    def test_update_requires_required_fields(self, auth_client, sample_application_data):
        """Test a payload without the required fields is rejected"""
        created = create_application(auth_client, sample_application_data)

        response = auth_client.put(f"/api/applications/{created['id']}", json={"status": "Refusé"})

        assert response.status_code == 400


class TestApplicationDeletion:
    """Tests for DELETE /api/applications/{id}"""

    def test_delete_application(self, auth_client, sample_application_data):
        """Test deleting an application"""
        created = create_application(auth_client, sample_application_data)

        response = auth_client.delete(f"/api/applications/{created['id']}")

        assert response.status_code == 200
        assert response.json()["message"] == "Application deleted"

    def test_delete_then_get_returns_404(self, auth_client, sample_application_data):
        """Test a deleted application is gone"""
        created = create_application(auth_client, sample_application_data)
        auth_client.delete(f"/api/applications/{created['id']}")

        response = auth_client.get(f"/api/applications/{created['id']}")

        assert response.status_code == 404

    def test_delete_nonexistent_application(self, auth_client):
        """Test deleting an unknown id answers 404"""
        response = auth_client.delete("/api/applications/does-not-exist")

        assert response.status_code == 404

    def test_delete_other_users_application(self, auth_client, db_session, other_user, sample_application_data):
        """Test another user's application cannot be deleted"""
        created = create_application(auth_client, sample_application_data)

        response = auth_client.delete(
            f"/api/applications/{created['id']}",
            headers=bearer_headers(other_user),
        )

        assert response.status_code == 404
        assert db_session.query(Application).filter(Application.id == created["id"]).count() == 1
