"""Unit tests for main application endpoints."""

from unittest.mock import Mock


class TestAppEndpoints:
    """Test main application endpoints."""

    def test_index_endpoint(self, client):
        """Test the index endpoint returns version and status."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert "version" in data
        assert data["status"] == "ok"

    def test_get_current_user_info_unauthenticated(self, client):
        """Test get current user info when not authenticated."""
        response = client.get("/user/me")
        assert response.status_code == 200
        assert response.json()["user"] is None

    def test_get_current_user_info_authenticated(self, client, alice, test_app):
        """Test get current user info when authenticated."""
        from routes.deps import get_current_user

        test_app.dependency_overrides[get_current_user] = lambda: alice

        response = client.get("/user/me")
        assert response.status_code == 200
        user_data = response.json()["user"]
        assert user_data["userId"] == alice.id
        assert user_data["uid"] == "AAA111"
        assert user_data["nickname"] == "Alice"
        assert "joinDate" in user_data

        # Clean up dependency override
        del test_app.dependency_overrides[get_current_user]

    def test_logout_endpoint(self, client):
        """Test logout endpoint clears session."""
        response = client.post("/logout")
        assert response.status_code == 200
        assert response.json()["message"] == "Logged out successfully"


class TestUtilityFunctions:
    """Test utility functions."""

    def test_get_version(self):
        """Test get_version function reads from pyproject.toml."""
        from app import get_version

        version = get_version()
        assert isinstance(version, str)
        assert len(version) > 0

    def test_index_and_openapi_share_the_version(self, client, test_app):
        from routes.auth_route import get_version

        assert client.get("/").json()["version"] == get_version()
        assert test_app.version == get_version()

    def test_get_current_user_id_with_session(self):
        from routes.deps import get_current_user_id

        mock_request = Mock()
        mock_request.session = {"user_id": "u1"}
        assert get_current_user_id(mock_request) == "u1"

    def test_get_current_user_id_without_session(self):
        from routes.deps import get_current_user_id

        mock_request = Mock()
        mock_request.session = {}
        assert get_current_user_id(mock_request) is None

    def test_get_current_user_with_valid_user(self, test_session, alice):
        from routes.deps import get_current_user

        mock_request = Mock()
        mock_request.session = {"user_id": alice.id}

        user = get_current_user(mock_request, test_session)
        assert user is not None
        assert user.id == alice.id

    def test_get_current_user_with_unknown_or_inactive_user(self, test_session, bob):
        """Disabled accounts are treated as logged out."""
        from routes.deps import get_current_user

        mock_request = Mock()
        mock_request.session = {"user_id": "nonexistent_user"}
        assert get_current_user(mock_request, test_session) is None

        bob.is_active = False
        test_session.add(bob)
        test_session.commit()
        mock_request.session = {"user_id": bob.id}
        assert get_current_user(mock_request, test_session) is None
