# =============================================================================
# tests/test_chat.py - Chat Token Tests
# =============================================================================

from jose import jwt

from core.models.user import ChatTokenResponse
from lib.stream_client import create_user_token
from tests.conftest import GOOD_TOKEN


class TestChatToken:
    """Test GET /api/chat/token."""

    def test_returns_token_for_synced_user(self, client, stream, sample_user):
        response = client.get("/api/chat/token", headers={"Authorization": f"Bearer {GOOD_TOKEN}"})

        assert response.status_code == 200
        body = ChatTokenResponse(**response.json())
        assert body.token == "chat-token"
        assert body.userId == "user_123"
        assert body.userName == sample_user["name"]
        assert body.userImage == sample_user["profile_image"]
        stream.create_user_token.assert_called_once_with("user_123")

    def test_missing_name_becomes_empty_string(self, client, sample_user):
        sample_user["name"] = None

        response = client.get("/api/chat/token", headers={"Authorization": f"Bearer {GOOD_TOKEN}"})

        assert response.json()["userName"] == ""


class TestCreateUserToken:
    """Test the chat token format."""

    def test_token_carries_user_id(self):
        token = create_user_token("user_123", "secret")
        claims = jwt.decode(token, "secret", algorithms=["HS256"])
        assert claims == {"user_id": "user_123"}
