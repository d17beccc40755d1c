"""Tests for the API client."""

from unittest.mock import MagicMock

import pytest
import requests

from arrbackup import __version__
from arrbackup.client.api import ArrClient
from arrbackup.utils.errors import DecodeError, ServerError, TransportError

API_KEY = "0123456789abcdef0123456789abcdef"


def make_response(status_code=200, payload=None, reason="OK"):
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


class TestArrClient:
    """Test API client requests and error mapping."""

    def setup_method(self):
        """Setup test environment."""
        self.session = MagicMock()
        self.session.headers = {}
        self.session.request.return_value = make_response(payload=[])
        self.client = ArrClient("http://sonarr:8989/", API_KEY, timeout=12, session=self.session)

    def test_user_agent(self):
        assert self.session.headers["User-Agent"] == f"arr-backup/{__version__}"

    def test_list_backups(self):
        self.session.request.return_value = make_response(
            payload=[
                {"id": 1, "name": "a.zip", "time": "2024-01-01T00:00:00Z", "type": "scheduled"},
                {"id": 2, "name": "b.zip", "time": "2024-01-02T00:00:00Z", "type": "manual"},
            ]
        )

        backups = self.client.list_backups()

        assert [backup.id for backup in backups] == [1, 2]
        self.session.request.assert_called_once_with(
            "GET",
            "http://sonarr:8989/api/v3/system/backup",
            headers={"X-Api-Key": API_KEY},
            timeout=12,
        )

    def test_trigger_backup(self):
        self.client.trigger_backup()

        self.session.request.assert_called_once_with(
            "POST",
            "http://sonarr:8989/api/v3/command",
            headers={"X-Api-Key": API_KEY},
            timeout=12,
            json={"name": "Backup"},
        )

    def test_delete_backup(self):
        self.client.delete_backup(42)

        self.session.request.assert_called_once_with(
            "DELETE",
            "http://sonarr:8989/api/v3/system/backup/42",
            headers={"X-Api-Key": API_KEY},
            timeout=12,
        )

    def test_connection_error(self):
        self.session.request.side_effect = requests.exceptions.ConnectionError(
            f"refused, headers X-Api-Key={API_KEY}"
        )

        with pytest.raises(TransportError) as exc_info:
            self.client.list_backups()

        error = exc_info.value
        assert API_KEY not in error.message
        assert API_KEY not in (error.details or "")
        assert error.suggestions

    def test_timeout(self):
        self.session.request.side_effect = requests.exceptions.Timeout()

        with pytest.raises(TransportError) as exc_info:
            self.client.trigger_backup()

        assert "timed out" in exc_info.value.message

    def test_server_error(self):
        self.session.request.return_value = make_response(500, reason="Internal Server Error")

        with pytest.raises(ServerError) as exc_info:
            self.client.delete_backup(3)

        assert exc_info.value.status_code == 500
        assert "HTTP 500" in exc_info.value.message

    def test_unauthorized_suggests_api_key(self):
        self.session.request.return_value = make_response(401, reason="Unauthorized")

        with pytest.raises(ServerError) as exc_info:
            self.client.list_backups()

        assert exc_info.value.status_code == 401
        assert any("ARR_API_KEY" in suggestion for suggestion in exc_info.value.suggestions)
        assert API_KEY not in str(exc_info.value)

    def test_invalid_json(self):
        self.session.request.return_value = make_response(payload=ValueError("no json"))

        with pytest.raises(DecodeError):
            self.client.list_backups()

    def test_not_a_list(self):
        self.session.request.return_value = make_response(payload={"message": "hi"})

        with pytest.raises(DecodeError):
            self.client.list_backups()

    def test_bad_record(self):
        self.session.request.return_value = make_response(payload=[{"id": 1}])

        with pytest.raises(DecodeError):
            self.client.list_backups()

    def test_repr_hides_api_key(self):
        assert API_KEY not in repr(self.client)

    def test_context_manager_closes_session(self):
        with self.client as client:
            assert client is self.client

        self.session.close.assert_called_once()
