"""HTTP client for the server's v3 backup API."""

import logging
from typing import Any, List, Optional

import jsonschema
import requests

from arrbackup import __version__
from arrbackup.config.schemas import BACKUP_LIST_SCHEMA
from arrbackup.utils.errors import DecodeError, ServerError, TransportError, create_error_suggestions

from .models import Backup

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Api-Key"
USER_AGENT = f"arr-backup/{__version__}"

BACKUP_ENDPOINT = "/api/v3/system/backup"
COMMAND_ENDPOINT = "/api/v3/command"


class ArrClient:
    """Authenticated access to list, trigger and delete backups."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Server base URL, e.g. http://localhost:8989
            api_key: API key sent with every request
            timeout: Per-request timeout in seconds
            session: Optional pre-built requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._api_key = api_key
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = USER_AGENT

    def __repr__(self) -> str:
        return f"ArrClient(base_url={self.base_url!r})"

    def __enter__(self) -> "ArrClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release pooled connections."""
        self.session.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """
        Send one request with the API key header attached.

        Raises:
            TransportError: If the server cannot be reached
            ServerError: If the server answers with a non-2xx status
        """
        url = f"{self.base_url}{path}"
        headers = kwargs.pop("headers", {})
        headers[API_KEY_HEADER] = self._api_key

        try:
            response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            raise TransportError(
                f"Request to {url} timed out after {self.timeout}s",
                suggestions=create_error_suggestions("server_unreachable", url=self.base_url),
            ) from e
        except requests.exceptions.RequestException as e:
            # Only the exception type: its text may carry request details.
            raise TransportError(
                f"Failed to reach {url}",
                details=type(e).__name__,
                suggestions=create_error_suggestions("server_unreachable", url=self.base_url),
            ) from e

        if not 200 <= response.status_code < 300:
            suggestions = []
            if response.status_code == 401:
                suggestions = create_error_suggestions("unauthorized")
            raise ServerError(
                f"{method} {url} failed with HTTP {response.status_code}",
                status_code=response.status_code,
                details=response.reason or None,
                suggestions=suggestions,
            )

        return response

    def list_backups(self) -> List[Backup]:
        """
        List all backups known to the server.

        Returns:
            List[Backup]: Backups in server order

        Raises:
            TransportError, ServerError, DecodeError
        """
        logger.debug("Getting backups")
        response = self._request("GET", BACKUP_ENDPOINT)

        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError("Backup list response is not valid JSON") from e

        try:
            jsonschema.validate(payload, BACKUP_LIST_SCHEMA)
        except jsonschema.ValidationError as e:
            raise DecodeError("Unexpected backup list from server", details=e.message) from e

        backups = [Backup.from_dict(record) for record in payload]
        logger.debug("Server reported %d backups", len(backups))
        return backups

    def trigger_backup(self) -> None:
        """Ask the server to start a manual backup. Does not wait for it."""
        logger.debug("Triggering backup")
        self._request("POST", COMMAND_ENDPOINT, json={"name": "Backup"})

    def delete_backup(self, backup_id: int) -> None:
        """Permanently delete a backup on the server."""
        logger.debug("Deleting backup %s", backup_id)
        self._request("DELETE", f"{BACKUP_ENDPOINT}/{backup_id}")
