"""HTTP client for the Bookkeep REST API."""

from typing import Any, Dict, List, Optional

import httpx
from loguru import logger


class APIError(Exception):
    """A request failed. ``message`` is the short text shown to the user."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class AuthenticationRequired(APIError):
    """401 from the server: the user has to log in (again)."""


class ResourceError(APIError):
    """Any other failure; shown inline, no navigation."""


class BookkeepAPI:
    """Thin wrapper over the REST endpoints.

    Accepts any ``httpx.Client`` (FastAPI's ``TestClient`` is one), so it can
    talk to a live server or to an in-process app.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        api_prefix: str = "/api",
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.api_prefix = api_prefix.rstrip("/")
        self.token: Optional[str] = None

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, json: Optional[dict] = None) -> Any:
        url = f"{self.api_prefix}{path}"
        try:
            response = self.http.request(method, url, json=json, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {type(e).__name__}")
            raise ResourceError("Could not reach the server") from e

        if response.is_success:
            return response.json()

        message = _error_message(response)
        if response.status_code == 401:
            raise AuthenticationRequired(message, response.status_code)
        raise ResourceError(message, response.status_code)

    # ------------------------------------------------------------------ auth

    def register(self, username: str, email: str, password: str) -> Dict[str, Any]:
        return self._request(
            "POST", "/auth/register",
            json={"username": username, "email": email, "password": password},
        )

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Log in; keeps the returned token for later requests."""
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data

    # ----------------------------------------------------------------- books

    def list_books(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/books")

    def create_book(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/books", json=fields)

    def update_book(self, book_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", f"/books/{book_id}", json=changes)

    def delete_book(self, book_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/books/{book_id}")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or "Request failed"
    if isinstance(body, dict):
        return body.get("error") or body.get("message") or "Request failed"
    return "Request failed"
