"""Mochi REST API client."""

import base64
import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from ..config import settings

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
MULTIPART_CONTENT_TYPE = "multipart/form-data"


class MochiAPIError(Exception):
    """Raised when the Mochi API answers with an error status."""

    def __init__(self, status_code: int, errors: Any, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors
        self.message = message


def _segment(value: str) -> str:
    """Percent-encode a single path segment."""
    return quote(value, safe="")


def _with_query(path: str, params: dict[str, Any]) -> str:
    """Append the supplied query parameters to a path, skipping empty ones."""
    query = httpx.QueryParams({key: value for key, value in params.items() if value})
    return f"{path}?{query}" if query else path


class MochiClient:
    """Async HTTP client for the Mochi API."""

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize Mochi client.

        Args:
            api_key: Mochi API key, sent as the Basic auth username
            base_url: Mochi API base URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used to stub the API in tests)
        """
        self.base_url = (base_url or settings.mochi_base_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout
        self._transport = transport

        encoded = base64.b64encode(f"{api_key}:".encode()).decode("ascii")
        self._auth_header = f"Basic {encoded}"

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        content_type: str = JSON_CONTENT_TYPE,
    ) -> Any:
        """Send a request to the Mochi API.

        Args:
            method: HTTP method
            path: Path relative to the base URL, including any query string
            body: JSON-serializable body, or a multipart files mapping when
                content_type is not JSON
            content_type: Body content type

        Returns:
            Parsed JSON response, or None for empty responses

        Raises:
            MochiAPIError: The API returned an error status
        """
        url = f"{self.base_url}{path}"
        headers = {"Authorization": self._auth_header, "Accept": JSON_CONTENT_TYPE}
        options: dict[str, Any] = {}

        if body is not None:
            if content_type == JSON_CONTENT_TYPE:
                headers["Content-Type"] = JSON_CONTENT_TYPE
                options["content"] = json.dumps(body)
            else:
                # httpx writes the multipart Content-Type with its boundary
                options["files"] = body

        logger.debug("%s %s", method, path)
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            response = await client.request(method, url, headers=headers, **options)

        return self._parse_response(response)

    @staticmethod
    def _parse_response(response: httpx.Response) -> Any:
        """Map an API response to its payload or a MochiAPIError."""
        status = response.status_code

        if status == 429:
            logger.warning("Rate limited by Mochi API")
            raise MochiAPIError(
                429,
                {"errors": ["Rate limited. Please wait before making another request."]},
                "Rate limited by Mochi API",
            )

        if status == 204 or not response.content:
            return None

        try:
            data = response.json()
        except ValueError:
            if not response.is_success:
                logger.warning("Mochi API error %s: %s", status, response.reason_phrase)
                raise MochiAPIError(
                    status,
                    {"errors": [response.reason_phrase]},
                    f"HTTP {status}: {response.reason_phrase}",
                ) from None
            return None

        if not response.is_success:
            errors = data.get("errors") if isinstance(data, dict) else None
            detail = errors if errors is not None else data
            logger.warning("Mochi API error %s: %s", status, detail)
            raise MochiAPIError(status, detail, f"HTTP {status}: {json.dumps(detail)}")

        return data

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, body: Any = None) -> Any:
        return await self.request("POST", path, body)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def upload_file(
        self, path: str, content: bytes, filename: str, content_type: str
    ) -> Any:
        """Upload a file as the single `file` part of a multipart form.

        Args:
            path: Upload path
            content: Raw file bytes
            filename: Filename reported in the form part
            content_type: MIME type of the file

        Returns:
            Parsed JSON response, or None
        """
        files = {"file": (filename, content, content_type)}
        return await self.request("POST", path, files, content_type=MULTIPART_CONTENT_TYPE)

    # Card operations
    async def list_cards(
        self,
        deck_id: str | None = None,
        limit: int | None = None,
        bookmark: str | None = None,
    ) -> dict:
        """List cards, optionally filtered by deck.

        Args:
            deck_id: Only return cards from this deck
            limit: Page size (1-100)
            bookmark: Pagination cursor from a previous page

        Returns:
            Page with `docs` and an optional `bookmark`

        Raises:
            MochiAPIError: Request failed
        """
        return await self.get(
            _with_query("/cards/", {"deck-id": deck_id, "limit": limit, "bookmark": bookmark})
        )

    async def get_card(self, card_id: str) -> dict:
        return await self.get(f"/cards/{_segment(card_id)}")

    async def create_card(self, data: dict[str, Any]) -> dict:
        return await self.post("/cards/", data)

    async def update_card(self, card_id: str, data: dict[str, Any]) -> dict:
        return await self.post(f"/cards/{_segment(card_id)}", data)

    async def delete_card(self, card_id: str) -> None:
        await self.delete(f"/cards/{_segment(card_id)}")

    async def add_attachment(
        self,
        card_id: str,
        content: bytes,
        filename: str,
        content_type: str = "application/octet-stream",
    ) -> Any:
        """Attach a file to a card.

        Args:
            card_id: Card to attach to
            content: Raw file bytes
            filename: Attachment filename, addressable as @media/<filename>
            content_type: MIME type of the file

        Returns:
            Upload result from the API

        Raises:
            MochiAPIError: Upload failed
        """
        path = f"/cards/{_segment(card_id)}/attachments/{_segment(filename)}"
        return await self.upload_file(path, content, filename, content_type)

    async def delete_attachment(self, card_id: str, filename: str) -> None:
        await self.delete(f"/cards/{_segment(card_id)}/attachments/{_segment(filename)}")

    # Deck operations
    async def list_decks(self, limit: int | None = None, bookmark: str | None = None) -> dict:
        return await self.get(_with_query("/decks/", {"limit": limit, "bookmark": bookmark}))

    async def get_deck(self, deck_id: str) -> dict:
        return await self.get(f"/decks/{_segment(deck_id)}")

    async def create_deck(self, data: dict[str, Any]) -> dict:
        return await self.post("/decks/", data)

    async def update_deck(self, deck_id: str, data: dict[str, Any]) -> dict:
        return await self.post(f"/decks/{_segment(deck_id)}", data)

    async def delete_deck(self, deck_id: str) -> None:
        await self.delete(f"/decks/{_segment(deck_id)}")

    # Template operations
    async def list_templates(
        self, limit: int | None = None, bookmark: str | None = None
    ) -> dict:
        return await self.get(_with_query("/templates/", {"limit": limit, "bookmark": bookmark}))

    async def get_template(self, template_id: str) -> dict:
        return await self.get(f"/templates/{_segment(template_id)}")

    async def create_template(self, data: dict[str, Any]) -> dict:
        return await self.post("/templates/", data)

    # Due cards
    async def get_due_cards(self, date: str | None = None, deck_id: str | None = None) -> dict:
        """Get cards due for review.

        Args:
            date: ISO 8601 date to check (upstream defaults to today)
            deck_id: Restrict to one deck

        Returns:
            Object with a `cards` list

        Raises:
            MochiAPIError: Request failed
        """
        base_path = f"/due/{_segment(deck_id)}" if deck_id else "/due"
        return await self.get(_with_query(base_path, {"date": date}))
