"""
Instantly API client (v2).

Docs: https://developer.instantly.ai/
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from lead_manager.config import settings
from lead_manager.core.exceptions import ExternalServiceError
from lead_manager.services.integrations.base import OutreachProvider

logger = logging.getLogger(__name__)


class InstantlyError(ExternalServiceError):
    """Instantly call failed; keeps the HTTP status and decoded error body."""
    def __init__(self, message: str, status: Optional[int] = None, response: Any = None):
        self.status = status
        self.response = response
        super().__init__("Instantly", message)


class InstantlyClient(OutreachProvider):
    """
    Async client for the Instantly outreach API.

    Every request is authenticated with the workspace API key as a Bearer
    token. Non-2xx responses, non-JSON bodies and network failures all raise
    InstantlyError.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        workspace_id: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.api_key = api_key or settings.INSTANTLY_API_KEY
        if not self.api_key:
            raise ValueError("Instantly API key is required")
        self.workspace_id = workspace_id or settings.INSTANTLY_WORKSPACE_ID
        self.base_url = (base_url or settings.INSTANTLY_BASE_URL).rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=settings.INSTANTLY_TIMEOUT_SECONDS)

    @property
    def headers(self) -> Dict[str, str]:
        """Get authorization headers."""
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None
    ) -> Any:
        url = f"{self.base_url}{endpoint}"
        try:
            response = await self.client.request(method, url, params=params, json=json, headers=self.headers)
        except httpx.HTTPError as e:
            logger.error(f"Instantly network error on {method} {endpoint}: {e}")
            raise InstantlyError(f"Network error: {e}")

        is_json = "application/json" in response.headers.get("content-type", "")

        if response.is_error:
            error_data = response.json() if is_json else response.text
            logger.error(f"Instantly API error: {response.status_code} {method} {endpoint} - {error_data}")
            raise InstantlyError(
                f"Instantly API error: {response.status_code} {response.reason_phrase} - {error_data}",
                status=response.status_code,
                response=error_data,
            )

        if not is_json:
            raise InstantlyError("Expected JSON response from Instantly API", status=response.status_code)

        return response.json()

    async def get_emails(
        self,
        campaign_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        params = {
            "campaign_id": campaign_id,
            "status": status,
            "limit": limit,
            "offset": offset,
            "start_date": start_date,
            "end_date": end_date,
        }
        data = await self._request("GET", "/emails", params={k: v for k, v in params.items() if v})
        return data.get("emails") or []

    async def add_leads_to_campaign(self, campaign_id: str, leads: List[Dict[str, Any]]) -> Dict[str, Any]:
        return await self._request("POST", f"/campaigns/{campaign_id}/leads", json={"leads": leads})

    async def aclose(self) -> None:
        await self.client.aclose()
