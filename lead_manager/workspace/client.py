"""
HTTP client for the Lead Manager API, used by the lead workspace.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel

from lead_manager.core.exceptions import LeadManagerException
from lead_manager.schemas.campaign import CampaignResponse
from lead_manager.schemas.district import DistrictContactResponse
from lead_manager.schemas.lead import LeadResponse
from lead_manager.schemas.sync import SyncResults
from lead_manager.schemas.touchpoint import TouchpointResponse

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ApiError(LeadManagerException):
    """Non-2xx response or transport failure talking to the API."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


def _error_message(response: httpx.Response) -> str:
    """Server error text: `{error}` or FastAPI's `{detail}`, else the raw body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        message = body.get("error") or body.get("detail")
        if message:
            return message if isinstance(message, str) else str(message)
    return str(body)


class LeadManagerClient:
    """Thin async wrapper over the REST endpoints."""

    def __init__(
        self,
        base_url: str,
        token: str,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=30.0)
        self.client.headers["Authorization"] = f"Bearer {token}"

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(f"Network error: {e}")

        if response.is_error:
            message = _error_message(response)
            logger.debug(f"{method} {path} failed with {response.status_code}: {message}")
            raise ApiError(message, response.status_code)

        try:
            return response.json()
        except ValueError:
            raise ApiError(f"Expected JSON from {method} {path}", response.status_code)

    async def _fetch(
        self,
        model: Type[ModelT],
        method: str,
        path: str,
        key: Optional[str] = None,
        many: bool = False,
        **kwargs
    ) -> Any:
        """Request and parse the body (or `body[key]`) into `model`, or a list of them."""
        data = await self._request(method, path, **kwargs)
        try:
            if key is not None:
                data = data[key]
            if many:
                if not isinstance(data, list):
                    raise TypeError(f"expected a list, got {type(data).__name__}")
                return [model.model_validate(item) for item in data]
            return model.model_validate(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ApiError(f"Unexpected response from {method} {path}: {e}")

    async def list_campaigns(self, company: str) -> List[CampaignResponse]:
        return await self._fetch(
            CampaignResponse, "GET", "/api/campaigns", key="campaigns", many=True, params={"company": company}
        )

    async def list_leads(self, company: str) -> List[LeadResponse]:
        return await self._fetch(
            LeadResponse, "GET", "/api/leads", key="leads", many=True, params={"company": company}
        )

    async def list_district_contacts(self, district_id: Optional[uuid.UUID] = None) -> List[DistrictContactResponse]:
        params = {"district_id": str(district_id)} if district_id else None
        return await self._fetch(
            DistrictContactResponse, "GET", "/api/district-contacts", key="contacts", many=True, params=params
        )

    async def list_touchpoints(
        self,
        lead_id: Optional[uuid.UUID] = None,
        district_contact_id: Optional[uuid.UUID] = None
    ) -> List[TouchpointResponse]:
        if lead_id:
            params = {"lead_id": str(lead_id)}
        else:
            params = {"district_contact_id": str(district_contact_id)}
        return await self._fetch(
            TouchpointResponse, "GET", "/api/touchpoints", key="touchpoints", many=True, params=params
        )

    async def update_lead(self, lead_id: uuid.UUID, payload: Dict[str, Any]) -> LeadResponse:
        return await self._fetch(LeadResponse, "PUT", f"/api/leads/{lead_id}", json=payload)

    async def update_district_contact(self, contact_id: uuid.UUID, payload: Dict[str, Any]) -> DistrictContactResponse:
        return await self._fetch(
            DistrictContactResponse, "PUT", f"/api/district-contacts/{contact_id}", json=payload
        )

    async def create_touchpoint(self, payload: Dict[str, Any]) -> TouchpointResponse:
        return await self._fetch(TouchpointResponse, "POST", "/api/touchpoints", key="touchpoint", json=payload)

    async def sync_instantly(self, lead_ids: List[uuid.UUID]) -> SyncResults:
        return await self._fetch(
            SyncResults, "POST", "/api/sync-instantly", json={"leadIds": [str(i) for i in lead_ids]}
        )

    async def aclose(self) -> None:
        await self.client.aclose()
