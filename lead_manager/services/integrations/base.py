"""
Base interfaces for integration providers.
Abstract base classes for third-party outreach tools.
"""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, List


class OutreachProvider(ABC):
    """Base interface for email outreach tools (Instantly, ...)"""

    @abstractmethod
    async def add_leads_to_campaign(self, campaign_id: str, leads: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Push leads into a campaign of the outreach tool.

        Returns:
            {"success": bool, "added": int, "failed": int}
        """
        pass

    @abstractmethod
    async def get_emails(
        self,
        campaign_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Emails sent by the tool.

        Each email has at least: id, email (recipient), campaign_id, status,
        and optionally sent_at, replied_at, bounced_at, subject, body.
        """
        pass

    async def aclose(self) -> None:
        """Release network resources."""
        pass
