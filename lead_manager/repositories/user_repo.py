"""
User repository with district and lead assignments.
"""
import uuid
from typing import List, Type, Union

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.models.user import User, UserDistrictAssignment, UserLeadAssignment
from lead_manager.repositories.base import BaseRepository

Assignment = Union[UserDistrictAssignment, UserLeadAssignment]


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def assigned_district_ids(self, user_id: uuid.UUID) -> List[uuid.UUID]:
        query = select(UserDistrictAssignment.district_id).where(UserDistrictAssignment.user_id == user_id)
        result = await self.session.exec(query)
        return list(result.all())

    async def assigned_lead_ids(self, user_id: uuid.UUID) -> List[uuid.UUID]:
        query = select(UserLeadAssignment.lead_id).where(UserLeadAssignment.user_id == user_id)
        result = await self.session.exec(query)
        return list(result.all())

    async def assign(self, user_id: uuid.UUID, target: str, ids: List[uuid.UUID]) -> int:
        """
        Assign districts or leads (target "district_id" / "lead_id") to a user.

        Already assigned ids are left as they are. Returns how many new
        assignments were created.
        """
        model = self._assignment_model(target)
        column = getattr(model, target)
        existing_query = select(column).where(model.user_id == user_id, column.in_(ids))
        existing = set((await self.session.exec(existing_query)).all())

        new_ids = [id_ for id_ in dict.fromkeys(ids) if id_ not in existing]
        self.session.add_all([model(user_id=user_id, **{target: id_}) for id_ in new_ids])
        await self.session.commit()
        return len(new_ids)

    async def unassign(self, user_id: uuid.UUID, target: str, ids: List[uuid.UUID]) -> int:
        """Remove assignments; returns how many were deleted."""
        model = self._assignment_model(target)
        column = getattr(model, target)
        query = select(model).where(model.user_id == user_id, column.in_(ids))
        assignments = (await self.session.exec(query)).all()
        for assignment in assignments:
            await self.session.delete(assignment)
        await self.session.commit()
        return len(assignments)

    @staticmethod
    def _assignment_model(target: str) -> Type[Assignment]:
        if target == "district_id":
            return UserDistrictAssignment
        return UserLeadAssignment
