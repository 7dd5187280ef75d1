# This project was developed with assistance from AI tools.
"""Shared data scope filtering for policy queries.

Staff and admins see every policy; brokers only the ones they manage. Out of
scope policies are reported as not found rather than forbidden so their
existence does not leak.
"""

from db import Policy
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import NotFoundError
from ..schemas.auth import DataScope, UserContext


def apply_data_scope(stmt, scope: DataScope):
    """Restrict a ``select`` over Policy to the caller's scope."""
    if not scope.all_policies and scope.managed_by:
        stmt = stmt.where(Policy.managed_by == scope.managed_by)
    return stmt


def in_scope(policy: Policy, scope: DataScope) -> bool:
    return scope.all_policies or (scope.managed_by is not None and policy.managed_by == scope.managed_by)


async def ensure_policy_in_scope(session: AsyncSession, policy_id: int, user: UserContext) -> Policy:
    """Load a bare policy row, raising NotFoundError when missing or out of scope."""
    policy = await session.get(Policy, policy_id)
    if policy is None or not in_scope(policy, user.data_scope):
        raise NotFoundError(f"Policy {policy_id} not found", context={"policy_id": policy_id})
    return policy
