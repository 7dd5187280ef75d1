# This project was developed with assistance from AI tools.
"""Pure auth utility functions with no FastAPI or HTTP dependencies.

Used by the middleware layer (HTTP request auth) and by the policy service
when it filters queries by the caller's scope.
"""

from db.enums import UserRole

from ..schemas.auth import DataScope

# Roles allowed to run review, replacement and cancellation operations.
STAFF_ROLES = frozenset({UserRole.ADMIN, UserRole.STAFF})


def build_data_scope(role: UserRole, user_id: str) -> DataScope:
    """Build data scope rules based on the user's role."""
    if role in STAFF_ROLES:
        return DataScope(all_policies=True)
    # broker -- only the policies they manage
    return DataScope(managed_by=user_id)
