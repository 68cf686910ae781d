"""Acting identity passed explicitly into every state-changing operation."""

from dataclasses import dataclass

from ..core.exceptions import AuthorizationError
from ..models.user import STAFF_ROLES, UserRole


@dataclass(frozen=True)
class Actor:
    """Authenticated caller: who is acting and in which role."""

    user_id: int
    role: UserRole

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def owns(self, customer_id: int) -> bool:
        return self.user_id == customer_id

    def require_roles(self, *roles: UserRole) -> None:
        """Raise AuthorizationError unless the actor holds one of ``roles``."""
        if self.role not in roles:
            raise AuthorizationError(
                detail=f"Role '{self.role.value}' may not perform this action",
                required_roles=[role.value for role in roles],
            )

    def require_staff(self) -> None:
        self.require_roles(*STAFF_ROLES)
