"""Role resolution and screen gating.

Two role signals exist and are used for different purposes:

- the role claim in the identity's metadata, cheap and local, used for
  navigation only;
- ``user_roles`` rows, authoritative, used for every chef and admin
  screen.
"""

import logging
from typing import Optional

from homeplate.domain.session.identity import Identity
from homeplate.domain.session.roles import (
    AccessDecision,
    EffectiveRole,
    Role,
    RoleAssignment,
    ScreenAccess,
)
from homeplate.domain.shared.errors import HomePlateError
from homeplate.domain.shared.ports.data_service import IDataService

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
HOME_PATH = "/"

SIGN_IN_NOTICE = "Please sign in to continue"
NO_ADMIN_ACCESS = "You don't have admin access"
NO_CHEF_ACCESS = "You don't have chef access"


def navigation_role(identity: Optional[Identity]) -> EffectiveRole:
    """
    Effective role for navigation, from the role claim.

    The claim is never trusted for admin: an 'admin' claim navigates as a
    customer.
    """
    if identity is None:
        return EffectiveRole.ANONYMOUS
    if identity.role_claim == Role.CHEF.value:
        return EffectiveRole.CHEF
    return EffectiveRole.CUSTOMER


class RoleResolver:
    """
    Resolves effective roles and screen access.

    Example:
        >>> resolver = RoleResolver(data_service)
        >>> decision = await resolver.resolve_role(identity, ScreenAccess.ADMIN)
        >>> decision.granted
        False
    """

    def __init__(self, data_service: IDataService):
        """
        Initialize resolver.

        Args:
            data_service: Remote data service holding ``user_roles``
        """
        self._data = data_service

    async def has_role(self, identity: Optional[Identity], role: Role) -> bool:
        """
        Authoritative role check against ``user_roles``.

        Fails closed: any lookup error is logged and yields False.
        """
        if identity is None:
            return False

        try:
            result = await (
                self._data.table("user_roles")
                .select("user_id,role")
                .eq("user_id", identity.id)
                .eq("role", role.value)
                .limit(1)
                .execute()
            )
        except HomePlateError as e:
            logger.warning(
                "Role lookup failed, denying",
                extra={"user_id": identity.id, "role": role.value, "error": str(e)},
            )
            return False

        for row in result.data:
            try:
                assignment = RoleAssignment.from_row(row)
            except (KeyError, ValueError):
                logger.warning(
                    "Malformed role row ignored",
                    extra={"user_id": identity.id, "row": row},
                )
                continue
            if assignment.user_id == identity.id and assignment.role == role:
                return True
        return False

    async def resolve_role(
        self, identity: Optional[Identity], access: ScreenAccess
    ) -> AccessDecision:
        """
        Decide whether ``identity`` may open a screen with ``access``.

        Chef and admin screens always perform the authoritative lookup.
        Anonymous identities are sent to the login page; denied sessions
        are sent home with a notice.
        """
        role = navigation_role(identity)

        if access == ScreenAccess.PUBLIC:
            return AccessDecision.allow(role)

        if identity is None:
            return AccessDecision.deny(role, LOGIN_PATH, SIGN_IN_NOTICE)

        if access == ScreenAccess.AUTHENTICATED:
            return AccessDecision.allow(role)

        if access == ScreenAccess.CHEF:
            if await self.has_role(identity, Role.CHEF):
                return AccessDecision.allow(EffectiveRole.CHEF)
            logger.info("Chef access denied", extra={"user_id": identity.id})
            return AccessDecision.deny(role, HOME_PATH, NO_CHEF_ACCESS)

        if await self.has_role(identity, Role.ADMIN):
            return AccessDecision.allow(EffectiveRole.ADMIN)
        logger.info(
            "Admin access denied",
            extra={"user_id": identity.id, "role_claim": identity.role_claim},
        )
        return AccessDecision.deny(role, HOME_PATH, NO_ADMIN_ACCESS)
