"""Legacy permission adapter.

Translates flat permission names into canonical tuples for ``user:<id>``.
Unknown names deny on check and raise on grant/revoke.
"""

import logging
from typing import Mapping, Optional, Union

from ....config.constants import Namespace
from ....core.exceptions import UnknownLegacyPermissionError
from ....core.value_objects import RelationTuple, SubjectRef
from ...audit.entities import AuditEvent
from ..entities import CheckRequest, LEGACY_PERMISSION_MAP, LegacyAlias, LegacyPermission, resolve_legacy_permission
from .mutation_service import TupleMutationService
from .permission_checker import PermissionChecker

logger = logging.getLogger(__name__)

LegacyName = Union[str, LegacyPermission]


class LegacyPermissionAdapter:
    """Legacy check/grant/revoke expressed through the canonical model."""

    def __init__(
        self,
        checker: PermissionChecker,
        mutations: TupleMutationService,
        aliases: Mapping[str, LegacyAlias] = LEGACY_PERMISSION_MAP
    ):
        self._checker = checker
        self._mutations = mutations
        self._aliases = aliases

    def resolve(self, permission: LegacyName) -> Optional[LegacyAlias]:
        return resolve_legacy_permission(permission, self._aliases)

    def _require(self, permission: LegacyName) -> LegacyAlias:
        alias = self.resolve(permission)
        if alias is None:
            raise UnknownLegacyPermissionError(str(getattr(permission, "value", permission)))
        return alias

    @staticmethod
    def _tuple_for(alias: LegacyAlias, user_id: str) -> RelationTuple:
        return RelationTuple.build(alias.namespace, alias.object_id, alias.relation, Namespace.USER, user_id)

    async def check_legacy(self, user_id: str, permission: LegacyName, timeout: Optional[float] = None) -> bool:
        alias = self.resolve(permission)
        if alias is None:
            logger.warning(f"Unknown legacy permission {permission!r}; denying")
            return False
        request = CheckRequest(alias.namespace, alias.object_id, alias.relation, Namespace.USER, user_id)
        return await self._checker.check(request, timeout=timeout)

    async def grant_legacy(
        self,
        user_id: str,
        permission: LegacyName,
        actor: Optional[SubjectRef] = None,
        timeout: Optional[float] = None
    ) -> AuditEvent:
        """Grant the canonical tuple behind a legacy permission.

        Raises:
            UnknownLegacyPermissionError: If the name has no alias
        """
        alias = self._require(permission)
        return await self._mutations.grant(self._tuple_for(alias, user_id), actor=actor, timeout=timeout)

    async def revoke_legacy(
        self,
        user_id: str,
        permission: LegacyName,
        actor: Optional[SubjectRef] = None,
        timeout: Optional[float] = None
    ) -> AuditEvent:
        alias = self._require(permission)
        return await self._mutations.revoke(self._tuple_for(alias, user_id), actor=actor, timeout=timeout)
