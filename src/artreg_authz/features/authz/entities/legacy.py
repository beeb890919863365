"""Legacy flat permissions and their canonical tuples.

Older callers ask for strings such as ``manage_users``; each maps onto one
(namespace, object id, relation) triple checked for ``user:<id>``.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union

from ....config.constants import WILDCARD, Namespace, Relations, SystemObjects


class LegacyPermission(str, Enum):
    """Flat permission names still used by older screens."""

    MANAGE_USERS = "manage_users"
    MANAGE_ARTWORKS = "manage_artworks"
    MANAGE_NFC_TAGS = "manage_nfc_tags"
    VIEW_STATISTICS = "view_statistics"
    MANAGE_SYSTEM = "manage_system"
    MANAGE_APPRAISALS = "manage_appraisals"


@dataclass(frozen=True)
class LegacyAlias:
    """Canonical target of a legacy permission."""

    namespace: Namespace
    object_id: str
    relation: str


LEGACY_PERMISSION_MAP: Mapping[str, LegacyAlias] = MappingProxyType({
    LegacyPermission.MANAGE_USERS.value: LegacyAlias(Namespace.SYSTEM, SystemObjects.GLOBAL, Relations.USER_MANAGER),
    LegacyPermission.MANAGE_ARTWORKS.value: LegacyAlias(Namespace.ARTWORK, WILDCARD, Relations.EDITOR),
    LegacyPermission.MANAGE_NFC_TAGS.value: LegacyAlias(Namespace.NFC_TAG, WILDCARD, Relations.MANAGER),
    LegacyPermission.VIEW_STATISTICS.value: LegacyAlias(Namespace.SYSTEM, SystemObjects.GLOBAL, Relations.STATISTICS_VIEWER),
    LegacyPermission.MANAGE_SYSTEM.value: LegacyAlias(Namespace.SYSTEM, SystemObjects.GLOBAL, Relations.ADMIN),
    LegacyPermission.MANAGE_APPRAISALS.value: LegacyAlias(Namespace.APPRAISAL, WILDCARD, Relations.EDITOR),
})


def resolve_legacy_permission(
    name: Union[str, LegacyPermission],
    aliases: Mapping[str, LegacyAlias] = LEGACY_PERMISSION_MAP
) -> Optional[LegacyAlias]:
    """Alias for a legacy name, or None if unknown."""
    key = name.value if isinstance(name, LegacyPermission) else name
    if not isinstance(key, str):
        return None
    return aliases.get(key)
