"""Identity provider adapters."""

import logging
from typing import Optional

from ....core.value_objects import SubjectRef
from ..entities import IdentityProvider

logger = logging.getLogger(__name__)


class StaticIdentityProvider(IdentityProvider):
    """Always reports the same subject. Used for workers, scripts and tests."""

    def __init__(self, subject: Optional[SubjectRef] = None):
        self._subject = subject

    @classmethod
    def for_user(cls, user_id: str) -> "StaticIdentityProvider":
        return cls(SubjectRef.user(user_id))

    async def current_subject(self) -> Optional[SubjectRef]:
        return self._subject


async def resolve_actor(provider: Optional[IdentityProvider]) -> Optional[SubjectRef]:
    """Current subject for audit attribution; None when unavailable."""
    if provider is None:
        return None
    try:
        return await provider.current_subject()
    except Exception as e:
        logger.warning(f"Identity provider failed, recording anonymous actor: {e}")
        return None
