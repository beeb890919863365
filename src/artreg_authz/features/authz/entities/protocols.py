"""Protocol interfaces consumed by the authz services."""

from abc import abstractmethod
from typing import Optional, Protocol, runtime_checkable

from ....core.value_objects import SubjectRef


@runtime_checkable
class IdentityProvider(Protocol):
    """Source of the current caller. Session lifecycle lives elsewhere."""

    @abstractmethod
    async def current_subject(self) -> Optional[SubjectRef]:
        """The authenticated subject, or None when nobody is signed in."""
        ...
