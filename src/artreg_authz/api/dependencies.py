"""Router dependencies.

``get_authz_service`` is a placeholder: applications override it with
their configured service (``create_app`` does this for you).
"""

import logging
from typing import Optional

from fastapi import Header

from ..core.exceptions import AuthzError, ValidationError
from ..core.value_objects import SubjectRef

logger = logging.getLogger(__name__)


def get_authz_service():
    """Placeholder for the authz service dependency.

    Applications should override this to provide a configured AuthzService.
    """
    raise NotImplementedError(
        "Applications must provide their own authz service dependency"
    )


async def get_actor(x_subject_id: Optional[str] = Header(None)) -> Optional[SubjectRef]:
    """Caller taken from the ``X-Subject-Id`` header.

    Accepts a bare user id (``alice``) or a subject (``user:alice``).
    """
    if not x_subject_id:
        return None
    try:
        if ":" in x_subject_id:
            return SubjectRef.parse(x_subject_id)
        return SubjectRef.user(x_subject_id)
    except AuthzError as e:
        raise ValidationError(f"Invalid X-Subject-Id header: {e.message}", field="X-Subject-Id")
