"""Request and response models for the authz RPC router.

Namespaces travel as plain strings so an unknown namespace reaches the
service and is denied, rather than being rejected as a schema error.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..core.value_objects import SubjectRef
from ..features.audit.entities import AuditEvent
from ..features.authz.entities import BatchCheckResult, CheckOutcome, CheckRequest, ObjectPermission


class CheckRequestModel(BaseModel):
    """Single check addressed by flat fields."""

    namespace: str = Field(..., description="Object namespace", examples=["artwork"])
    object_id: str = Field(..., description="Object id, or '*' for the namespace wildcard")
    relation: str = Field(..., description="Relation name", examples=["editor"])
    subject_namespace: str = Field("user", description="Subject namespace")
    subject_id: str = Field(..., description="Subject id")

    def to_request(self) -> CheckRequest:
        return CheckRequest(
            self.namespace, self.object_id, self.relation, self.subject_namespace, self.subject_id
        )


class TupleModel(BaseModel):
    """Relation tuple for grant and revoke."""

    namespace: str = Field(..., description="Object namespace")
    object_id: str = Field(..., description="Object id, or '*' for the namespace wildcard")
    relation: str = Field(..., description="Relation name")
    subject_namespace: str = Field("user", description="Subject namespace")
    subject_id: str = Field(..., description="Subject id")
    subject_relation: Optional[str] = Field(None, description="Subject relation for usersets, e.g. 'member'")


class BatchCheckRequestModel(BaseModel):
    checks: List[CheckRequestModel] = Field(default_factory=list)
    all_or_nothing: bool = Field(False, description="Fail the whole batch if any check is indeterminate")


class ExpandRequestModel(BaseModel):
    namespace: str
    object_id: str
    relation: str


class LegacyPermissionRequestModel(BaseModel):
    subject_id: str = Field(..., description="User id")
    permission: str = Field(..., description="Legacy permission name", examples=["manage_users"])


class CheckResponse(BaseModel):
    allowed: bool
    indeterminate: bool = False
    error: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: CheckOutcome) -> "CheckResponse":
        return cls(allowed=outcome.allowed, indeterminate=outcome.indeterminate, error=outcome.error)


class BatchCheckResponse(BaseModel):
    results: List[bool]
    indeterminate_indices: List[int] = Field(default_factory=list)
    partial_failure: bool = False

    @classmethod
    def from_result(cls, result: BatchCheckResult) -> "BatchCheckResponse":
        return cls(
            results=result.results,
            indeterminate_indices=result.indeterminate_indices,
            partial_failure=result.partial_failure,
        )


class MutationResponse(BaseModel):
    """Audit record of an applied grant or revoke."""

    operation: str
    tuple: Dict[str, Any]
    actor: Optional[str] = None
    timestamp: datetime

    @classmethod
    def from_event(cls, event: AuditEvent) -> "MutationResponse":
        return cls(
            operation=event.operation.value,
            tuple=event.tuple.to_dict(),
            actor=event.actor,
            timestamp=event.timestamp,
        )


class ExpandResponse(BaseModel):
    subjects: List[str]

    @classmethod
    def from_subjects(cls, subjects: List[SubjectRef]) -> "ExpandResponse":
        return cls(subjects=[str(subject) for subject in subjects])


class LegacyCheckResponse(BaseModel):
    allowed: bool


class ObjectPermissionModel(BaseModel):
    namespace: str
    object_id: str
    relation: str

    @classmethod
    def from_permission(cls, permission: ObjectPermission) -> "ObjectPermissionModel":
        return cls(
            namespace=permission.namespace.value,
            object_id=permission.object_id,
            relation=permission.relation,
        )


class UserPermissionsResponse(BaseModel):
    user_id: str
    permissions: List[ObjectPermissionModel]
