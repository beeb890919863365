"""Authz RPC router.

HTTP+JSON surface over AuthzService. Check routes always answer 200 with
``allowed``; write routes raise the error taxonomy, which the handlers in
``api.exception_handlers`` map onto HTTP statuses.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path

from ..core.value_objects import SubjectRef
from ..features.authz.services import AuthzService
from .dependencies import get_actor, get_authz_service
from .models import (
    BatchCheckRequestModel,
    BatchCheckResponse,
    CheckRequestModel,
    CheckResponse,
    ExpandRequestModel,
    ExpandResponse,
    LegacyCheckResponse,
    LegacyPermissionRequestModel,
    MutationResponse,
    ObjectPermissionModel,
    TupleModel,
    UserPermissionsResponse,
)


router = APIRouter(
    prefix="/authz",
    tags=["Authorization"],
    responses={
        400: {"description": "Unknown namespace, relation or legacy permission"},
        500: {"description": "Audit write failed"},
        503: {"description": "Tuple store unavailable"},
        504: {"description": "Mutation outcome unknown"},
    }
)


@router.post("/check", response_model=CheckResponse, summary="Check a relation")
async def check(
    request: CheckRequestModel,
    service: AuthzService = Depends(get_authz_service)
) -> CheckResponse:
    outcome = await service.checker.check_detailed(request.to_request())
    return CheckResponse.from_outcome(outcome)


@router.post("/batch-check", response_model=BatchCheckResponse, summary="Check many relations")
async def batch_check(
    request: BatchCheckRequestModel,
    service: AuthzService = Depends(get_authz_service)
) -> BatchCheckResponse:
    """Results keep request order."""
    result = await service.batch_check_detailed(
        [check.to_request() for check in request.checks],
        all_or_nothing=request.all_or_nothing,
    )
    return BatchCheckResponse.from_result(result)


@router.post("/grant", response_model=MutationResponse, summary="Grant a relation tuple")
async def grant(
    request: TupleModel,
    service: AuthzService = Depends(get_authz_service),
    actor: Optional[SubjectRef] = Depends(get_actor)
) -> MutationResponse:
    event = await service.grant(**request.model_dump(), actor=actor)
    return MutationResponse.from_event(event)


@router.post("/revoke", response_model=MutationResponse, summary="Revoke a relation tuple")
async def revoke(
    request: TupleModel,
    service: AuthzService = Depends(get_authz_service),
    actor: Optional[SubjectRef] = Depends(get_actor)
) -> MutationResponse:
    event = await service.revoke(**request.model_dump(), actor=actor)
    return MutationResponse.from_event(event)


@router.post("/expand", response_model=ExpandResponse, summary="List subjects holding a relation")
async def expand(
    request: ExpandRequestModel,
    service: AuthzService = Depends(get_authz_service)
) -> ExpandResponse:
    subjects = await service.expand(request.namespace, request.object_id, request.relation)
    return ExpandResponse.from_subjects(subjects)


@router.post("/check-legacy", response_model=LegacyCheckResponse, summary="Check a legacy permission")
async def check_legacy(
    request: LegacyPermissionRequestModel,
    service: AuthzService = Depends(get_authz_service)
) -> LegacyCheckResponse:
    allowed = await service.check_legacy(request.subject_id, request.permission)
    return LegacyCheckResponse(allowed=allowed)


@router.post("/grant-legacy", response_model=MutationResponse, summary="Grant a legacy permission")
async def grant_legacy(
    request: LegacyPermissionRequestModel,
    service: AuthzService = Depends(get_authz_service),
    actor: Optional[SubjectRef] = Depends(get_actor)
) -> MutationResponse:
    event = await service.grant_legacy(request.subject_id, request.permission, actor=actor)
    return MutationResponse.from_event(event)


@router.post("/revoke-legacy", response_model=MutationResponse, summary="Revoke a legacy permission")
async def revoke_legacy(
    request: LegacyPermissionRequestModel,
    service: AuthzService = Depends(get_authz_service),
    actor: Optional[SubjectRef] = Depends(get_actor)
) -> MutationResponse:
    event = await service.revoke_legacy(request.subject_id, request.permission, actor=actor)
    return MutationResponse.from_event(event)


@router.get(
    "/users/{user_id}/permissions",
    response_model=UserPermissionsResponse,
    summary="List a user's permissions"
)
async def list_user_permissions(
    user_id: str = Path(..., description="User id"),
    service: AuthzService = Depends(get_authz_service)
) -> UserPermissionsResponse:
    permissions = await service.list_user_permissions(user_id)
    return UserPermissionsResponse(
        user_id=user_id,
        permissions=[ObjectPermissionModel.from_permission(p) for p in permissions],
    )
