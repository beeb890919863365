"""Fail-closed permission checking.

Wraps the check engine with input parsing, a deadline, error containment
and optional check auditing. Nothing here raises for a bad request or an
unreachable store: the answer is simply "not allowed", flagged
indeterminate when the engine could not decide.
"""

import asyncio
import logging
from typing import Optional

from ....config.constants import Timeouts
from ....core.exceptions import AuthzError, StoreUnavailableError
from ....core.value_objects import RelationTuple
from ...audit.entities import AuditEvent, AuditOperation, AuditSink, CheckResult
from ..adapters import resolve_actor
from ..entities import CheckOutcome, CheckRequest, IdentityProvider
from .check_engine import CheckEngine

logger = logging.getLogger(__name__)


class PermissionChecker:
    """Turns check requests into outcomes without ever raising."""

    def __init__(
        self,
        engine: CheckEngine,
        audit_sink: Optional[AuditSink] = None,
        identity_provider: Optional[IdentityProvider] = None,
        audit_checks: bool = False,
        check_timeout: float = Timeouts.CHECK
    ):
        self._engine = engine
        self._audit_sink = audit_sink
        self._identity_provider = identity_provider
        self._audit_checks = audit_checks and audit_sink is not None
        self._check_timeout = check_timeout

    @property
    def engine(self) -> CheckEngine:
        return self._engine

    async def check(self, request: CheckRequest, timeout: Optional[float] = None) -> bool:
        outcome = await self.check_detailed(request, timeout=timeout)
        return outcome.allowed

    async def check_detailed(
        self,
        request: CheckRequest,
        timeout: Optional[float] = None,
        engine: Optional[CheckEngine] = None
    ) -> CheckOutcome:
        """Evaluate one request.

        Args:
            request: The check to evaluate
            timeout: Deadline in seconds; defaults to the configured check timeout
            engine: Engine override, used by batches to share a membership cache

        Returns:
            CheckOutcome; malformed requests and unknown names are plain denials,
            store failures and expired deadlines are indeterminate denials
        """
        try:
            relation_tuple = request.to_tuple()
        except AuthzError as e:
            logger.debug(f"Denying malformed check {request}: {e.message}")
            return CheckOutcome.deny(e.message)

        outcome = await self._evaluate(relation_tuple, timeout, engine or self._engine)
        await self._audit(relation_tuple, outcome)
        return outcome

    async def _evaluate(
        self,
        relation_tuple: RelationTuple,
        timeout: Optional[float],
        engine: CheckEngine
    ) -> CheckOutcome:
        deadline = self._check_timeout if timeout is None else timeout
        try:
            allowed = await asyncio.wait_for(
                engine.check(relation_tuple.object, relation_tuple.relation, relation_tuple.subject),
                timeout=deadline,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Check {relation_tuple} exceeded {deadline}s; denying")
            return CheckOutcome.undetermined(f"Check timed out after {deadline}s")
        except StoreUnavailableError as e:
            logger.error(f"Check {relation_tuple} failed, store unavailable: {e.message}")
            return CheckOutcome.undetermined(e.message)
        except Exception as e:
            logger.exception(f"Unexpected error checking {relation_tuple}: {e}")
            return CheckOutcome.undetermined(str(e))

        return CheckOutcome.allow() if allowed else CheckOutcome.deny()

    async def _audit(self, relation_tuple: RelationTuple, outcome: CheckOutcome) -> None:
        if not self._audit_checks:
            return
        if outcome.indeterminate:
            result = CheckResult.INDETERMINATE
        else:
            result = CheckResult.ALLOWED if outcome.allowed else CheckResult.DENIED

        actor = await resolve_actor(self._identity_provider)
        event = AuditEvent.create(AuditOperation.CHECK, relation_tuple, actor, result)
        try:
            await self._audit_sink.record(event)
        except Exception as e:
            logger.warning(f"Failed to audit check {relation_tuple}: {e}")
