"""Audit sinks that do not need a database."""

import json
import logging
from typing import List

from ....config.logging_config import AUDIT_LOGGER_NAME
from ..entities import AuditEvent, AuditOperation, AuditSink

audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)


class LoggingAuditSink(AuditSink):
    """Writes each event as one JSON line to the audit logger."""

    def __init__(self, logger: logging.Logger = audit_logger):
        self._logger = logger

    async def record(self, event: AuditEvent) -> None:
        self._logger.info(json.dumps(event.to_dict(), sort_keys=True))


class InMemoryAuditSink(AuditSink):
    """Keeps events in a list; for tests and embedded use."""

    def __init__(self):
        self.events: List[AuditEvent] = []

    async def record(self, event: AuditEvent) -> None:
        self.events.append(event)

    def of_kind(self, operation: AuditOperation) -> List[AuditEvent]:
        return [e for e in self.events if e.operation == operation]

    def clear(self) -> None:
        self.events.clear()
