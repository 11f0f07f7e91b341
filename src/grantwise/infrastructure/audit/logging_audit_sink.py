"""Audit sink that writes structured records to the ``grantwise.audit`` logger."""

import logging

from grantwise.application.ports import AuditEvent

AUDIT_LOGGER = "grantwise.audit"


class LoggingAuditSink:
    """Records audit events as log records. Never raises into the caller."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(AUDIT_LOGGER)

    def record(self, event: AuditEvent) -> None:
        try:
            self._logger.info(
                "%s %s -> %s",
                event.action,
                event.actor or "system",
                event.target,
                extra={
                    "audit_actor": event.actor,
                    "audit_action": event.action,
                    "audit_target": event.target,
                    "audit_metadata": event.metadata,
                    "audit_timestamp": event.timestamp.isoformat(),
                },
            )
        except Exception:
            logging.getLogger(__name__).exception("Failed to record audit event %s", event.action)
