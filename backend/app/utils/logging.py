"""Logging setup and structured audit logging for access decisions."""

import logging
from typing import Any

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once at application startup."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


class AccessAuditLogger:
    """Structured logger for PIN checks, read decisions and request transitions.

    PINs and document content are never logged.
    """

    def _emit(self, msg: str, allowed: bool, log_data: dict[str, Any]) -> None:
        if allowed:
            logger.info(msg, extra={"structured": log_data})
        else:
            logger.warning(msg, extra={"structured": log_data})

    def log_pin_attempt(self, target_user_id: int, valid: bool, session_token: str) -> None:
        """Log a PIN verification attempt."""
        log_data: dict[str, Any] = {
            "event": "pin_verification",
            "target_user_id": target_user_id,
            "outcome": "valid" if valid else "invalid",
            "session": session_token[:8],
        }
        self._emit(f"PIN verification for user {target_user_id} - {log_data['outcome']}", valid, log_data)

    def log_read_decision(
        self,
        document_id: int,
        action: str,
        allowed: bool,
        authenticated_user_id: int | None,
        verified_owner_id: int | None,
    ) -> None:
        """Log the outcome of a document read check."""
        log_data: dict[str, Any] = {
            "event": "document_read",
            "document_id": document_id,
            "action": action,
            "outcome": "allowed" if allowed else "denied",
            "authenticated_user_id": authenticated_user_id,
            "verified_owner_id": verified_owner_id,
        }
        self._emit(f"Document {action}: {document_id} - {log_data['outcome']}", allowed, log_data)

    def log_request_transition(
        self, request_id: int, actor_user_id: int, status: str, accepted: bool
    ) -> None:
        """Log an access request status change attempt."""
        log_data: dict[str, Any] = {
            "event": "access_request_transition",
            "request_id": request_id,
            "actor_user_id": actor_user_id,
            "status": status,
            "outcome": "accepted" if accepted else "rejected",
        }
        self._emit(f"Access request {request_id} -> {status} - {log_data['outcome']}", accepted, log_data)


audit_logger = AccessAuditLogger()
