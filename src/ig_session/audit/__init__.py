"""Session audit storage."""

from ig_session.audit.logger import SessionAuditLogger

__all__ = ["SessionAuditLogger"]
