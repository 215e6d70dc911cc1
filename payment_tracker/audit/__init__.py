"""Audit logging package."""

from payment_tracker.audit.logger import AuditLogger, get_logger

__all__ = ["AuditLogger", "get_logger"]
