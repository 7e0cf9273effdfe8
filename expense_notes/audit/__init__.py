"""Audit logging package."""

from expense_notes.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
