"""Audit logging package."""

from ledger.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
