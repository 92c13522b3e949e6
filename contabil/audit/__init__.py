"""Audit logging package."""

from contabil.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
