"""
DApp Registry Audit Module.

Append-only JSONL trail of every registry operation, including rejected ones.
"""

__all__ = [
    "AuditEntry",
    "AuditLogger",
    "AuditResult",
    "WriteResult",
]

from .logger import AuditLogger, WriteResult
from .models import AuditEntry, AuditResult
