"""
Admin Panel Module

Administrative operations of the Pollution Report backend:
- Account deletion, scoped by barangay for barangay admins
- Rejection warnings to reporters of off-topic reports

Key Components:
- services/: Business logic services
"""

from .services import AccountService, ModerationService

__all__ = ["AccountService", "ModerationService"]
