"""
CLI commands for mlstblast.

Provides command-line interface for ST calling and profile catalog
maintenance.
"""

__all__ = ["catalog", "main", "st"]
