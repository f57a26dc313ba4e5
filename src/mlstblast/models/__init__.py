"""
Pydantic data models for mlstblast.

Provides type-safe models for BLAST hits, ST profiles, typing results
and configuration.
"""

from mlstblast.models.blast import (
    AlleleCall,
    BlastHit,
    HitRecord,
    HitStatus,
    QueryOutcome,
)
from mlstblast.models.config import TypingConfig
from mlstblast.models.profiles import STProfile
from mlstblast.models.results import (
    CallStatus,
    Diagnostic,
    DiagnosticKind,
    STCall,
    StrainTyping,
    TypingResult,
)

__all__ = [
    "AlleleCall",
    "BlastHit",
    "CallStatus",
    "Diagnostic",
    "DiagnosticKind",
    "HitRecord",
    "HitStatus",
    "QueryOutcome",
    "STCall",
    "STProfile",
    "StrainTyping",
    "TypingConfig",
    "TypingResult",
]
