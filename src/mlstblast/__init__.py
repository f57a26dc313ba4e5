"""
mlstblast: multi-locus sequence typing from BLAST results.

Assigns sequence types (STs) to bacterial strains by comparing per-locus
BLAST best hits against a species-prefixed ST profile catalog. Strains
typed at only some loci are matched on the loci they were typed for.
"""

__version__ = "0.1.0"
__author__ = "mlstblast developers"

from mlstblast.core.pipeline import STTypingPipeline
from mlstblast.core.matcher import ProfileMatcher
from mlstblast.core.profiles import ProfileCatalog
from mlstblast.models.config import TypingConfig
from mlstblast.models.results import STCall, TypingResult

__all__ = [
    "ProfileCatalog",
    "ProfileMatcher",
    "STCall",
    "STTypingPipeline",
    "TypingConfig",
    "TypingResult",
    "__version__",
]
