"""
Pydantic configuration models for mlstblast.

These models define the alignment filters and matching policy consumed by
the typing core. Configuration can be loaded from YAML files or built from
CLI arguments; the core only ever sees plain values.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from mlstblast.core.constants import (
    DEFAULT_MIN_ALIGNMENT_LENGTH,
    DEFAULT_MIN_PERCENT_IDENTITY,
)

logger = logging.getLogger(__name__)

AmbiguousLocusPolicy = Literal["enumerate", "fail"]


class TypingConfig(BaseModel):
    """
    Configuration for hit filtering and ST resolution.

    Filters:
        A best hit is accepted when its alignment length is strictly greater
        than min_alignment_length and its percent identity is at least
        min_percent_identity. Defaults (200 bp, 95%) follow common 7-locus
        MLST schemes where loci are 400-500 bp.

    Ambiguous loci:
        When several queries of one strain hit different alleles of the same
        locus, "enumerate" tries every allele combination as a separate
        candidate key, while "fail" aborts the run with AmbiguousLocusError.
    """

    min_alignment_length: int = Field(
        default=DEFAULT_MIN_ALIGNMENT_LENGTH,
        ge=0,
        description="Alignments must be longer than this (bp) to be accepted",
    )
    min_percent_identity: float = Field(
        default=DEFAULT_MIN_PERCENT_IDENTITY,
        ge=0,
        le=100,
        description="Minimum percent identity for an accepted alignment",
    )
    report_enabled: bool = Field(
        default=True,
        description="Resolve ST-types and write the report (False = hit table only)",
    )
    write_hit_table: bool = Field(
        default=True,
        description="Persist the accepted/rejected hit table",
    )
    ambiguous_locus_policy: AmbiguousLocusPolicy = Field(
        default="enumerate",
        description="How to treat loci with more than one observed allele type",
    )
    max_workers: int = Field(
        default=1,
        ge=1,
        description="Threads used to resolve strains (1 = sequential)",
    )

    model_config = {"frozen": True}

    @classmethod
    def from_yaml(cls, path: Path) -> TypingConfig:
        """
        Load typing configuration from a YAML file.

        Accepts the nested layout written by to_yaml() as well as flat
        field names at the top level. Unknown keys are ignored.

        Raises:
            FileNotFoundError: If YAML file does not exist.
            ValueError: If the YAML is not a mapping or holds invalid values.
        """
        import yaml

        raw = yaml.safe_load(path.read_text())
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            msg = f"YAML config must be a mapping, got {type(raw).__name__}"
            raise ValueError(msg)

        flat = _flatten_yaml_config(raw)
        logger.debug("Loaded typing config from %s: %s", path, flat)
        return cls(**flat)

    def to_yaml(self, path: Path) -> None:
        """Write typing configuration to a YAML file."""
        path.write_text(self.to_yaml_str())

    def to_yaml_str(self) -> str:
        import yaml

        data = _build_yaml_structure(self)
        return yaml.dump(data, default_flow_style=False, sort_keys=False)

    def with_overrides(self, **overrides: Any) -> TypingConfig:
        """Return a copy with non-None overrides applied and re-validated."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return TypingConfig(**values)


def _flatten_yaml_config(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Flatten nested YAML config structure into TypingConfig keyword arguments.

    Maps the documented nested YAML structure:
        filters.min_length -> min_alignment_length
        filters.min_identity -> min_percent_identity
        matching.ambiguous_loci -> ambiguous_locus_policy
        matching.threads -> max_workers
        output.report -> report_enabled
        output.hit_table -> write_hit_table
    """
    flat: dict[str, Any] = {}

    for name in TypingConfig.model_fields:
        _map_if_present(raw, name, flat, name)

    filters = raw.get("filters") or {}
    _map_if_present(filters, "min_length", flat, "min_alignment_length")
    _map_if_present(filters, "min_identity", flat, "min_percent_identity")

    matching = raw.get("matching") or {}
    _map_if_present(matching, "ambiguous_loci", flat, "ambiguous_locus_policy")
    _map_if_present(matching, "threads", flat, "max_workers")

    output_sec = raw.get("output") or {}
    _map_if_present(output_sec, "report", flat, "report_enabled")
    _map_if_present(output_sec, "hit_table", flat, "write_hit_table")

    return flat


def _map_if_present(
    source: dict[str, Any],
    source_key: str,
    target: dict[str, Any],
    target_key: str,
) -> None:
    """Copy value from source dict to target dict if key exists."""
    if source_key in source and source[source_key] is not None:
        target[target_key] = source[source_key]


def _build_yaml_structure(config: TypingConfig) -> dict[str, Any]:
    """Build nested YAML dict from a TypingConfig instance."""
    return {
        "filters": {
            "min_length": config.min_alignment_length,
            "min_identity": config.min_percent_identity,
        },
        "matching": {
            "ambiguous_loci": config.ambiguous_locus_policy,
            "threads": config.max_workers,
        },
        "output": {
            "report": config.report_enabled,
            "hit_table": config.write_hit_table,
        },
    }
