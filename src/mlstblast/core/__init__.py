"""
Core algorithms for BLAST-based ST typing.

Modules, in data-flow order:
    parsers       BLAST tabular output -> per-query outcomes
    strain_index  accepted hits -> strain/species/locus index
    profiles      ST profile catalog loading and conversion
    matcher       masked-key resolution of strains to ST calls
    report        CSV report and tidy summary rendering
    pipeline      end-to-end orchestration

Submodules are imported explicitly; the models package depends on
constants and exceptions defined here.
"""
