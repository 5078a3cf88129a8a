"""
Core data and query layer.

This package contains:
- normalize: lenient text and number normalization for form-style input
- query_engine: matchers, criteria and the stable record filter
- datasets: builtin read-only tables (with optional CSV overrides)
- lookups: the per-task search / filter / lookup configurations
- summary: counts, numeric ranges and user messages for a query result
- stores: injectable append-only stores (plantations, inventory, incidents)
"""
