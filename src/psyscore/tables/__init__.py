"""Declarative, versioned scoring tables (item maps, thresholds, criteria)."""

from psyscore.tables.loader import (
    ScoringTables,
    clear_table_cache,
    default_tables_dir,
    load_scoring_tables,
    read_scoring_tables,
)

__all__ = [
    "ScoringTables",
    "clear_table_cache",
    "default_tables_dir",
    "load_scoring_tables",
    "read_scoring_tables",
]
