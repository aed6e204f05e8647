"""
Retrieval subpackage: candidate filtering, lexical scoring, semantic re-ranking and budgeted packing.
"""
__all__ = [
    "types",
    "filters",
    "lexical",
    "rerank",
    "pack",
    "rules",
    "pipeline",
]
