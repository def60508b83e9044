"""
treecut: threshold clustering of structural alignment dendrograms

A Python package for grouping structurally aligned protein domains into
clusters by cutting a dendrogram wherever a subtree's members are not all
within a pairwise distance threshold.
"""

__version__ = "0.1.0"

from .interner import SymbolInterner
from .distance_table import DistanceTable
from .records import (
    PairDistance,
    alignment_distance,
    parse_pair_labels,
    record_to_distance,
    read_alignment_file
)
from .ingest import find_alignment_files, read_alignment_distances
from .tree_cut import DEFAULT_THRESHOLD, tree_clusters
from .config import ClusterConfig, ClusterRunResult
from .pipeline import build_distance_table, run_clustering
from .errors import (
    TreeCutError,
    RecordFormatError,
    IngestionError,
    InternerCapacityError,
    DistanceCacheError
)

__all__ = [
    "SymbolInterner",
    "DistanceTable",
    "PairDistance",
    "alignment_distance",
    "parse_pair_labels",
    "record_to_distance",
    "read_alignment_file",
    "find_alignment_files",
    "read_alignment_distances",
    "DEFAULT_THRESHOLD",
    "tree_clusters",
    "ClusterConfig",
    "ClusterRunResult",
    "build_distance_table",
    "run_clustering",
    "TreeCutError",
    "RecordFormatError",
    "IngestionError",
    "InternerCapacityError",
    "DistanceCacheError"
]
