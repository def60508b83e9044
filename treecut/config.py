"""Configuration and result objects for a clustering run."""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from .tree_cut import DEFAULT_THRESHOLD


@dataclass
class ClusterConfig:
    """Parameters of a clustering run."""
    alignments: str  # Alignment directory or distance cache file
    tree_path: Optional[str] = None
    output_path: Optional[str] = None
    threshold: float = DEFAULT_THRESHOLD
    num_threads: Optional[int] = None  # None: CPU count, 0: single-process
    cache_path: Optional[str] = None  # Write the distance table here after ingestion
    show_progress: bool = True

    def validate(self, require_tree: bool = True) -> None:
        """Check parameters for consistency.

        Raises:
            ValueError: If a parameter is invalid
        """
        if not math.isfinite(self.threshold):
            raise ValueError(f"Threshold must be a finite number, got {self.threshold}")
        if self.num_threads is not None and self.num_threads < 0:
            raise ValueError(f"Number of threads must be non-negative, got {self.num_threads}")
        if require_tree and not self.tree_path:
            raise ValueError("A dendrogram tree file is required")
        if require_tree and not self.output_path:
            raise ValueError("An output path is required")


@dataclass
class ClusterRunResult:
    """Outcome of a clustering run."""
    clusters: List[List[str]] = field(default_factory=list)
    num_labels: int = 0  # Distinct domains in the distance table
    table_size: int = 0  # Stored pairwise distances
    num_leaves: int = 0  # Labeled leaves in the dendrogram
    missing_labels: List[str] = field(default_factory=list)
