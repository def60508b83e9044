"""
End-to-end clustering run: distances, dendrogram, threshold cut, output.
"""

import logging
from pathlib import Path

from .config import ClusterConfig, ClusterRunResult
from .distance_table import DistanceTable
from .ingest import read_alignment_distances
from .tree_cut import labeled_leaves, tree_clusters
from .utils import (
    find_missing_labels,
    format_cluster_summary,
    load_dendrogram,
    save_clusters_to_file
)

logger = logging.getLogger(__name__)


def build_distance_table(config: ClusterConfig) -> DistanceTable:
    """Ingest an alignment directory, or load a previously saved cache.

    When `config.cache_path` is set and distances were ingested, the table is
    saved there as well.
    """
    source = Path(config.alignments)
    if source.is_dir():
        logger.info(f"Reading alignment distances from {source}")
        table = read_alignment_distances(
            source,
            num_threads=config.num_threads,
            show_progress=config.show_progress
        )
        if config.cache_path:
            table.save(config.cache_path)
        return table

    if config.cache_path:
        logger.warning(f"Input {source} is already a distance cache; "
                       f"not writing a copy to {config.cache_path}")
    logger.info(f"Loading cached alignment distances from {source}")
    return DistanceTable.load(source)


def cluster_tree(config: ClusterConfig, table: DistanceTable) -> ClusterRunResult:
    """Cut the configured dendrogram using an already built table."""
    tree = load_dendrogram(config.tree_path)
    leaves = labeled_leaves(tree)
    logger.info(f"Loaded dendrogram with {len(leaves)} labeled leaves")

    missing = find_missing_labels(tree, table)
    if missing:
        logger.warning(f"{len(missing)} dendrogram leaves have no alignment distances "
                       "and will be kept as singletons")
        logger.debug(f"Leaves without distances: {', '.join(missing)}")

    clusters = tree_clusters(config.threshold, table, tree)
    logger.info(f"Threshold {config.threshold}: {format_cluster_summary(clusters)}")

    return ClusterRunResult(
        clusters=clusters,
        num_labels=len(table.interner),
        table_size=len(table),
        num_leaves=len(leaves),
        missing_labels=missing
    )


def run_clustering(config: ClusterConfig) -> ClusterRunResult:
    """Run a full clustering and write the clusters to `config.output_path`.

    Nothing is written if any step fails.
    """
    config.validate()
    table = build_distance_table(config)
    result = cluster_tree(config, table)
    save_clusters_to_file(result.clusters, config.output_path)
    logger.info(f"Wrote {len(result.clusters)} clusters to {config.output_path}")
    return result
