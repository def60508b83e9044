"""
Utility functions for treecut.

This module provides helpers for reading dendrograms and writing clusters.
"""

import csv
import logging
from pathlib import Path
from typing import List, Union

from Bio import Phylo

from .distance_table import DistanceTable
from .tree_cut import labeled_leaves


def load_dendrogram(tree_path: Union[str, Path]):
    """
    Load a dendrogram from a Newick file.

    Args:
        tree_path: Path to a file containing exactly one Newick tree

    Returns:
        Root clade of the tree
    """
    try:
        tree = Phylo.read(str(tree_path), "newick")
    except Exception as e:
        logging.error(f"Error reading Newick tree: {e}")
        raise
    return tree.root


def find_missing_labels(tree, table: DistanceTable) -> List[str]:
    """Return labeled leaves of the tree that never occur in the distance table."""
    return [label for label in labeled_leaves(tree) if label not in table.interner]


def save_clusters_to_file(clusters: List[List[str]], output_path: Union[str, Path]) -> None:
    """
    Save clusters as CSV, one row per cluster.

    Args:
        clusters: List of clusters, each a list of labels
        output_path: Path to the output CSV file
    """
    with open(output_path, 'w', newline='', encoding='utf-8', errors='surrogateescape') as f:
        writer = csv.writer(f, lineterminator='\n')
        writer.writerows(clusters)

    logging.debug(f"Wrote {len(clusters)} clusters to {output_path}")


def format_cluster_summary(clusters: List[List[str]]) -> str:
    """Format a one-line summary of cluster sizes."""
    if not clusters:
        return "0 clusters"
    sizes = [len(cluster) for cluster in clusters]
    singletons = sum(1 for size in sizes if size == 1)
    return (f"{len(clusters)} clusters covering {sum(sizes)} domains "
            f"(largest: {max(sizes)}, singletons: {singletons})")
