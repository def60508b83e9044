"""
Threshold cutting of a dendrogram into flat clusters.

A subtree becomes a single cluster when every pair of labeled leaves beneath
it is within the distance threshold. Otherwise each child subtree is cut
independently. Pairs with no recorded distance never satisfy the threshold,
so a subtree is only collapsed when the table covers all of its pairs.

Trees are read through two attributes, matching Bio.Phylo clades: `name`
(the label, possibly None or empty) and `clades` (the children).
"""

import logging
from itertools import combinations
from typing import Iterator, List, Sequence

from .distance_table import DistanceTable

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.097702


def iter_preorder(node) -> Iterator:
    """Yield node and all of its descendants in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.clades))


def labeled_leaves(node) -> List[str]:
    """Labels of the labeled leaves under node, in pre-order."""
    return [n.name for n in iter_preorder(node) if not n.clades and n.name]


def within_threshold(labels: Sequence[str], table: DistanceTable, threshold: float) -> bool:
    """Check that every pair of labels has a recorded distance <= threshold."""
    for label_a, label_b in combinations(labels, 2):
        dist = table.distance(label_a, label_b)
        if dist is None or not dist <= threshold:
            return False
    return True


def tree_clusters(threshold: float, table: DistanceTable, tree) -> List[List[str]]:
    """Cut a dendrogram into clusters of mutually close leaves.

    Args:
        threshold: Maximum distance allowed between any two cluster members
        table: Pairwise distances between leaf labels
        tree: Root of the dendrogram

    Returns:
        List of clusters, each a list of leaf labels in pre-order. Every
        labeled leaf appears in exactly one cluster.
    """
    clusters = []
    # Explicit stack instead of recursion; dendrograms can be very deep.
    # Children are pushed in reverse so clusters come out in tree order.
    stack = [tree]
    while stack:
        node = stack.pop()
        if not node.clades:
            if node.name:
                clusters.append([node.name])
            continue

        labels = labeled_leaves(node)
        if not labels:
            continue

        if within_threshold(labels, table, threshold):
            clusters.append(labels)
            continue

        stack.extend(reversed(node.clades))

    logger.debug(f"Cut tree into {len(clusters)} clusters at threshold {threshold}")
    return clusters
