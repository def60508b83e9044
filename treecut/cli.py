"""
Command-line interface for treecut.
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import ClusterConfig
from .pipeline import build_distance_table, run_clustering
from .tree_cut import DEFAULT_THRESHOLD


def setup_logging(verbose: bool = False):
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='treecut: cut a dendrogram of structurally aligned domains into '
                    'clusters whose members are all within a distance threshold',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  treecut alignments/ tree.newick clusters.csv
  treecut alignments/ tree.newick clusters.csv --threshold 0.09
  treecut alignments/ --cache-only distances.npz   # Ingest once, then quit
  treecut distances.npz tree.newick clusters.csv    # Reuse cached distances
        """
    )

    parser.add_argument(
        'alignments',
        help='Directory of alignment summary files, or a distance cache (.npz)'
    )
    parser.add_argument(
        'tree',
        nargs='?',
        help='Dendrogram in Newick format'
    )
    parser.add_argument(
        'output',
        nargs='?',
        help='Output CSV file, one cluster per row'
    )

    parser.add_argument(
        '--threshold',
        type=float,
        default=DEFAULT_THRESHOLD,
        help=f'The threshold at which to cut the tree (default: {DEFAULT_THRESHOLD})'
    )
    parser.add_argument(
        '--cache-only',
        metavar='CACHE',
        help='Cache alignment distances to the given file and quit without clustering'
    )
    parser.add_argument(
        '--save-cache',
        metavar='CACHE',
        help='Also cache alignment distances to the given file before clustering'
    )
    parser.add_argument(
        '-t', '--threads',
        type=int,
        help='Number of worker processes for reading alignment files '
             '(default: auto-detect, 0: single-process)'
    )
    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable the progress bar'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    return parser


def main():
    """Main entry point for the treecut CLI."""
    parser = build_parser()
    args = parser.parse_args()

    if args.cache_only:
        if args.tree or args.output:
            parser.error("--cache-only takes only the alignment directory")
    elif not (args.tree and args.output):
        parser.error("the tree and output arguments are required")

    setup_logging(args.verbose)

    try:
        if not Path(args.alignments).exists():
            logging.error(f"Alignment input not found: {args.alignments}")
            sys.exit(1)

        if args.threads is not None and args.threads < 0:
            logging.error(f"Number of threads must be non-negative: {args.threads}")
            sys.exit(1)

        if args.cache_only:
            if not Path(args.alignments).is_dir():
                logging.error(f"--cache-only needs an alignment directory, got: {args.alignments}")
                sys.exit(1)
            config = ClusterConfig(
                alignments=args.alignments,
                num_threads=args.threads,
                cache_path=args.cache_only,
                show_progress=not args.no_progress
            )
            config.validate(require_tree=False)
            build_distance_table(config)
            logging.debug("Done!")
            return

        config = ClusterConfig(
            alignments=args.alignments,
            tree_path=args.tree,
            output_path=args.output,
            threshold=args.threshold,
            num_threads=args.threads,
            cache_path=args.save_cache,
            show_progress=not args.no_progress
        )
        run_clustering(config)
        logging.debug("Done!")

    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        sys.exit(1)
    except Exception as e:
        logging.error(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
