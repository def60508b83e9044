"""
Parallel ingestion of alignment summary files into a DistanceTable.

Files are parsed by a pool of worker processes. Each worker reads one file
completely and sends back its batch of pair distances. The calling thread is
the only writer of the table: it consumes finished batches one at a time, so
the table needs no locking.
"""

import logging
import os
from concurrent.futures import FIRST_COMPLETED, Future, ProcessPoolExecutor, wait
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from tqdm import tqdm

from .distance_table import DistanceTable
from .errors import IngestionError, RecordFormatError
from .records import PairDistance, read_alignment_file

logger = logging.getLogger(__name__)


def find_alignment_files(root: Union[str, Path]) -> List[Path]:
    """Recursively list the alignment files under root.

    Files whose name starts with '.' are skipped.

    Raises:
        IngestionError: If root is not a directory
    """
    root = Path(root)
    if not root.is_dir():
        raise IngestionError(str(root), "not a directory")

    return sorted(
        path for path in root.rglob('*')
        if path.is_file() and not path.name.startswith('.')
    )


def _read_alignment_worker(path: str) -> List[PairDistance]:
    """Worker entry point: parse a single alignment file."""
    return read_alignment_file(path)


def _read_batch(path: Path) -> List[PairDistance]:
    try:
        return read_alignment_file(path)
    except (OSError, ValueError, RecordFormatError) as e:
        raise IngestionError(str(path), str(e)) from e


def aggregate_batch(table: DistanceTable, batch: Iterable[PairDistance]) -> int:
    """Add one file's batch of distances to the table.

    Returns:
        Number of distances added
    """
    count = 0
    for pair in batch:
        table.add(pair.label_a, pair.label_b, pair.distance)
        count += 1
    return count


def read_alignment_distances(root: Union[str, Path],
                             num_threads: Optional[int] = None,
                             show_progress: bool = True,
                             max_pending: Optional[int] = None) -> DistanceTable:
    """Build a DistanceTable from every alignment file under root.

    Args:
        root: Directory of tab-separated alignment summary files
        num_threads: Number of worker processes (default: CPU count,
            0: parse in the calling process)
        show_progress: Show a progress bar over files
        max_pending: Maximum number of files in flight at once
            (default: twice the number of workers)

    Returns:
        Populated DistanceTable

    Raises:
        IngestionError: If any file cannot be read or parsed. No partial
            table is returned.
    """
    if num_threads is None:
        num_threads = os.cpu_count() or 1
    if num_threads < 0:
        raise ValueError(f"num_threads must be non-negative, got {num_threads}")

    files = find_alignment_files(root)
    logger.info(f"Found {len(files)} alignment files under {root}")

    table = DistanceTable()
    progress = tqdm(total=len(files), desc="Reading alignment files", unit="file",
                    disable=not show_progress)
    try:
        if num_threads == 0 or len(files) <= 1:
            for path in files:
                logger.debug(f"Reading {path}")
                aggregate_batch(table, _read_batch(path))
                progress.update(1)
        else:
            _read_parallel(files, table, num_threads, max_pending, progress)
    finally:
        progress.close()

    logger.info(f"Read {len(table)} distances between {len(table.interner)} domains "
                f"from {len(files)} files")
    if table.overwrites:
        logger.warning(f"{table.overwrites} alignment pairs occurred more than once; "
                       "the value kept for each depends on file processing order")
    return table


def _read_parallel(files: List[Path], table: DistanceTable, num_threads: int,
                   max_pending: Optional[int], progress: tqdm) -> None:
    """Fan files out to worker processes and aggregate their batches."""
    num_workers = min(num_threads, len(files))
    if max_pending is None:
        max_pending = 2 * num_workers
    max_pending = max(1, max_pending)
    logger.debug(f"Using {num_workers} workers with at most {max_pending} files in flight")

    pending: Dict[Future, Path] = {}

    def drain(done) -> None:
        for future in done:
            path = pending.pop(future)
            try:
                batch = future.result()
            except (OSError, ValueError, RecordFormatError) as e:
                for other in pending:
                    other.cancel()
                raise IngestionError(str(path), str(e)) from e
            aggregate_batch(table, batch)
            progress.update(1)

    with ProcessPoolExecutor(max_workers=num_workers) as executor:
        for path in files:
            # Backpressure: block until a batch is consumed
            while len(pending) >= max_pending:
                done, _ = wait(pending, return_when=FIRST_COMPLETED)
                drain(done)
            logger.debug(f"Reading {path}")
            pending[executor.submit(_read_alignment_worker, str(path))] = path

        while pending:
            done, _ = wait(pending, return_when=FIRST_COMPLETED)
            drain(done)
