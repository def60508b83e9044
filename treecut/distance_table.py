"""
Sparse symmetric distance table keyed by interned labels.

Only the upper triangle is stored: the distance between ids i and j lives in
row min(i, j) at column max(i, j). Each row is an independent numpy array that
is grown lazily (by doubling) to cover the highest column written into it.
Unset cells hold NaN so that a missing alignment is distinguishable from a
distance of zero.
"""

import logging
import zipfile
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

from .errors import DistanceCacheError
from .interner import SymbolInterner

logger = logging.getLogger(__name__)

INITIAL_ROW_CAPACITY = 16
CACHE_FORMAT_VERSION = 1


class DistanceTable:
    """Resizable, approximately triangular matrix of pairwise distances."""

    def __init__(self, interner: Optional[SymbolInterner] = None):
        """Initialize an empty table.

        Args:
            interner: Interner mapping labels to row/column ids. A new one is
                created when not given.
        """
        self.interner = interner if interner is not None else SymbolInterner()
        self._rows: List[Optional[np.ndarray]] = []
        self._size = 0
        self.overwrites = 0

    def _row_for_write(self, row_idx: int, col_idx: int) -> np.ndarray:
        """Return row `row_idx`, growing it so that `col_idx` is addressable."""
        if row_idx >= len(self._rows):
            self._rows.extend([None] * (row_idx + 1 - len(self._rows)))

        row = self._rows[row_idx]
        if row is None:
            capacity = INITIAL_ROW_CAPACITY
            while capacity <= col_idx:
                capacity *= 2
            row = np.full(capacity, np.nan, dtype=np.float64)
            self._rows[row_idx] = row
        elif col_idx >= len(row):
            capacity = len(row) * 2
            while capacity <= col_idx:
                capacity *= 2
            grown = np.full(capacity, np.nan, dtype=np.float64)
            grown[:len(row)] = row
            row = grown
            self._rows[row_idx] = row
        return row

    def set(self, id_a: int, id_b: int, distance: float) -> None:
        """Store the distance between two interned ids.

        An existing value for the pair is silently overwritten. A NaN distance
        reads back as absent.
        """
        n = len(self.interner)
        if id_a < 0 or id_b < 0 or id_a >= n or id_b >= n:
            raise IndexError(f"Ids ({id_a}, {id_b}) are not interned ({n} ids allocated)")

        row_idx, col_idx = (id_a, id_b) if id_a <= id_b else (id_b, id_a)
        row = self._row_for_write(row_idx, col_idx)

        was_present = not np.isnan(row[col_idx])
        if was_present:
            self.overwrites += 1
            logger.debug(f"Overwriting distance for ids ({row_idx}, {col_idx})")
        row[col_idx] = distance
        self._size += int(not np.isnan(distance)) - int(was_present)

    def get(self, id_a: Optional[int], id_b: Optional[int]) -> Optional[float]:
        """Return the stored distance between two ids, or None if absent.

        Never raises for unknown or out-of-range ids.
        """
        if id_a is None or id_b is None or id_a < 0 or id_b < 0:
            return None

        row_idx, col_idx = (id_a, id_b) if id_a <= id_b else (id_b, id_a)
        if row_idx >= len(self._rows):
            return None
        row = self._rows[row_idx]
        if row is None or col_idx >= len(row):
            return None

        value = row[col_idx]
        if np.isnan(value):
            return None
        return float(value)

    def distance(self, label_a: str, label_b: str) -> Optional[float]:
        """Return the distance between two labels, or None if absent.

        Identical labels are always at distance 0.0, whether or not they
        appear in the table.
        """
        if label_a == label_b:
            return 0.0
        return self.get(self.interner.lookup(label_a), self.interner.lookup(label_b))

    def add(self, label_a: str, label_b: str, distance: float) -> None:
        """Intern both labels and store their distance."""
        self.set(self.interner.intern(label_a), self.interner.intern(label_b), distance)

    def cells(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return (rows, cols, values) arrays for every stored cell."""
        rows, cols, values = [], [], []
        for row_idx, row in enumerate(self._rows):
            if row is None:
                continue
            present = np.flatnonzero(~np.isnan(row))
            if len(present) == 0:
                continue
            rows.append(np.full(len(present), row_idx, dtype=np.uint32))
            cols.append(present.astype(np.uint32))
            values.append(row[present])

        if not rows:
            return (np.empty(0, dtype=np.uint32), np.empty(0, dtype=np.uint32),
                    np.empty(0, dtype=np.float64))
        return np.concatenate(rows), np.concatenate(cols), np.concatenate(values)

    def save(self, path: Union[str, Path]) -> None:
        """Write the interner and all stored cells to a compressed .npz cache."""
        rows, cols, values = self.cells()
        labels = np.array(self.interner.labels(), dtype=str)

        with open(path, 'wb') as f:
            np.savez_compressed(
                f,
                version=np.array(CACHE_FORMAT_VERSION),
                labels=labels,
                rows=rows,
                cols=cols,
                values=values,
            )
        logger.info(f"Saved {len(values)} distances over {len(labels)} labels to {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'DistanceTable':
        """Read a table previously written by `save`.

        Raises:
            DistanceCacheError: If the file is missing, unreadable or malformed
        """
        try:
            data = np.load(path, allow_pickle=False)
            # A plain .npy file loads as a bare array
            if not isinstance(data, np.lib.npyio.NpzFile):
                raise DistanceCacheError(f"'{path}' is not a distance cache archive")
            try:
                version = int(data['version'])
                if version != CACHE_FORMAT_VERSION:
                    raise DistanceCacheError(
                        f"Distance cache '{path}' has format version {version}, "
                        f"expected {CACHE_FORMAT_VERSION}"
                    )
                labels = [str(label) for label in data['labels']]
                rows = data['rows']
                cols = data['cols']
                values = data['values']
            finally:
                data.close()
        except DistanceCacheError:
            raise
        except (OSError, EOFError, ValueError, KeyError, zipfile.BadZipFile) as e:
            raise DistanceCacheError(f"Could not read distance cache '{path}': {e}") from e

        if not (len(rows) == len(cols) == len(values)):
            raise DistanceCacheError(
                f"Distance cache '{path}' is malformed: {len(rows)} rows, "
                f"{len(cols)} cols, {len(values)} values"
            )

        table = cls(SymbolInterner(labels))
        try:
            for row_idx, col_idx, value in zip(rows.tolist(), cols.tolist(), values.tolist()):
                table.set(row_idx, col_idx, value)
        except IndexError as e:
            raise DistanceCacheError(f"Distance cache '{path}' is malformed: {e}") from e

        logger.info(f"Loaded {len(table)} distances over {len(labels)} labels from {path}")
        return table

    def __len__(self) -> int:
        """Number of stored (non-absent) cells."""
        return self._size

    def __repr__(self) -> str:
        return f"DistanceTable({len(self.interner)} labels, {self._size} distances)"
