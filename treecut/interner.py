"""Interning of domain labels into dense integer ids."""

import logging
from typing import Dict, Iterable, List, Optional

from .errors import InternerCapacityError

logger = logging.getLogger(__name__)

# Ids are unsigned 32-bit values.
MAX_INTERNED_IDS = 2 ** 32


class SymbolInterner:
    """Append-only mapping from labels to dense ids.

    The first time a label is seen it receives the next sequential id,
    starting at 0. Ids are never reassigned or removed.
    """

    def __init__(self, labels: Optional[Iterable[str]] = None,
                 max_ids: int = MAX_INTERNED_IDS):
        """Initialize the interner.

        Args:
            labels: Optional labels to intern up front, in order
            max_ids: Size of the id space; interning more distinct labels
                than this raises InternerCapacityError
        """
        if max_ids < 1:
            raise ValueError(f"max_ids must be positive, got {max_ids}")
        self.max_ids = max_ids
        self._ids: Dict[str, int] = {}
        self._labels: List[str] = []

        if labels is not None:
            for label in labels:
                self.intern(label)

    def intern(self, label: str) -> int:
        """Return the id for label, allocating one if it is new."""
        atom = self._ids.get(label)
        if atom is not None:
            return atom

        atom = len(self._labels)
        if atom >= self.max_ids:
            raise InternerCapacityError(
                f"Cannot intern '{label}': all {self.max_ids} ids are in use. "
                "The id type is too small for this corpus."
            )
        self._ids[label] = atom
        self._labels.append(label)
        return atom

    def lookup(self, label: str) -> Optional[int]:
        """Return the id for label without allocating, or None if unknown."""
        return self._ids.get(label)

    def label(self, atom: int) -> str:
        """Return the label that was assigned the given id."""
        if atom < 0 or atom >= len(self._labels):
            raise KeyError(f"No label has been interned with id {atom}")
        return self._labels[atom]

    def labels(self) -> List[str]:
        """All interned labels, indexed by id."""
        return list(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def __contains__(self, label: object) -> bool:
        return label in self._ids

    def __repr__(self) -> str:
        return f"SymbolInterner({len(self._labels)} labels)"
