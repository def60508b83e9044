"""Parsing of structural alignment summary records into pairwise distances."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple, Union

import numpy as np

from .errors import RecordFormatError

logger = logging.getLogger(__name__)

RECORD_FIELDS = 9
PAIR_SEPARATOR = ".ent_"
PAIR_SUFFIX_LENGTH = 5

# Columns of an alignment summary record
FIELD_PAIR = 0
FIELD_CORE_LENGTH = 1
FIELD_RMSD = 2
FIELD_LENGTH_1 = 7
FIELD_LENGTH_2 = 8


@dataclass
class PairDistance:
    """Distance between two domains, with labels in canonical order."""
    label_a: str
    label_b: str
    distance: float


def parse_pair_labels(pair_field: str) -> Tuple[str, str]:
    """Extract the two domain labels from a '<label1>.ent_<label2>XXXXX' field.

    Raises:
        RecordFormatError: If the field does not name exactly two domains
    """
    pieces = pair_field.split(PAIR_SEPARATOR, 1)
    if len(pieces) != 2:
        raise RecordFormatError(f"Invalid alignment pair: '{pair_field}'.")

    label1, label2 = pieces
    if len(label2) < PAIR_SUFFIX_LENGTH:
        raise RecordFormatError(
            f"Invalid alignment pair: '{pair_field}' (second label shorter than "
            f"its {PAIR_SUFFIX_LENGTH}-character suffix)."
        )
    return label1, label2[:len(label2) - PAIR_SUFFIX_LENGTH]


def _read_float(value: str) -> float:
    # float() also accepts digit separators and surrounding whitespace
    if "_" in value or value != value.strip():
        raise RecordFormatError(f"Expected float, but got '{value}'.")
    try:
        return float(value)
    except ValueError:
        raise RecordFormatError(f"Expected float, but got '{value}'.")


def alignment_distance(core_length: float, rmsd: float, length1: float, length2: float) -> float:
    """Convert alignment summary statistics into a distance.

    Division by zero follows IEEE semantics (inf/nan) instead of raising.
    """
    corelen = np.float64(core_length)
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        coreval = (2.0 * corelen) / (np.float64(length1) + np.float64(length2))
        raw = -6.04979701 * (np.float64(rmsd) - coreval * corelen * 0.155 + 1.6018) + 1000
        dist = np.float64(1.0) / raw
        dist *= 100.0
    return float(dist)


def record_to_distance(record: Sequence[str]) -> PairDistance:
    """Convert one 9-field alignment summary record into a PairDistance.

    Raises:
        RecordFormatError: If the record is malformed
    """
    if len(record) != RECORD_FIELDS:
        raise RecordFormatError(
            f"Expected {RECORD_FIELDS} fields in alignment record, but got {len(record)}."
        )

    label1, label2 = parse_pair_labels(record[FIELD_PAIR])
    dist = alignment_distance(
        _read_float(record[FIELD_CORE_LENGTH]),
        _read_float(record[FIELD_RMSD]),
        _read_float(record[FIELD_LENGTH_1]),
        _read_float(record[FIELD_LENGTH_2]),
    )

    if label1 < label2:
        return PairDistance(label1, label2, dist)
    return PairDistance(label2, label1, dist)


def read_alignment_file(path: Union[str, Path]) -> List[PairDistance]:
    """Read every well-formed record of a tab-separated alignment summary file.

    Rows without exactly 9 fields are skipped; the files are not uniformly
    formatted. Bytes that are not valid UTF-8 are kept as surrogate
    escapes, so they only fail a record when they land in a numeric field.

    Raises:
        OSError: If the file cannot be read
        RecordFormatError: If a 9-field row cannot be parsed (annotated with
            the file and line number)
    """
    # Raw bytes outside the parsed columns must not abort ingestion
    with open(path, 'r', encoding='utf-8', errors='surrogateescape') as f:
        lines = f.read().split('\n')

    distances = []
    skipped = 0
    for line_number, line in enumerate(lines, 1):
        line = line.rstrip('\r')
        if not line:
            continue

        parts = [part.lstrip() for part in line.split('\t')]
        if len(parts) != RECORD_FIELDS:
            skipped += 1
            continue

        try:
            distances.append(record_to_distance(parts))
        except RecordFormatError as e:
            raise e.with_location(str(path), line_number) from e

    logger.debug(f"Parsed {len(distances)} records from {path} ({skipped} rows skipped)")
    return distances
