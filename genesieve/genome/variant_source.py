"""
Variant sources.

A variant source yields freshly decoded VariantRecord objects, one at a time
and in file order, each time ``stream`` is called. Sources never hold decoded
records between calls.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterator, List, Mapping, Optional, Sequence

import pandas as pd

from ..models import VariantEffect, VariantRecord
from ..pipeline_core.error_handling import (
    DataValidationError,
    FileFormatError,
    graceful_error_handling,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("CHROM", "POS", "REF", "ALT")
FIXED_COLUMNS = REQUIRED_COLUMNS + ("GENE", "EFFECT", "QUAL", "AF", "PATHOGENICITY")
MISSING_VALUES = frozenset({"", "."})


def _optional_float(row: Mapping[str, Any], column: str) -> Optional[float]:
    value = row.get(column)
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    text = str(value).strip()
    if text in MISSING_VALUES:
        return None
    try:
        return float(text)
    except ValueError:
        raise DataValidationError(f"Cannot read {column} value '{value}' as a number", column)


def record_from_row(
    row: Mapping[str, Any], sample_names: Sequence[str] = ()
) -> VariantRecord:
    """Decode one variant row.

    Parameters
    ----------
    row : Mapping[str, Any]
        Column name to value, as read from a variant TSV
    sample_names : Sequence[str]
        Columns holding sample genotypes

    Returns
    -------
    VariantRecord
        A new record with an empty filter history

    Raises
    ------
    DataValidationError
        If a required field is missing or a numeric field is not a number
    """
    for column in REQUIRED_COLUMNS:
        if column not in row or str(row[column]).strip() in MISSING_VALUES:
            raise DataValidationError(f"Variant row is missing {column}", column)
    try:
        pos = int(str(row["POS"]).strip())
    except ValueError:
        raise DataValidationError(f"Cannot read POS value '{row['POS']}' as a position", "POS")

    gene = str(row.get("GENE") or ".").strip() or "."
    quality = _optional_float(row, "QUAL")
    return VariantRecord(
        chrom=str(row["CHROM"]).strip(),
        pos=pos,
        ref=str(row["REF"]).strip(),
        alt=str(row["ALT"]).strip(),
        gene_symbol=gene,
        variant_effect=VariantEffect.parse(row.get("EFFECT")),
        quality=quality if quality is not None else 0.0,
        frequency=_optional_float(row, "AF"),
        pathogenicity=_optional_float(row, "PATHOGENICITY"),
        genotypes={sample: str(row.get(sample, "./.")) for sample in sample_names},
    )


class VariantSource(ABC):
    """A finite, restartable sequence of annotated variants."""

    @property
    @abstractmethod
    def sample_names(self) -> List[str]:
        """Names of the genotyped samples."""

    @abstractmethod
    def stream(self) -> Iterator[VariantRecord]:
        """Yield new VariantRecord objects in file order."""


class TsvVariantSource(VariantSource):
    """Variants from a tab separated file.

    The columns CHROM, POS, REF and ALT are required; GENE, EFFECT, QUAL, AF
    and PATHOGENICITY are optional. Every other column is a sample genotype
    column. The file is read in chunks so memory use does not grow with the
    file size.
    """

    def __init__(self, file_path: str, chunk_size: int = 10000):
        self.file_path = str(file_path)
        self.chunk_size = chunk_size
        self._sample_names: Optional[List[str]] = None

    def _read_header(self) -> List[str]:
        with graceful_error_handling("variant_loading", logger):
            try:
                header = pd.read_csv(self.file_path, sep="\t", nrows=0, comment=None)
            except pd.errors.EmptyDataError:
                raise FileFormatError(self.file_path, "non-empty variant TSV")
        columns = [str(c) for c in header.columns]
        missing = [c for c in REQUIRED_COLUMNS if c not in columns]
        if missing:
            raise FileFormatError(
                self.file_path, f"variant TSV with columns {', '.join(REQUIRED_COLUMNS)}"
            )
        return columns

    @property
    def sample_names(self) -> List[str]:
        if self._sample_names is None:
            self._sample_names = [c for c in self._read_header() if c not in FIXED_COLUMNS]
        return list(self._sample_names)

    def stream(self) -> Iterator[VariantRecord]:
        samples = self.sample_names
        # I/O and decoding errors surface here, filter errors raised by the
        # consumer of this generator do not pass through this block
        with graceful_error_handling("variant_loading", logger):
            reader = pd.read_csv(
                self.file_path,
                sep="\t",
                dtype=str,
                keep_default_na=False,
                chunksize=self.chunk_size,
            )
            for chunk in reader:
                for row in chunk.to_dict("records"):
                    yield record_from_row(row, samples)

    def __repr__(self) -> str:
        return f"TsvVariantSource('{self.file_path}')"


class InMemoryVariantSource(VariantSource):
    """Variants decoded from in-memory rows, e.g. for tests and the Python API."""

    def __init__(self, rows: Sequence[Mapping[str, Any]], sample_names: Sequence[str] = ()):
        self.rows = list(rows)
        self._sample_names = list(sample_names)

    @property
    def sample_names(self) -> List[str]:
        return list(self._sample_names)

    def stream(self) -> Iterator[VariantRecord]:
        for row in self.rows:
            yield record_from_row(row, self._sample_names)

    def __repr__(self) -> str:
        return f"InMemoryVariantSource(rows={len(self.rows)})"
