"""
Chromosomal region indexes.

Used during variant streaming to look up regulatory regions and topologically
associated domains (TADs). An index sorts itself on its first lookup, so it
must not be shared between threads while a run is streaming.
"""

import bisect
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Generic, List, TypeVar

import pandas as pd

from ..models import normalise_chrom
from ..pipeline_core.error_handling import FileFormatError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Region(Generic[T]):
    """A closed interval on a chromosome with an attached payload."""

    chrom: str
    start: int
    end: int
    payload: T

    def contains(self, chrom: str, pos: int) -> bool:
        return self.chrom == normalise_chrom(chrom) and self.start <= pos <= self.end


class RegionIndex(Generic[T]):
    """Index answering which regions contain a position."""

    def __init__(self, regions=None):
        self._regions: Dict[str, List[Region[T]]] = {}
        self._starts: Dict[str, List[int]] = {}
        self._max_ends: Dict[str, List[int]] = {}
        self._dirty = False
        for region in regions or []:
            self.add(region)

    def add(self, region: Region[T]) -> None:
        chrom = normalise_chrom(region.chrom)
        if chrom != region.chrom:
            region = Region(chrom, region.start, region.end, region.payload)
        self._regions.setdefault(chrom, []).append(region)
        self._dirty = True

    def _ensure_sorted(self) -> None:
        if not self._dirty:
            return
        for chrom, regions in self._regions.items():
            regions.sort(key=lambda r: (r.start, r.end))
            self._starts[chrom] = [r.start for r in regions]
            max_ends, running = [], float("-inf")
            for region in regions:
                running = max(running, region.end)
                max_ends.append(running)
            self._max_ends[chrom] = max_ends
        self._dirty = False

    def regions_containing(self, chrom: str, pos: int) -> List[Region[T]]:
        """Return all regions containing ``pos``, ordered by start."""
        self._ensure_sorted()
        chrom = normalise_chrom(chrom)
        regions = self._regions.get(chrom)
        if not regions:
            return []
        i = bisect.bisect_right(self._starts[chrom], pos) - 1
        max_ends = self._max_ends[chrom]
        found = []
        while i >= 0 and max_ends[i] >= pos:
            if regions[i].end >= pos:
                found.append(regions[i])
            i -= 1
        found.reverse()
        return found

    def has_region_containing(self, chrom: str, pos: int) -> bool:
        return bool(self.regions_containing(chrom, pos))

    def __len__(self) -> int:
        return sum(len(regions) for regions in self._regions.values())


def _read_region_table(file_path: str, required: FrozenSet[str]) -> pd.DataFrame:
    df = pd.read_csv(file_path, sep="\t", dtype=str, comment="#", keep_default_na=False)
    missing = required - set(df.columns)
    if missing:
        raise FileFormatError(file_path, f"TSV with columns {sorted(required)} (missing {missing})")
    return df


def load_regulatory_regions(file_path: str) -> RegionIndex[str]:
    """Load regulatory features from a ``CHROM START END [FEATURE]`` TSV."""
    df = _read_region_table(file_path, frozenset({"CHROM", "START", "END"}))
    features = df["FEATURE"] if "FEATURE" in df.columns else ["regulatory_region"] * len(df)
    index: RegionIndex[str] = RegionIndex()
    for chrom, start, end, feature in zip(df["CHROM"], df["START"], df["END"], features):
        index.add(Region(chrom, int(start), int(end), feature or "regulatory_region"))
    logger.info(f"Loaded {len(index)} regulatory regions from {file_path}")
    return index


def load_topological_domains(file_path: str) -> RegionIndex[FrozenSet[str]]:
    """Load TADs from a ``CHROM START END GENES`` TSV, GENES being comma separated symbols."""
    df = _read_region_table(file_path, frozenset({"CHROM", "START", "END", "GENES"}))
    index: RegionIndex[FrozenSet[str]] = RegionIndex()
    for chrom, start, end, genes in zip(df["CHROM"], df["START"], df["END"], df["GENES"]):
        symbols = frozenset(g.strip() for g in genes.split(",") if g.strip())
        index.add(Region(chrom, int(start), int(end), symbols))
    logger.info(f"Loaded {len(index)} topologically associated domains from {file_path}")
    return index
