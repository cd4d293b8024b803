"""
PED file reader for pedigree information.

This module parses standard 6-column PED files into the dictionary format
used by the inheritance analyser and the setup stage.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from .pipeline_core.error_handling import FileFormatError

logger = logging.getLogger(__name__)

PED_COLUMNS = ["family_id", "sample_id", "father_id", "mother_id", "sex", "affected_status"]


def _value(raw, default: str) -> str:
    if pd.isna(raw) or raw in ("", "."):
        return default
    return str(raw)


def read_pedigree(file_path: str) -> Dict[str, Dict[str, Any]]:
    """
    Parse a PED file into a dictionary keyed by sample ID.

    Args:
        file_path: Path to the PED file

    Returns:
        Dictionary mapping sample IDs to their pedigree information

    Raises:
        FileFormatError: If the file is empty or does not have 6 columns
    """
    try:
        ped_df = pd.read_csv(file_path, sep=r"\s+", header=None, dtype=str, comment="#")
    except pd.errors.EmptyDataError:
        raise FileFormatError(file_path, "non-empty PED file")

    if ped_df.empty:
        raise FileFormatError(file_path, "non-empty PED file")
    if ped_df.shape[1] != len(PED_COLUMNS):
        raise FileFormatError(
            file_path, f"PED file with 6 columns (found {ped_df.shape[1]})"
        )
    ped_df.columns = PED_COLUMNS

    pedigree_data = {}
    for row in ped_df.to_dict("records"):
        sample_id = _value(row["sample_id"], "")
        if not sample_id:
            logger.warning("Skipping PED row with empty sample ID")
            continue
        pedigree_data[sample_id] = {
            "family_id": _value(row["family_id"], ""),
            "sample_id": sample_id,
            "father_id": _value(row["father_id"], "0"),
            "mother_id": _value(row["mother_id"], "0"),
            "sex": _value(row["sex"], "0"),
            "affected_status": _value(row["affected_status"], "0"),
        }

    logger.info(f"Successfully parsed PED file with {len(pedigree_data)} individuals")
    return pedigree_data


def restrict_to_samples(
    pedigree_data: Dict[str, Dict[str, Any]], sample_names: Iterable[str]
) -> Dict[str, Dict[str, Any]]:
    """Drop pedigree members without genotypes in the variant source, with a warning."""
    samples = set(sample_names)
    missing = sorted(sid for sid in pedigree_data if sid not in samples)
    if missing:
        logger.warning(
            f"Ignoring {len(missing)} pedigree members not present in the variant source: "
            f"{', '.join(missing)}"
        )
    return {sid: info for sid, info in pedigree_data.items() if sid in samples}


def get_parents(
    sample_id: str, pedigree_data: Dict[str, Dict[str, Any]]
) -> Tuple[Optional[str], Optional[str]]:
    """
    Get the parent IDs for a given sample.

    Args:
        sample_id: The sample ID to get parents for
        pedigree_data: The pedigree data dictionary

    Returns:
        Tuple of (father_id, mother_id), None where a parent is not in the pedigree
    """
    info = pedigree_data.get(sample_id)
    if info is None:
        return (None, None)
    father_id = info.get("father_id", "0")
    mother_id = info.get("mother_id", "0")
    return (
        father_id if father_id in pedigree_data else None,
        mother_id if mother_id in pedigree_data else None,
    )


def is_affected(sample_id: str, pedigree_data: Dict[str, Dict[str, Any]]) -> bool:
    """True if affected (status = 2)."""
    return pedigree_data.get(sample_id, {}).get("affected_status") == "2"


def is_unaffected(sample_id: str, pedigree_data: Dict[str, Dict[str, Any]]) -> bool:
    """True if explicitly unaffected (status = 1)."""
    return pedigree_data.get(sample_id, {}).get("affected_status") == "1"


def is_male(sample_id: str, pedigree_data: Dict[str, Dict[str, Any]]) -> bool:
    return pedigree_data.get(sample_id, {}).get("sex") == "1"


def affected_samples(pedigree_data: Dict[str, Dict[str, Any]]) -> List[str]:
    return [sid for sid in pedigree_data if is_affected(sid, pedigree_data)]


def unaffected_samples(pedigree_data: Dict[str, Dict[str, Any]]) -> List[str]:
    return [sid for sid in pedigree_data if is_unaffected(sid, pedigree_data)]
