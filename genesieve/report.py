"""
Result writers.

Genes and variants of a RunResult are written as tab separated tables with
pandas; an HTML summary is rendered from ``templates/report.html`` with
jinja2.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
from jinja2 import Environment, FileSystemLoader

from .models import RunResult
from .version import __version__

logger = logging.getLogger(__name__)

GENE_COLUMNS = [
    "RANK",
    "GENE",
    "GENE_ID",
    "COMBINED_SCORE",
    "PRIORITY_SCORE",
    "VARIANT_SCORE",
    "FILTER_STATUS",
    "COMPATIBLE_MODES",
    "N_VARIANTS",
    "PASSED_VARIANTS",
]

VARIANT_COLUMNS = [
    "CHROM",
    "POS",
    "REF",
    "ALT",
    "GENE",
    "EFFECT",
    "QUAL",
    "AF",
    "PATHOGENICITY",
    "FILTER_STATUS",
    "PASSED_FILTERS",
    "FAILED_FILTERS",
]


def genes_to_dataframe(result: RunResult) -> pd.DataFrame:
    """One row per ranked gene."""
    rows: List[Dict[str, Any]] = []
    for rank, gene in enumerate(result.genes, start=1):
        row = {
            "RANK": rank,
            "GENE": gene.symbol,
            "GENE_ID": gene.gene_id,
            "COMBINED_SCORE": round(gene.combined_score, 4),
            "PRIORITY_SCORE": round(gene.priority_score, 4),
            "VARIANT_SCORE": round(gene.variant_score, 4),
            "FILTER_STATUS": gene.filter_status.value,
            "COMPATIBLE_MODES": ",".join(sorted(m.value for m in gene.compatible_modes)),
            "N_VARIANTS": len(gene.variants),
            "PASSED_VARIANTS": len(gene.passed_variants),
        }
        for priority_type, score in sorted(gene.priority_scores.items()):
            row[f"{priority_type}_SCORE"] = round(score, 4)
        rows.append(row)
    df = pd.DataFrame(rows)
    if df.empty:
        return pd.DataFrame(columns=GENE_COLUMNS)
    return df


def variants_to_dataframe(result: RunResult) -> pd.DataFrame:
    """One row per final variant, in file order."""
    rows = []
    for variant in result.variants:
        rows.append(
            {
                "CHROM": variant.chrom,
                "POS": variant.pos,
                "REF": variant.ref,
                "ALT": variant.alt,
                "GENE": variant.gene_symbol,
                "EFFECT": variant.variant_effect.value,
                "QUAL": variant.quality,
                "AF": variant.frequency,
                "PATHOGENICITY": variant.pathogenicity,
                "FILTER_STATUS": variant.filter_status.value,
                "PASSED_FILTERS": ",".join(
                    r.filter_type for r in variant.filter_results if r.passed()
                ),
                "FAILED_FILTERS": ",".join(variant.failed_filter_types),
            }
        )
    return pd.DataFrame(rows, columns=VARIANT_COLUMNS)


def write_tsv(result: RunResult, output_file: str) -> Path:
    """Write the gene table to ``output_file`` and the variant table next to it.

    The variant table gets the same name with a ``.variants.tsv`` suffix.

    Returns
    -------
    Path
        Path of the variant table
    """
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    genes_to_dataframe(result).to_csv(output_path, sep="\t", index=False)

    stem = output_path.name[: -len(".tsv")] if output_path.name.endswith(".tsv") else output_path.name
    variants_path = output_path.with_name(f"{stem}.variants.tsv")
    variants_to_dataframe(result).to_csv(variants_path, sep="\t", index=False, na_rep=".")
    logger.info(f"Wrote {len(result.genes)} genes to {output_path}")
    logger.info(f"Wrote {len(result.variants)} variants to {variants_path}")
    return variants_path


def write_html_report(result: RunResult, output_file: str, top_n: int = 50) -> None:
    """Render the HTML summary of a run."""
    templates_dir = Path(__file__).parent / "templates"
    if not templates_dir.exists():
        raise FileNotFoundError(f"Templates directory not found at: {templates_dir}")

    env = Environment(loader=FileSystemLoader(str(templates_dir)), autoescape=True)
    template = env.get_template("report.html")

    genes_df = genes_to_dataframe(result).head(top_n)
    summary = {
        "version": __version__,
        "generated": datetime.now().isoformat(timespec="seconds"),
        "analysis_mode": result.analysis_mode,
        "mode_of_inheritance": result.mode_of_inheritance.name,
        "proband": result.proband or "-",
        "samples": ", ".join(result.sample_names) or "-",
        "num_genes": len(result.genes),
        "num_variants": len(result.variants),
    }
    html_content = template.render(
        summary=summary,
        columns=list(genes_df.columns),
        genes=genes_df.to_dict("records"),
    )

    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as out_f:
        out_f.write(html_content)
    logger.info(f"HTML report generated at {output_path}")
