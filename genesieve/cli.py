"""Command-line interface for genesieve."""

import argparse
import datetime
import logging
import sys
from typing import Any, Dict, List, Optional

from .analysis.parser import load_analysis
from .analysis.runner import AnalysisRunner
from .config import load_config
from .genome.reference import load_reference_data
from .genome.variant_source import TsvVariantSource
from .ped_reader import read_pedigree
from .pipeline_core.error_handling import PipelineError, validate_file_exists
from .report import write_html_report, write_tsv
from .version import __version__

logger = logging.getLogger("genesieve")

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def create_parser() -> argparse.ArgumentParser:
    """Create and return the argument parser for the genesieve CLI."""
    parser = argparse.ArgumentParser(
        description="genesieve: Filter annotated variants and rank candidate genes."
    )

    general_group = parser.add_argument_group("General Options")
    general_group.add_argument(
        "--version",
        action="version",
        version=f"genesieve {__version__}",
        help="Show the current version and exit",
    )
    general_group.add_argument(
        "--log-level",
        choices=list(LOG_LEVELS),
        default="INFO",
        help="Set the logging level",
    )
    general_group.add_argument(
        "-c", "--config", help="Path to a JSON configuration file with run defaults"
    )
    general_group.add_argument(
        "--threads", type=int, help="Worker threads used to build the reference gene index"
    )

    input_group = parser.add_argument_group("Input")
    input_group.add_argument(
        "-a", "--analysis", required=True, help="Analysis declaration (JSON) listing the steps"
    )
    input_group.add_argument(
        "-v", "--variants", required=True, help="Annotated variants (TSV with sample columns)"
    )
    input_group.add_argument(
        "-g", "--genes", required=True, help="Reference genes (TSV with a GENE column)"
    )
    input_group.add_argument("--ped", help="Pedigree in PED format")
    input_group.add_argument("--proband", help="Proband sample, overrides the analysis file")
    input_group.add_argument("--regulatory", help="Regulatory regions (CHROM START END TSV)")
    input_group.add_argument("--tads", help="Topologically associated domains TSV")

    output_group = parser.add_argument_group("Output")
    output_group.add_argument(
        "-o", "--output", default="genesieve_results.tsv", help="Gene result TSV"
    )
    output_group.add_argument("--html-report", help="Write an HTML summary to this path")
    return parser


def parse_args(args_list: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Parameters
    ----------
    args_list : list of str, optional
        Arguments to parse, ``sys.argv[1:]`` when omitted

    Returns
    -------
    argparse.Namespace
        Parsed arguments
    """
    return create_parser().parse_args(args_list)


def run(args: argparse.Namespace) -> None:
    """Run one analysis as described by parsed command line arguments."""
    cfg: Dict[str, Any] = load_config(args.config)
    if args.threads is not None:
        cfg["threads"] = args.threads
    logger.debug(f"Configuration loaded: {cfg}")

    for path in (args.analysis, args.variants, args.genes, args.ped, args.regulatory, args.tads):
        if path:
            validate_file_exists(path, stage="setup")

    config = load_analysis(args.analysis, cfg)
    if args.ped:
        config = config.copy_with(pedigree=read_pedigree(args.ped))
    if args.proband:
        config = config.copy_with(proband=args.proband)

    reference = load_reference_data(args.genes, args.regulatory, args.tads)
    variant_source = TsvVariantSource(args.variants, chunk_size=cfg.get("variant_chunk_size", 10000))

    result = AnalysisRunner().run(config, reference, variant_source)

    write_tsv(result, args.output)
    if args.html_report:
        write_html_report(result, args.html_report)


def main(argv: Optional[List[str]] = None) -> int:
    """Run main entry point for the genesieve CLI.

    Steps:
        1. Parse arguments and configure logging.
        2. Load the run defaults and the analysis declaration.
        3. Load reference data and open the variant source.
        4. Run the analysis and write the results.

    Returns 0 on success and 1 when the analysis could not be completed.
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    logger.setLevel(LOG_LEVELS[args.log_level])

    start_time = datetime.datetime.now()
    logger.info(f"Run started at {start_time.isoformat()}")
    logger.debug(f"CLI arguments: {args}")

    try:
        run(args)
    except PipelineError as e:
        logger.error(f"Analysis failed: {e}")
        return 1
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    elapsed = datetime.datetime.now() - start_time
    logger.info(f"Run finished in {elapsed.total_seconds():.1f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
