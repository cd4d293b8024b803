"""
Tests for CLI module.

This file contains tests ensuring the CLI parses its arguments and runs an
analysis from files end to end.
"""

import json

import pandas as pd
import pytest

from genesieve.cli import create_parser, main, parse_args
from genesieve.version import __version__


@pytest.fixture
def inputs(tmp_path):
    """Analysis, variant and gene files for a two gene family run."""
    analysis = tmp_path / "analysis.json"
    analysis.write_text(
        json.dumps(
            {
                "analysisMode": "PASS_ONLY",
                "inheritanceMode": "AUTOSOMAL_DOMINANT",
                "steps": [
                    {"inheritanceFilter": {}},
                    {"qualityFilter": {"minQuality": 30}},
                    {"scorePrioritiser": {"priorityType": "PHENO", "scoresFile": "pheno.tsv"}},
                ],
            }
        )
    )
    (tmp_path / "pheno.tsv").write_text("GENE\tSCORE\nGENE_A\t0.8\nGENE_B\t0.6\n")
    variants = tmp_path / "variants.tsv"
    variants.write_text(
        "CHROM\tPOS\tREF\tALT\tGENE\tEFFECT\tQUAL\tchild\tfather\tmother\n"
        "1\t100\tA\tG\tGENE_A\tmissense_variant\t50\t0/1\t0/0\t0/0\n"
        "1\t200\tC\tT\tGENE_A\tmissense_variant\t10\t0/1\t0/0\t0/0\n"
        "2\t300\tG\tA\tGENE_B\tstop_gained\t60\t0/1\t0/1\t0/0\n"
    )
    genes = tmp_path / "genes.tsv"
    genes.write_text("GENE\tGENE_ID\nGENE_A\t1\nGENE_B\t2\nGENE_C\t3\n")
    ped = tmp_path / "family.ped"
    ped.write_text(
        "FAM1 child father mother 1 2\nFAM1 father 0 0 1 1\nFAM1 mother 0 0 2 1\n"
    )
    return {
        "analysis": str(analysis),
        "variants": str(variants),
        "genes": str(genes),
        "ped": str(ped),
        "dir": tmp_path,
    }


class TestArgumentParsing:
    def test_required_arguments(self):
        with pytest.raises(SystemExit) as excinfo:
            parse_args([])
        assert excinfo.value.code == 2

    def test_defaults(self):
        args = parse_args(["-a", "a.json", "-v", "v.tsv", "-g", "g.tsv"])
        assert args.output == "genesieve_results.tsv"
        assert args.log_level == "INFO"
        assert args.threads is None
        assert args.html_report is None

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--version"])
        assert __version__ in capsys.readouterr().out


class TestMain:
    """Run the CLI end to end."""

    def test_family_analysis(self, inputs):
        output = inputs["dir"] / "results" / "genes.tsv"
        html = inputs["dir"] / "results" / "report.html"
        exit_code = main(
            [
                "-a", inputs["analysis"],
                "-v", inputs["variants"],
                "-g", inputs["genes"],
                "--ped", inputs["ped"],
                "--proband", "child",
                "--threads", "2",
                "-o", str(output),
                "--html-report", str(html),
            ]
        )
        assert exit_code == 0

        genes = pd.read_csv(output, sep="\t")
        assert list(genes["GENE"]) == ["GENE_A"]
        assert genes.loc[0, "PHENO_SCORE"] == 0.8
        variants = pd.read_csv(inputs["dir"] / "results" / "genes.variants.tsv", sep="\t")
        assert list(variants["POS"]) == [100]
        assert "GENE_A" in html.read_text()

    def test_missing_input_file(self, inputs):
        exit_code = main(
            ["-a", inputs["analysis"], "-v", "missing.tsv", "-g", inputs["genes"]]
        )
        assert exit_code == 1

    def test_multi_sample_without_proband(self, inputs):
        exit_code = main(
            [
                "-a", inputs["analysis"],
                "-v", inputs["variants"],
                "-g", inputs["genes"],
                "-o", str(inputs["dir"] / "genes.tsv"),
            ]
        )
        assert exit_code == 1

    def test_invalid_config_file(self, inputs):
        config = inputs["dir"] / "config.json"
        config.write_text("{not json")
        exit_code = main(
            [
                "-c", str(config),
                "-a", inputs["analysis"],
                "-v", inputs["variants"],
                "-g", inputs["genes"],
            ]
        )
        assert exit_code == 1
