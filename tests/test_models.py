"""Tests for the core data model."""

import pytest

from genesieve.models import (
    FilterResult,
    FilterStatus,
    Gene,
    ModeOfInheritance,
    RunResult,
    VariantEffect,
    normalise_chrom,
)


class TestEnums:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("AUTOSOMAL_DOMINANT", ModeOfInheritance.AUTOSOMAL_DOMINANT),
            ("ar", ModeOfInheritance.AUTOSOMAL_RECESSIVE),
            ("any", ModeOfInheritance.ANY),
            (ModeOfInheritance.MITOCHONDRIAL, ModeOfInheritance.MITOCHONDRIAL),
        ],
    )
    def test_parse_mode_of_inheritance(self, value, expected):
        assert ModeOfInheritance.parse(value) is expected

    def test_unknown_mode_of_inheritance(self):
        with pytest.raises(ValueError, match="Unknown mode of inheritance"):
            ModeOfInheritance.parse("Y_LINKED")

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("missense_variant", VariantEffect.MISSENSE_VARIANT),
            ("missense_variant&splice_region_variant", VariantEffect.MISSENSE_VARIANT),
            ("5_prime_UTR_variant", VariantEffect.FIVE_PRIME_UTR_VARIANT),
            ("", VariantEffect.SEQUENCE_VARIANT),
            ("made_up_term", VariantEffect.SEQUENCE_VARIANT),
        ],
    )
    def test_parse_variant_effect(self, value, expected):
        assert VariantEffect.parse(value) is expected

    @pytest.mark.parametrize(
        "chrom, expected", [("chr1", "1"), ("chrX", "X"), ("x", "X"), ("chrM", "MT"), ("MT", "MT")]
    )
    def test_normalise_chrom(self, chrom, expected):
        assert normalise_chrom(chrom) == expected


class TestVariantRecord:
    def test_unfiltered_variant_has_passed(self, make_variant):
        variant = make_variant()
        assert variant.passed_filters()
        assert variant.filter_status is FilterStatus.UNFILTERED

    def test_filter_history(self, make_variant):
        variant = make_variant()
        assert variant.add_filter_result(FilterResult.pass_("quality"))
        assert not variant.add_filter_result(FilterResult.fail("frequency"))
        assert variant.applied_filter_types == ["quality", "frequency"]
        assert variant.failed_filter_types == ["frequency"]
        assert variant.passed_filter("quality")
        assert not variant.passed_filter("frequency")
        assert not variant.passed_filter("interval")
        assert variant.filter_status is FilterStatus.FAILED

    def test_str(self, make_variant):
        assert str(make_variant(gene="GENE1", pos=5)) == "1:5:A>T (GENE1)"


class TestGene:
    """Test gene filter state."""

    def test_gene_without_variants_or_filters_passes(self):
        gene = Gene("A")
        assert gene.passed_filters()
        assert gene.filter_status is FilterStatus.UNFILTERED

    def test_gene_needs_a_passed_variant(self, make_variant):
        gene = Gene("A")
        variant = make_variant(gene="A")
        variant.add_filter_result(FilterResult.fail("quality"))
        gene.add_variant(variant)
        assert not gene.passed_filters()
        assert gene.filter_status is FilterStatus.FAILED

    def test_failed_gene_filter(self, make_variant):
        gene = Gene("A")
        gene.add_variant(make_variant(gene="A"))
        gene.add_filter_result(FilterResult.fail("gene_symbol"))
        assert not gene.passed_filters()
        assert not gene.passed_filter("gene_symbol")

    def test_failed_gene_filter_is_not_overwritten_by_a_later_pass(self, make_variant):
        gene = Gene("A")
        gene.add_variant(make_variant(gene="A"))
        assert not gene.add_filter_result(FilterResult.fail("priority_score"))
        assert gene.add_filter_result(FilterResult.pass_("priority_score"))
        assert not gene.passed_filters()
        assert not gene.passed_filter("priority_score")
        assert gene.failed_filter_types == ["priority_score"]
        assert gene.passed_filter_types == []
        assert gene.filter_status is FilterStatus.FAILED

    def test_gene_filter_history_keeps_every_result(self):
        gene = Gene("A")
        gene.add_filter_result(FilterResult.pass_("gene_symbol"))
        gene.add_filter_result(FilterResult.pass_("priority_score"))
        assert gene.passed_filter_types == ["gene_symbol", "priority_score"]
        assert len(gene.filter_results) == 2
        assert gene.passed_filters()

    def test_passed_filter_falls_back_to_variants(self, make_variant):
        gene = Gene("A")
        variant = make_variant(gene="A")
        variant.add_filter_result(FilterResult.pass_("quality"))
        gene.add_variant(variant)
        assert gene.passed_filter("quality")
        assert gene.filter_status is FilterStatus.PASSED

    def test_remove_failed_variants(self, make_variant):
        gene = Gene("A")
        kept, dropped = make_variant(gene="A", pos=1), make_variant(gene="A", pos=2)
        dropped.add_filter_result(FilterResult.fail("quality"))
        gene.add_variant(kept)
        gene.add_variant(dropped)
        gene.remove_failed_variants()
        assert gene.variants == [kept]

    def test_priority_scores(self):
        gene = Gene("A")
        gene.add_priority_score("PHENO", 1)
        assert gene.priority_scores == {"PHENO": 1.0}


class TestRunResult:
    def test_lookup_by_symbol(self):
        result = RunResult(genes=(Gene("A"), Gene("B")), variants=())
        assert result.gene("B").symbol == "B"
        assert result.gene("C") is None
        assert result.gene_symbols == ["A", "B"]

    def test_immutable(self):
        result = RunResult(genes=(), variants=())
        with pytest.raises(AttributeError):
            result.proband = "Adam"
