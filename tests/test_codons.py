import logging
from itertools import product

import pytest

from codons import (
    AA_ONE_TO_THREE, AMBIGUITY_CODES, AMBIGUITY_MAPPING, CODON_TO_AA,
    TRIPLET_TABLE, InvalidAminoAcidError, control_string, count_matched_nas,
    expand_ambiguity, merge_codons, simple_translate, translate_aa_to_codons,
    translate_to_triplet_aa, translate_triplet, triplet_control_string
)

class TestAmbiguity:
    def test_expand(self):
        assert expand_ambiguity("A") == "A"
        assert expand_ambiguity("R") == "AG"
        assert expand_ambiguity("N") == "ACGT"

    def test_unknown_code_expands_to_nothing(self):
        assert expand_ambiguity("Z") == ""
        assert expand_ambiguity("-") == ""

    def test_codes_cover_distinct_subsets(self):
        subsets = {frozenset(bases) for bases in AMBIGUITY_MAPPING.values()}
        assert len(subsets) == 15

class TestTranslateTriplet:
    def test_table_has_every_ambiguity_triplet(self):
        assert len(TRIPLET_TABLE) == 15 ** 3

    def test_table_matches_expanded_codons(self):
        for triplet in product(AMBIGUITY_CODES, repeat=3):
            expected = {
                CODON_TO_AA["".join(codon)]
                for codon in product(*(AMBIGUITY_MAPPING[na] for na in triplet))
            }
            result = translate_triplet("".join(triplet))
            assert set(result) == expected
            assert len(result) == len(expected)

    def test_fully_ambiguous(self):
        assert set(translate_triplet("NNN")) == set("ACDEFGHIKLMNPQRSTVWY*")

    def test_unambiguous(self):
        assert translate_triplet("AAA") == "K"
        assert translate_triplet("aaa") == "K"
        assert translate_triplet("TAA") == "*"
        assert translate_triplet("AAR") == "K"

    def test_mixture(self):
        assert translate_triplet("AAM") == "KN"

    def test_gap_or_bad_length_is_unknown(self):
        assert translate_triplet("AC-") == "X"
        assert translate_triplet("AC") == "X"
        assert translate_triplet("AAAA") == "X"
        assert translate_triplet("") == "X"

class TestSimpleTranslate:
    def test_translate(self):
        assert simple_translate("ATGAAACTG") == "MKL"

    def test_partial_triplet_is_dropped(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert simple_translate("ATGAAAT") == "MK"
        assert "not a multiple of 3" in caplog.text

    def test_mixture_becomes_x(self):
        assert simple_translate("AAMRAT") == "XX"

    def test_consensus_removes_reference(self):
        assert simple_translate("AAM", 1, "K") == "N"
        assert simple_translate("ATGAAM", 1, "MK") == "MN"
        assert simple_translate("AAM", 2, "MK") == "N"

    def test_position_must_be_positive(self):
        with pytest.raises(ValueError, match="1 or greater"):
            simple_translate("AAM", 0, "K")

    def test_consensus_not_in_candidates(self):
        assert simple_translate("AAM", 1, "M") == "X"

class TestTranslateAAToCodons:
    def test_codons(self):
        assert translate_aa_to_codons("M") == ["ATG"]
        assert translate_aa_to_codons("K") == ["AAA", "AAG"]
        assert translate_aa_to_codons("L") == ["CTA", "CTC", "CTG", "CTT", "TTA", "TTG"]

    @pytest.mark.parametrize("aa", ["*", "X", "Z", "", "Lys"])
    def test_invalid(self, aa):
        with pytest.raises(InvalidAminoAcidError):
            translate_aa_to_codons(aa)

    def test_invalid_is_value_error(self):
        with pytest.raises(ValueError, match="invalid amino acid"):
            translate_aa_to_codons("B")

    def test_round_trip(self):
        for aa in AA_ONE_TO_THREE:
            for codon in translate_aa_to_codons(aa):
                assert aa in translate_triplet(codon)

def test_translate_to_triplet_aa():
    assert translate_to_triplet_aa("KN*") == "LysAsnXxx"
    assert translate_to_triplet_aa("") == ""

class TestControlString:
    def test_exact_match(self):
        assert triplet_control_string("AAA", "Lys") == ":::"
        assert triplet_control_string("AAG", "K") == ":::"

    def test_closest_codon(self):
        assert triplet_control_string("TTT", "Asn") == "  ."
        assert triplet_control_string("AAT", "K") == ".. "

    def test_ties_take_first_codon(self):
        # CTT is the first Leu codon with two matches
        assert triplet_control_string("TTT", "L") == " .."

    def test_unknown_amino_acid(self):
        assert triplet_control_string("TAA", "*") == "   "

    def test_sequence(self):
        assert control_string("TTT", "Asn") == "  ."
        assert control_string("AAATTT", "LysAsn") == ":::  ."

    def test_sequence_stops_at_shorter_side(self):
        assert control_string("AAATTT", "Lys") == ":::"
        assert control_string("", "Lys") == ""

    def test_count_matched(self):
        assert count_matched_nas(":::  .") == 4
        assert count_matched_nas("   ") == 0

class TestMergeCodons:
    def test_wobble_mixture(self):
        assert merge_codons(["AAA", "AAG"]) == "AAR"

    def test_gap_after_base_is_ignored(self):
        assert merge_codons(["AAA", "---"]) == "AAA"

    def test_leading_gap_overrides(self):
        assert merge_codons(["---", "AAA"]) == "---"

    def test_ambiguous_input(self):
        assert merge_codons(["AAR", "AAC"]) == "AAV"

    def test_all_bases(self):
        assert merge_codons(["AAA", "CCC", "GGG", "TTT"]) == "NNN"

    def test_illegal_notation_becomes_n(self):
        assert merge_codons(["AAX"]) == "AAN"

    def test_uneven_lengths(self):
        assert merge_codons(["AA", "AAC"]) == "AAC"

    def test_empty(self):
        assert merge_codons([]) == ""
