"""Ambiguity-aware codon translation, control strings and codon merging."""
import logging
from itertools import product

from Bio.Data import CodonTable

logger = logging.getLogger(__name__)

# IUPAC nucleotide codes, in the order used to build the triplet table
AMBIGUITY_CODES = "ACGTRYMWSKBDHVN"

AMBIGUITY_MAPPING = {
    "A": "A", "C": "C", "G": "G", "T": "T",
    "R": "AG", "Y": "CT", "M": "AC", "W": "AT",
    "S": "CG", "K": "GT", "B": "CGT", "D": "AGT",
    "H": "ACT", "V": "ACG", "N": "ACGT",
}
AMBIGUITY_INVERSE_MAPPING = {bases: code for code, bases in AMBIGUITY_MAPPING.items()}

AA_THREE_TO_ONE = {
    "Ala": "A", "Cys": "C", "Asp": "D", "Glu": "E", "Phe": "F",
    "Gly": "G", "His": "H", "Ile": "I", "Lys": "K", "Leu": "L",
    "Met": "M", "Asn": "N", "Pro": "P", "Gln": "Q", "Arg": "R",
    "Ser": "S", "Thr": "T", "Val": "V", "Trp": "W", "Tyr": "Y",
}
AA_ONE_TO_THREE = {one: three for three, one in AA_THREE_TO_ONE.items()}

STOP = "*"
UNKNOWN_AA = "X"

_STANDARD = CodonTable.unambiguous_dna_by_id[1]
CODON_TO_AA = dict(_STANDARD.forward_table)
CODON_TO_AA.update({codon: STOP for codon in _STANDARD.stop_codons})

# canonical codons are kept sorted; control strings depend on this order
AA_TO_CODONS = {aa: [] for aa in AA_ONE_TO_THREE}
for _codon, _aa in sorted(CODON_TO_AA.items()):
    if _aa != STOP:
        AA_TO_CODONS[_aa].append(_codon)

class InvalidAminoAcidError(ValueError):
    """Raised when a codon lookup is requested for a non-standard amino acid."""

def expand_ambiguity(code: str) -> str:
    """Return the unambiguous bases of an IUPAC code, or "" if unknown."""
    return AMBIGUITY_MAPPING.get(code, "")

def _build_triplet_table() -> dict[str, str]:
    table = {}
    for triplet in product(AMBIGUITY_CODES, repeat=3):
        choices = [AMBIGUITY_MAPPING[na] for na in triplet]
        aas = {CODON_TO_AA["".join(codon)] for codon in product(*choices)}
        table["".join(triplet)] = "".join(sorted(aas))
    return table

TRIPLET_TABLE = _build_triplet_table()

def translate_triplet(nas: str) -> str:
    """Translate a triplet into the amino acid(s) it may encode.

    Triplets with more than one candidate return every candidate, e.g.
    "AAM" gives "KN". "X" is returned for anything not of length 3 or not
    in the table (such as triplets carrying the '-' of a frame shift).
    """
    if len(nas) != 3:
        return UNKNOWN_AA
    return TRIPLET_TABLE.get(nas.upper(), UNKNOWN_AA)

def simple_translate(nas: str, first_aa: int = None, cons_aas: str = None) -> str:
    """Translate nucleotides into amino acids, one letter per triplet.

    Triplets encoding more than one amino acid become "X". If `cons_aas`
    is given, the consensus amino acid of the position (`first_aa` is the
    1-based position of the first triplet) is removed from the candidates
    before deciding.
    """
    extra = len(nas) % 3
    if extra:
        logger.warning(
            "Nucleotide sequence length %d is not a multiple of 3; "
            "dropping %d trailing base(s)", len(nas), extra
        )
        nas = nas[:-extra]
    if cons_aas is not None and first_aa is None:
        first_aa = 1
    if first_aa is not None and first_aa < 1:
        raise ValueError(f"First amino acid position must be 1 or greater, got {first_aa}")

    aas = []
    for idx in range(len(nas) // 3):
        candidates = translate_triplet(nas[idx * 3:idx * 3 + 3])
        if len(candidates) > 1 and cons_aas is not None:
            ref = cons_aas[first_aa + idx - 1:first_aa + idx]
            if ref:
                candidates = candidates.replace(ref, "")
        aas.append(UNKNOWN_AA if len(candidates) != 1 else candidates)
    return "".join(aas)

def translate_aa_to_codons(aa: str) -> list[str]:
    """Return the canonical codons of a standard amino acid."""
    codons = AA_TO_CODONS.get(aa)
    if codons is None:
        raise InvalidAminoAcidError(
            f"Attempt to translate invalid amino acid notation to codon: {aa!r}"
        )
    return list(codons)

def translate_to_triplet_aa(aas: str) -> str:
    """Convert one-letter amino acids to concatenated three-letter codes."""
    return "".join(AA_ONE_TO_THREE.get(aa, "Xxx") for aa in aas or "")

def triplet_control_string(nas: str, aa: str) -> str:
    """Compare a codon with the closest canonical codon of an amino acid.

    Returns ":::" for an exact match, otherwise "." for every matched and
    " " for every mismatched position of the first best-matching codon.
    """
    if len(aa) == 3:
        aa = AA_THREE_TO_ONE.get(aa, aa)
    max_matched = -1
    control = "   "
    for cmp in AA_TO_CODONS.get(aa, []):
        marks = [
            "." if idx < len(nas) and nas[idx] == cmp[idx] else " "
            for idx in range(3)
        ]
        matched = marks.count(".")
        if matched == 3:
            return ":::"
        if matched > max_matched:
            max_matched = matched
            control = "".join(marks)
    return control

def control_string(all_nas: str, all_aas: str) -> str:
    """Build the control string of nucleotides against three-letter amino acids.

    Example: "TTT" against "Asn" gives "  ." since the closest Asn codon
    is AAT.
    """
    na_chunks = [all_nas[i:i + 3] for i in range(0, len(all_nas), 3)]
    aa_chunks = [all_aas[i:i + 3] for i in range(0, len(all_aas), 3)]
    return "".join(
        triplet_control_string(nas, aas) if nas and aas else ""
        for nas, aas in zip(na_chunks, aa_chunks)
    )

def count_matched_nas(control: str) -> int:
    return sum(3 if chunk == ":::" else chunk.count(".")
               for chunk in (control[i:i + 3] for i in range(0, len(control), 3)))

def merge_codons(codons) -> str:
    """Merge codons into one, using IUPAC codes where they disagree.

    `codons` must be ordered by prevalence, highest first: a '-' is only
    taken at a position when no base was seen there before it.
    """
    codons = list(codons)
    longest = max((len(codon) for codon in codons), default=0)
    merged = []
    for idx in range(longest):
        bps = set()
        for codon in codons:
            if len(codon) <= idx:
                continue
            bp = codon[idx]
            if bp == "-" and bps:
                continue
            bps.update(AMBIGUITY_MAPPING.get(bp, bp))
        bps &= set("ACGT-")

        if not bps:
            merged.append("N")
        elif "-" in bps:
            merged.append("-")
        else:
            merged.append(AMBIGUITY_INVERSE_MAPPING["".join(sorted(bps))])
    return "".join(merged)
