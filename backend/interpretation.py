"""Turn raw per-gene aligner reports into validated aligned gene sequences."""
import logging
from typing import Union

from codons import count_matched_nas, triplet_control_string
from mutations import frame_shift_from_report, mutation_from_report
from schemas import (
    AlignedGeneSequence, AlignedSite, Gene, Misalignment,
    MisalignmentKind, Mutation, Sequence
)

logger = logging.getLogger(__name__)

GeneAlignmentOutcome = Union[AlignedGeneSequence, Misalignment]

def _to_int(value):
    # aligner reports may carry floats for integer fields
    return None if value is None else int(value)

def parse_aligned_site(entry: dict) -> AlignedSite:
    """Parse an AlignedSites entry; PosNAs is preferred over PosNA."""
    pos_nas = entry.get("PosNAs")
    if pos_nas is None:
        pos_nas = [entry["PosNA"]]
    return AlignedSite(
        pos_aa=int(entry["PosAA"]),
        pos_nas=[_to_int(pos) for pos in pos_nas],
        length_na=int(entry["LengthNA"]),
    )

def trim_gaps(first_aa: int, last_aa: int, mutations: list[Mutation]) -> tuple[int, int]:
    """Count leading and trailing positions covered by deletions or NNNs.

    Returns (0, 0) when every position is a gap.
    """
    size = last_aa - first_aa + 1
    if size <= 0:
        return 0, 0
    gap_sites = [False] * size
    for mut in mutations:
        idx = mut.position - first_aa
        if 0 <= idx < size and (mut.is_deletion or mut.is_unsequenced):
            gap_sites[idx] = True

    trim_left = next((idx for idx, gap in enumerate(gap_sites) if not gap), None)
    trim_right = next(
        (idx for idx, gap in enumerate(reversed(gap_sites)) if not gap), None
    )
    if trim_left is None:
        return 0, 0
    return trim_left, trim_right

def site_codon(nas: str, site: AlignedSite) -> str:
    """Read the observed codon of a site from the sequence; gaps become '-'."""
    positions = site.pos_nas
    if len(positions) == 1 and positions[0] is not None:
        start = positions[0] - 1
        codon = nas[start:start + min(site.length_na, 3)]
    else:
        codon = "".join("-" if pos is None else nas[pos - 1:pos] for pos in positions[:3])
    return codon.upper().ljust(3, "-")

def match_statistics(sequence: Sequence, gene: Gene, sites: list[AlignedSite],
                     first_aa: int, last_aa: int) -> tuple[float, int]:
    """Return (match percentage, number of matched nucleotides) of a span."""
    size = last_aa - first_aa + 1
    if size <= 0:
        return 0.0, 0
    matched = 0
    for site in sites:
        codon = site_codon(sequence.sequence, site)
        matched += count_matched_nas(triplet_control_string(codon, gene.ref_aa(site.pos_aa)))
    return 100.0 * matched / (size * 3), matched

def gene_seq_from_report(
    sequence: Sequence,
    gene: Gene,
    report: dict,
    min_match_pcnt: float,
    min_num_of_sites: int,
) -> GeneAlignmentOutcome:
    """Interpret one gene's aligner report for a sequence.

    Returns the trimmed AlignedGeneSequence, or a Misalignment describing
    why the alignment was discarded.
    """
    first_aa = max(1, int(report["FirstAA"]))
    last_aa = min(gene.length, int(report["LastAA"]))
    aa_size = max(0, last_aa - first_aa + 1)
    if aa_size < min_num_of_sites:
        return Misalignment(
            kind=MisalignmentKind.too_short,
            gene=gene.name,
            message=(
                f"Alignment of gene {gene.name} was discarded since the length "
                f"of alignment was too short (< {min_num_of_sites})."
            ),
            suppressible=aa_size == 0,
        )

    aligned_sites = [parse_aligned_site(entry) for entry in report.get("AlignedSites", [])]
    first_na = next(
        (site.first_pos_na for site in aligned_sites if site.first_pos_na is not None), None
    )
    last_na = next(
        (site.last_pos_na for site in reversed(aligned_sites) if site.last_pos_na is not None),
        None
    )
    if first_na is None or last_na is None:
        return Misalignment(
            kind=MisalignmentKind.empty_span,
            gene=gene.name,
            message=(
                f"Alignment of gene {gene.name} is discarded since the list of "
                "aligned sites is empty or contains only gaps."
            ),
        )

    mutations = [mutation_from_report(gene, 1, entry) for entry in report.get("Mutations", [])]
    frame_shifts = [
        frame_shift_from_report(gene, 1, entry) for entry in report.get("FrameShifts", [])
    ]

    trim_left, trim_right = trim_gaps(first_aa, last_aa, mutations)
    first_aa += trim_left
    last_aa -= trim_right
    first_na += trim_left * 3
    last_na -= trim_right * 3

    aligned_sites = [site for site in aligned_sites if first_aa <= site.pos_aa <= last_aa]
    match_pcnt, num_matched_nas = match_statistics(
        sequence, gene, aligned_sites, first_aa, last_aa
    )
    gene_seq = AlignedGeneSequence(
        gene=gene.name,
        first_aa=first_aa,
        last_aa=last_aa,
        first_na=first_na,
        last_na=last_na,
        aligned_sites=aligned_sites,
        mutations=[m for m in mutations if first_aa <= m.position <= last_aa],
        frame_shifts=[fs for fs in frame_shifts if first_aa <= fs.position <= last_aa],
        match_pcnt=match_pcnt,
        num_matched_nas=num_matched_nas,
    )

    if gene_seq.match_pcnt < min_match_pcnt:
        return Misalignment(
            kind=MisalignmentKind.low_match,
            gene=gene.name,
            message=(
                f"Alignment of gene {gene.name} is discarded since the discordance "
                f"rate is too high ({100 - gene_seq.match_pcnt:.1f}% > "
                f"{100 - min_match_pcnt:.0f}%)."
            ),
        )
    if gene_seq.size < min_num_of_sites:
        return Misalignment(
            kind=MisalignmentKind.too_short,
            gene=gene.name,
            message=(
                f"Alignment of gene {gene.name} was discarded since the length of "
                f"alignment ({gene_seq.size}) was too short (< {min_num_of_sites})."
            ),
        )
    logger.debug("Aligned gene %s of %s: AA %d-%d", gene.name, sequence.id, first_aa, last_aa)
    return gene_seq
