"""Gene alignment reports using Biopython's pairwise aligner."""
import logging
from typing import Optional

from Bio import Align

from codons import translate_triplet
from schemas import Gene, Sequence, Strain

logger = logging.getLogger(__name__)

class PairwiseGeneAligner:
    """Align nucleotide sequences to the reference nucleotides of each gene.

    Produces one report per gene in the shape consumed by
    interpretation.gene_seq_from_report: FirstAA, LastAA, AlignedSites,
    Mutations and FrameShifts.
    """

    def __init__(
        self,
        mode: str = "local",
        match_score: float = 2,
        mismatch_score: float = -1,
        open_gap_score: float = -10,
        extend_gap_score: float = -0.5,
    ):
        self.aligner = Align.PairwiseAligner()
        self.aligner.mode = mode
        self.aligner.match_score = match_score
        self.aligner.mismatch_score = mismatch_score
        self.aligner.open_gap_score = open_gap_score
        self.aligner.extend_gap_score = extend_gap_score

    def command_align(
        self, sequences: list[Sequence], strain: Strain
    ) -> list[Optional[dict[str, dict]]]:
        return [self.align_sequence(seq.sequence, strain) for seq in sequences]

    def align_sequence(self, nas: str, strain: Strain) -> dict[str, dict]:
        reports = {}
        query = nas.upper()
        if not query:
            return reports
        for gene in strain.genes:
            if not gene.ref_nas:
                continue
            report = self.gene_report(gene, query)
            if report is not None:
                reports[gene.name] = report
        return reports

    def gene_report(self, gene: Gene, query: str) -> Optional[dict]:
        ref = gene.ref_nas.upper()
        best = next(iter(self.aligner.align(ref, query)), None)
        if best is None or best.score <= 0 or not len(best.aligned[0]):
            logger.debug("No alignment of gene %s", gene.name)
            return None
        return _build_report(gene, query, _extract_columns(best))

def _extract_columns(alignment) -> list[tuple]:
    """Return (ref index, query index) pairs of the aligned region.

    Indices are 0-based; None marks a gap on that side.
    """
    ref_blocks, query_blocks = alignment.aligned
    columns = []
    ref_pos = int(ref_blocks[0][0])
    query_pos = int(query_blocks[0][0])

    for (rs, re), (qs, qe) in zip(ref_blocks, query_blocks):
        rs, re, qs, qe = int(rs), int(re), int(qs), int(qe)
        # Add gaps before this block if needed
        while ref_pos < rs:
            columns.append((ref_pos, None))
            ref_pos += 1

        while query_pos < qs:
            columns.append((None, query_pos))
            query_pos += 1

        for i in range(re - rs):
            columns.append((rs + i, qs + i))

        ref_pos = re
        query_pos = qe

    return columns

def _build_report(gene: Gene, query: str, columns: list[tuple]) -> Optional[dict]:
    ref_to_query = {}
    insertions = {}  # ref index -> query indices inserted after it
    last_ref = None
    for ref_idx, query_idx in columns:
        if ref_idx is None:
            insertions.setdefault(last_ref, []).append(query_idx)
        else:
            ref_to_query[ref_idx] = query_idx
            last_ref = ref_idx

    ref_start = min(ref_to_query)
    ref_end = max(ref_to_query) + 1
    first_codon = -(-ref_start // 3)
    last_codon = ref_end // 3 - 1
    if first_codon > last_codon:
        return None

    sites = []
    mutations = []
    frame_shifts = []
    for codon_idx in range(first_codon, last_codon + 1):
        pos_aa = codon_idx + 1
        ref_positions = range(codon_idx * 3, codon_idx * 3 + 3)
        query_positions = [ref_to_query.get(pos) for pos in ref_positions]
        inserted = [q for pos in ref_positions for q in insertions.get(pos, [])]
        present = sum(q is not None for q in query_positions)

        if present == 0:
            mutations.append({"Position": pos_aa, "IsDeletion": True, "IsInsertion": False})
            continue
        if present < 3:
            frame_shifts.append({
                "Position": pos_aa,
                "GapLength": 3 - present,
                "IsInsertion": False,
                "IsDeletion": True,
                "NucleicAcidsText": "",
            })

        sites.append({
            "PosAA": pos_aa,
            "PosNAs": [None if q is None else q + 1 for q in query_positions],
            "LengthNA": present + len(inserted),
        })

        codon = "".join("-" if q is None else query[q] for q in query_positions)
        inserted_nas = "".join(query[q] for q in inserted)
        is_insertion = bool(inserted_nas) and len(inserted_nas) % 3 == 0
        if inserted_nas and not is_insertion:
            frame_shifts.append({
                "Position": pos_aa,
                "GapLength": len(inserted_nas),
                "IsInsertion": True,
                "IsDeletion": False,
                "NucleicAcidsText": inserted_nas,
            })

        if is_insertion or translate_triplet(codon) != gene.ref_aa(pos_aa):
            mutations.append({
                "Position": pos_aa,
                "CodonText": codon,
                "IsInsertion": is_insertion,
                "IsDeletion": False,
                "InsertedCodonsText": inserted_nas if is_insertion else "",
            })

    return {
        "FirstAA": first_codon + 1,
        "LastAA": last_codon + 1,
        "AlignedSites": sites,
        "Mutations": mutations,
        "FrameShifts": frame_shifts,
    }
