"""Batch alignment with a single reverse-complement retry."""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Optional, Protocol

from interpretation import gene_seq_from_report
from schemas import AlignedSequence, Misalignment, Sequence, Strain, Virus

logger = logging.getLogger(__name__)

class Aligner(Protocol):
    def command_align(
        self, sequences: list[Sequence], strain: Strain
    ) -> list[Optional[dict[str, dict]]]:
        """Align sequences to every gene of a strain.

        Returns one entry per sequence, in order: gene name -> raw report,
        or None if the aligner failed for that sequence.
        """
        ...

@dataclass
class AlignmentAttempt:
    result: Optional[AlignedSequence] = None
    errors: dict[str, str] = field(default_factory=dict)  # strain name -> reason

def align_strain(
    original: Sequence,
    submitted: Sequence,
    reports: Optional[dict[str, dict]],
    strain: Strain,
    is_reverse_complement: bool = False,
) -> tuple[Optional[AlignedSequence], Optional[str]]:
    """Interpret every gene report of one strain for one sequence.

    Returns (aligned sequence, None), or (None, error) when no gene aligned.
    """
    if reports is None:
        return None, f"Alignment against strain {strain.name} failed."

    gene_sequences = {}
    discarded = {}
    for gene in strain.genes:
        report = reports.get(gene.name)
        if report is None:
            continue
        try:
            outcome = gene_seq_from_report(
                submitted, gene, report, gene.min_match_pcnt, gene.min_num_of_sites
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Malformed report of gene %s for %s: %r", gene.name, original.id, e)
            discarded[gene.name] = f"Alignment report of gene {gene.name} is malformed: {e!r}"
            continue
        if isinstance(outcome, Misalignment):
            if outcome.suppressible:
                logger.debug("%s: %s", original.id, outcome.message)
            else:
                discarded[gene.name] = outcome.message
        else:
            gene_sequences[gene.name] = outcome

    if not gene_sequences:
        reason = " ".join(discarded.values()) or (
            f"No gene of strain {strain.name} was aligned."
        )
        return None, reason
    return AlignedSequence(
        input_sequence=original,
        strain=strain.name,
        gene_sequences=gene_sequences,
        discarded=discarded,
        is_reverse_complement=is_reverse_complement,
    ), None

def _align_pass(
    aligner: Aligner,
    virus: Virus,
    sequences: list[Sequence],
    reverse: bool,
    max_workers: Optional[int],
) -> list[AlignmentAttempt]:
    submitted = [seq.reverse_complement() for seq in sequences] if reverse else list(sequences)
    attempts = [AlignmentAttempt() for _ in sequences]

    for strain in virus.strains:
        reports = list(aligner.command_align(submitted, strain))
        # a short answer means the missing sequences failed
        reports += [None] * (len(submitted) - len(reports))
        interpret = partial(align_strain, strain=strain, is_reverse_complement=reverse)
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(interpret, sequences, submitted, reports))

        for attempt, (aligned, error) in zip(attempts, outcomes):
            if aligned is None:
                attempt.errors[strain.name] = error
            elif attempt.result is None or attempt.result.num_matched_nas < aligned.num_matched_nas:
                attempt.result = aligned
    return attempts

def select_best_alignment(
    new: Optional[AlignedSequence], known: Optional[AlignedSequence]
) -> Optional[AlignedSequence]:
    """Pick the alignment with more matched nucleotides; ties keep `known`."""
    if new is None:
        return known
    if known is None or known.is_empty:
        return new
    if known.num_matched_nas < new.num_matched_nas:
        return new
    return known

def select_best_alignments(
    new_alignments: list[Optional[AlignedSequence]],
    known_alignments: list[Optional[AlignedSequence]],
) -> list[Optional[AlignedSequence]]:
    return [
        select_best_alignment(new, known)
        for new, known in zip(new_alignments, known_alignments)
    ]

def align_batch(
    aligner: Aligner,
    virus: Virus,
    sequences: list[Sequence],
    reverse_first: bool = False,
    max_workers: Optional[int] = None,
) -> list[Optional[AlignedSequence]]:
    """Align sequences against every strain of a virus.

    Sequences failing on all strains in the forward pass are retried once
    as reverse complements. Results follow the input order; None marks a
    sequence that could not be aligned either way.
    """
    sequences = list(sequences)
    attempts = _align_pass(aligner, virus, sequences, reverse_first, max_workers)
    results = [attempt.result for attempt in attempts]
    if reverse_first:
        return results

    num_strains = len(virus.strains)
    retry = [
        idx for idx, attempt in enumerate(attempts)
        if num_strains and len(attempt.errors) == num_strains
    ]
    if retry:
        logger.info("Retrying %d sequence(s) as reverse complement", len(retry))
        reversed_attempts = _align_pass(
            aligner, virus, [sequences[idx] for idx in retry], True, max_workers
        )
        best = select_best_alignments(
            [attempt.result for attempt in reversed_attempts],
            [results[idx] for idx in retry],
        )
        for idx, aligned in zip(retry, best):
            results[idx] = aligned
    return results

def align_one(aligner: Aligner, virus: Virus, sequence: Sequence) -> Optional[AlignedSequence]:
    results = align_batch(aligner, virus, [sequence])
    return results[0] if results else None
