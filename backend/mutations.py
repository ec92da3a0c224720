"""Build mutations and frame shifts from raw aligner report entries."""
from codons import simple_translate, translate_triplet
from schemas import FrameShift, Gene, Mutation

def _translate_inserted(nas: str) -> str:
    # mixtures inside inserted codons collapse to X
    return simple_translate(nas.replace(" ", "-"))

def mutation_from_report(gene: Gene, aa_start: int, entry: dict) -> Mutation:
    """Create a Mutation from one raw mutation entry.

    Entry keys: Position, CodonText, IsInsertion, IsDeletion and, for
    insertions, InsertedCodonsText. Spaces in codon texts are gaps.
    """
    position = int(entry["Position"]) - aa_start + 1
    is_insertion = bool(entry.get("IsInsertion", False))
    is_deletion = bool(entry.get("IsDeletion", False))
    codon = ""
    inserted_nas = ""
    if is_deletion:
        aas = "-"
    else:
        codon = entry.get("CodonText", "").replace(" ", "-").upper()
        aas = translate_triplet(codon)
        if is_insertion:
            inserted_nas = entry.get("InsertedCodonsText", "").upper()
            aas = f"{aas}_{_translate_inserted(inserted_nas)}"
    return Mutation(
        gene=gene.name,
        position=position,
        reference=gene.ref_aa(position),
        codon=codon,
        aas=aas,
        is_insertion=is_insertion,
        is_deletion=is_deletion,
        inserted_nas=inserted_nas,
    )

def frame_shift_from_report(gene: Gene, aa_start: int, entry: dict) -> FrameShift:
    """Create a FrameShift from one raw frame shift entry."""
    return FrameShift(
        gene=gene.name,
        position=int(entry["Position"]) - aa_start + 1,
        size=int(entry["GapLength"]),
        is_insertion=bool(entry.get("IsInsertion", False)),
        is_deletion=bool(entry.get("IsDeletion", False)),
        nas=entry.get("NucleicAcidsText", "").upper(),
    )
