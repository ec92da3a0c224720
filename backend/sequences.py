"""Sequence parsing."""
from io import StringIO

from Bio import SeqIO

from schemas import Sequence

def parse_fasta(content: str) -> list[Sequence]:
    """Parse FASTA format text into Sequence objects."""
    sequences = []

    if content.lstrip().startswith(">"):
        for record in SeqIO.parse(StringIO(content.lstrip()), "fasta"):
            sequences.append(Sequence(
                id=record.id,
                name=record.description,
                sequence=str(record.seq).upper(),
                source="fasta"
            ))

    # Handle raw sequence (no header)
    elif content.strip():
        clean = "".join(content.split())
        if clean.isalpha():
            sequences.append(Sequence(
                id="pasted",
                name="Pasted sequence",
                sequence=clean.upper(),
                source="paste"
            ))

    return sequences
