"""Data models for sequence alignment and mutation calling."""
from enum import Enum
from typing import Optional

from Bio.Seq import reverse_complement
from pydantic import BaseModel, ConfigDict, Field

from codons import UNKNOWN_AA

class Sequence(BaseModel):
    id: str
    name: str = ""
    sequence: str
    source: str = "unknown"

    @property
    def length(self) -> int:
        return len(self.sequence)

    def reverse_complement(self) -> "Sequence":
        return self.model_copy(update={"sequence": reverse_complement(self.sequence)})

class Gene(BaseModel):
    name: str
    ref_aas: str  # reference amino acids; its length bounds the alignment
    ref_nas: str = ""  # reference nucleotides, needed by the pairwise backend
    min_match_pcnt: float = Field(default=60.0, ge=0, le=100)
    min_num_of_sites: int = Field(default=3, ge=0)

    @property
    def length(self) -> int:
        return len(self.ref_aas)

    def ref_aa(self, position: int) -> str:
        """Reference amino acid of a 1-based position."""
        if 1 <= position <= self.length:
            return self.ref_aas[position - 1]
        return UNKNOWN_AA

class Strain(BaseModel):
    name: str
    genes: list[Gene]

class Virus(BaseModel):
    name: str
    description: str = ""
    strains: list[Strain]

class AlignedSite(BaseModel):
    model_config = ConfigDict(frozen=True)

    pos_aa: int
    pos_nas: list[Optional[int]] = []  # 1-based; None where unsequenced
    length_na: int = 3

    @property
    def first_pos_na(self) -> Optional[int]:
        return next((pos for pos in self.pos_nas if pos is not None), None)

    @property
    def last_pos_na(self) -> Optional[int]:
        return next((pos for pos in reversed(self.pos_nas) if pos is not None), None)

class Mutation(BaseModel):
    model_config = ConfigDict(frozen=True)

    gene: str
    position: int
    reference: str
    codon: str = ""
    aas: str
    is_insertion: bool = False
    is_deletion: bool = False
    inserted_nas: str = ""

    @property
    def is_unsequenced(self) -> bool:
        if self.is_deletion or not self.codon:
            return False
        return set(self.codon) <= {"N", "-"}

    @property
    def is_mixture(self) -> bool:
        return len(self.aas.split("_")[0]) > 1

    @property
    def text(self) -> str:
        if self.is_deletion:
            return f"{self.reference}{self.position}-"
        if self.is_unsequenced:
            return f"{self.reference}{self.position}{UNKNOWN_AA}"
        return f"{self.reference}{self.position}{self.aas}"

class FrameShift(BaseModel):
    model_config = ConfigDict(frozen=True)

    gene: str
    position: int
    size: int
    is_insertion: bool = False
    is_deletion: bool = False
    nas: str = ""

    @property
    def text(self) -> str:
        kind = "ins" if self.is_insertion else "del"
        return f"{self.gene}{self.position}{kind}{self.size}bp"

class AlignedGeneSequence(BaseModel):
    model_config = ConfigDict(frozen=True)

    gene: str
    first_aa: int
    last_aa: int
    first_na: int
    last_na: int
    aligned_sites: list[AlignedSite]
    mutations: list[Mutation]
    frame_shifts: list[FrameShift]
    match_pcnt: float
    num_matched_nas: int

    @property
    def size(self) -> int:
        return max(0, self.last_aa - self.first_aa + 1)

class MisalignmentKind(str, Enum):
    too_short = "too_short"
    empty_span = "empty_span"
    low_match = "low_match"

class Misalignment(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: MisalignmentKind
    gene: str
    message: str
    suppressible: bool = False

class AlignedSequence(BaseModel):
    input_sequence: Sequence
    strain: Optional[str] = None
    gene_sequences: dict[str, AlignedGeneSequence] = {}
    discarded: dict[str, str] = {}  # gene name -> reason
    is_reverse_complement: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.gene_sequences

    @property
    def num_matched_nas(self) -> int:
        return sum(gs.num_matched_nas for gs in self.gene_sequences.values())

    @property
    def mutations(self) -> list[Mutation]:
        return [m for gs in self.gene_sequences.values() for m in gs.mutations]

    @property
    def frame_shifts(self) -> list[FrameShift]:
        return [fs for gs in self.gene_sequences.values() for fs in gs.frame_shifts]

# --- API payloads ---

class AlignmentRequest(BaseModel):
    virus: str
    sequences: list[Sequence]
    reverse_first: bool = False

class MergeCodonsRequest(BaseModel):
    codons: list[str]  # highest prevalence first

class ControlStringRequest(BaseModel):
    nas: str
    aas: str  # concatenated three-letter amino acids
