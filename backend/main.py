"""FastAPI application for codon translation and mutation calling."""
import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, UploadFile, File
from schemas import (
    Sequence, AlignedSequence, AlignmentRequest,
    MergeCodonsRequest, ControlStringRequest
)
from sequences import parse_fasta
from codons import (
    InvalidAminoAcidError, control_string, merge_codons,
    simple_translate, translate_aa_to_codons
)
from alignment import PairwiseGeneAligner
from orchestration import align_batch
from viruses import list_viruses, load_virus

app = FastAPI(title="Sierra Mutation Caller", version="1.0")

VIRUSES_DIR = Path(__file__).parent.parent / "viruses"

aligner = PairwiseGeneAligner()

# --- Sequence endpoints ---

@app.post("/api/parse-fasta")
async def parse_fasta_endpoint(file: UploadFile = File(...)) -> list[Sequence]:
    """Parse uploaded FASTA file."""
    content = await file.read()
    sequences = parse_fasta(content.decode("utf-8"))
    if not sequences:
        raise HTTPException(status_code=400, detail="No valid sequences found")
    return sequences

@app.post("/api/parse-text")
async def parse_text(data: dict) -> list[Sequence]:
    """Parse pasted sequence text."""
    content = data.get("text", "")
    sequences = parse_fasta(content)
    if not sequences:
        raise HTTPException(status_code=400, detail="No valid sequences found")
    return sequences

# --- Codon endpoints ---

@app.get("/api/translate")
async def translate(nas: str, first_aa: Optional[int] = None, cons_aas: Optional[str] = None) -> dict:
    """Translate nucleotides; ambiguous triplets become X."""
    try:
        return {"aas": simple_translate(nas.upper(), first_aa, cons_aas)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/codons/{aa}")
async def codons_of(aa: str) -> list[str]:
    """Canonical codons of an amino acid."""
    try:
        return translate_aa_to_codons(aa.upper())
    except InvalidAminoAcidError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.post("/api/merge-codons")
async def merge(request: MergeCodonsRequest) -> dict:
    """Merge codons ordered by prevalence into one codon."""
    return {"codon": merge_codons(codon.upper() for codon in request.codons)}

@app.post("/api/control-string")
async def control(request: ControlStringRequest) -> dict:
    """Control string of nucleotides against three-letter amino acids."""
    return {"control": control_string(request.nas.upper(), request.aas)}

# --- Alignment endpoints ---

@app.get("/api/viruses")
async def viruses() -> list[str]:
    """List configured viruses."""
    return list_viruses(VIRUSES_DIR)

@app.post("/api/align")
async def align(request: AlignmentRequest) -> list[Optional[AlignedSequence]]:
    """Align sequences to the genes of a virus and call mutations."""
    if not request.sequences:
        raise HTTPException(status_code=400, detail="At least one sequence required")

    path = VIRUSES_DIR / f"{request.virus}.json"
    if not path.exists():
        raise HTTPException(status_code=404, detail=f"Virus not found: {request.virus}")

    return align_batch(
        aligner,
        load_virus(path),
        request.sequences,
        reverse_first=request.reverse_first
    )

if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=8000)
