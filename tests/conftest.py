import pytest

from schemas import Gene, Strain, Virus

# M K L V S T A G E P
PR_NAS = "ATGAAACTGGTTAGCACCGCTGGCGAACCT"
PR_AAS = "MKLVSTAGEP"

def sites(first, last):
    """AlignedSites entries with float positions, as aligners emit them."""
    return [
        {
            "PosAA": float(pos),
            "PosNAs": [float(pos * 3 - 2), float(pos * 3 - 1), float(pos * 3)],
            "LengthNA": 3.0,
        }
        for pos in range(first, last + 1)
    ]

def unsequenced(*positions):
    return [
        {"Position": float(pos), "CodonText": "NNN", "IsInsertion": False, "IsDeletion": False}
        for pos in positions
    ]

def report(first_aa, last_aa, aligned_sites=None, mutations=(), frame_shifts=()):
    return {
        "FirstAA": float(first_aa),
        "LastAA": float(last_aa),
        "AlignedSites": sites(first_aa, last_aa) if aligned_sites is None else aligned_sites,
        "Mutations": list(mutations),
        "FrameShifts": list(frame_shifts),
    }

@pytest.fixture
def pr_gene():
    return Gene(name="PR", ref_aas=PR_AAS, ref_nas=PR_NAS)

@pytest.fixture
def virus(pr_gene):
    return Virus(name="test", strains=[Strain(name="A", genes=[pr_gene])])
