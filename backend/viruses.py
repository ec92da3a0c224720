"""Virus, strain and gene configuration files."""
import json
from pathlib import Path

from schemas import Virus

def load_virus(path: Path) -> Virus:
    """Load a virus configuration from a JSON file."""
    with open(path) as f:
        return Virus(**json.load(f))

def list_viruses(directory: Path) -> list[str]:
    return sorted(f.stem for f in Path(directory).glob("*.json"))
