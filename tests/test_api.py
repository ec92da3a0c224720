import pytest
from fastapi.testclient import TestClient

import main
from main import app

@pytest.fixture
def client():
    return TestClient(app)

@pytest.fixture
def ref_nas():
    from viruses import load_virus
    return load_virus(main.VIRUSES_DIR / "example.json").strains[0].genes[0].ref_nas

def test_translate(client):
    resp = client.get("/api/translate", params={"nas": "atgaam"})
    assert resp.status_code == 200
    assert resp.json() == {"aas": "MX"}

def test_translate_with_consensus(client):
    resp = client.get("/api/translate", params={"nas": "AAM", "first_aa": 1, "cons_aas": "K"})
    assert resp.json() == {"aas": "N"}

def test_translate_bad_position(client):
    resp = client.get("/api/translate", params={"nas": "AAM", "first_aa": 0, "cons_aas": "K"})
    assert resp.status_code == 400

def test_codons(client):
    assert client.get("/api/codons/K").json() == ["AAA", "AAG"]
    resp = client.get("/api/codons/Z")
    assert resp.status_code == 400
    assert "invalid amino acid" in resp.json()["detail"]

def test_merge_codons(client):
    resp = client.post("/api/merge-codons", json={"codons": ["aaa", "AAG"]})
    assert resp.json() == {"codon": "AAR"}

def test_control_string(client):
    resp = client.post("/api/control-string", json={"nas": "TTTAAA", "aas": "AsnLys"})
    assert resp.json() == {"control": "  .:::"}

def test_parse_text(client):
    resp = client.post("/api/parse-text", json={"text": ">a\nACGT\n"})
    assert [s["id"] for s in resp.json()] == ["a"]
    assert client.post("/api/parse-text", json={"text": ""}).status_code == 400

def test_parse_fasta_upload(client):
    resp = client.post(
        "/api/parse-fasta",
        files={"file": ("seqs.fasta", b">a\nACGT\n>b\nGGCC\n", "text/plain")},
    )
    assert [s["sequence"] for s in resp.json()] == ["ACGT", "GGCC"]

def test_viruses(client):
    assert client.get("/api/viruses").json() == ["example"]

def test_align(client, ref_nas):
    resp = client.post("/api/align", json={
        "virus": "example",
        "sequences": [
            {"id": "s1", "sequence": ref_nas},
            {"id": "s2", "sequence": "GGGGGGGGGGGG"},
        ],
    })
    assert resp.status_code == 200
    first, second = resp.json()
    assert first["input_sequence"]["id"] == "s1"
    assert first["gene_sequences"]["ORF1"]["first_aa"] == 1
    assert first["gene_sequences"]["ORF1"]["match_pcnt"] == 100
    assert second is None

def test_align_errors(client):
    resp = client.post("/api/align", json={"virus": "nope", "sequences": [{"id": "s", "sequence": "ACGT"}]})
    assert resp.status_code == 404
    resp = client.post("/api/align", json={"virus": "example", "sequences": []})
    assert resp.status_code == 400
