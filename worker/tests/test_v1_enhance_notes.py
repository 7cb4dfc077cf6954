from fastapi.testclient import TestClient

from audionotes.app import app


client = TestClient(app)


def test_enhance_notes_merges_transcript():
    r = client.post(
        "/v1/enhance_notes",
        json={
            "existing_notes": "- Discuss budget\n- Review timeline",
            "transcription": "The budget discussion went well and we agreed on a new timeline for next quarter.",
        },
    )
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["sections"][:2] == ["Original Notes", "Expanded Details from Recording"]
    assert "New Information from Recording" not in body["sections"]
    notes = body["enhanced_notes"]
    assert notes.index("- Discuss budget") < notes.index("- Review timeline")
    assert notes.index("- Review timeline") < notes.index("## Expanded Details from Recording")


def test_enhance_notes_requires_both_inputs():
    r = client.post("/v1/enhance_notes", json={"existing_notes": "- a note", "transcription": ""})
    assert r.status_code == 400
    assert r.json()["error"] == "Both existing notes and transcription are required"
    r = client.post("/v1/enhance_notes", json={"transcription": "something was said"})
    assert r.status_code == 400
