from fastapi.testclient import TestClient

from audionotes.app import app


client = TestClient(app)


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_summarize_short_text():
    text = "This is important. We must finish the report by Friday. The weather was nice."
    r = client.post("/v1/summarize", json={"text": text})
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["summary"] == text
    assert body["key_points"] == [text]
    assert body["action_items"] == ["We must finish the report by Friday."]
    assert body["compression_ratio"] == 1.0
    assert body["markdown"] is None


def test_summarize_markdown_format():
    text = "We must finish the report by Friday. Everyone agreed on the plan."
    r = client.post("/v1/summarize", json={"text": text, "format": "markdown"})
    assert r.status_code == 200
    md = r.json()["markdown"]
    assert md.startswith("## Summary\n")
    assert md.endswith("## Action Items\n- [ ] We must finish the report by Friday.")


def test_summarize_requires_text():
    r = client.post("/v1/summarize", json={"text": "   "})
    assert r.status_code == 400
    assert r.json() == {"ok": False, "error": "No text provided for summarization"}
    r = client.post("/v1/summarize", json={})
    assert r.status_code == 400
