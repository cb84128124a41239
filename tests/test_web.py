import json

import pytest
from fastapi.testclient import TestClient

from rank_rent_factory.config import Settings
from rank_rent_factory.errors import SchemaViolation
from rank_rent_factory.models import BusinessPlan, create_log
from rank_rent_factory.session import GENERIC_ERROR_MESSAGE
from rank_rent_factory.web import create_app


def _events(body: str) -> list[tuple[str, str]]:
    events = []
    for block in body.strip().split("\n\n"):
        lines = block.splitlines()
        event = lines[0].removeprefix("event: ")
        data = lines[1].removeprefix("data: ")
        events.append((event, data))
    return events


@pytest.fixture
def make_client(settings):
    def _factory(generate):
        return TestClient(create_app(settings=settings, generate=generate))

    return _factory


def _fake_generate(plan_payload):
    def generate(location, niche, language, on_log):
        on_log(create_log("Initializing market recon", "info"))
        on_log(create_log("Blueprint generation complete.", "success"))
        return BusinessPlan.model_validate({**plan_payload, "location": location, "niche": niche, "language": language})

    return generate


def test_index_page(make_client, plan_payload):
    client = make_client(_fake_generate(plan_payload))
    r = client.get("/")
    assert r.status_code == 200
    assert "Rank &amp; Rent" in r.text
    assert "EventSource" in r.text


def test_generate_streams_logs_then_complete(make_client, plan_payload, settings):
    client = make_client(_fake_generate(plan_payload))

    r = client.get("/api/generate", params={"location": "Milano, IT", "niche": "Idraulico", "language": "it"})

    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/event-stream")
    events = _events(r.text)
    assert [e for e, _ in events] == ["log", "log", "complete"]
    assert json.loads(events[0][1])["type"] == "info"

    payload = json.loads(events[-1][1])
    assert payload["plan"]["location"] == "Milano, IT"
    plan_id = payload["planId"]
    assert (settings.plans_dir / plan_id / "plan.json").exists()

    bundle = client.get(f"/plans/{plan_id}/bundle.zip")
    assert bundle.status_code == 200
    assert bundle.headers["content-type"] == "application/zip"

    plan_json = client.get(f"/plans/{plan_id}/plan.json")
    assert plan_json.json()["niche"] == "Idraulico"


def test_generate_failure_emits_generic_error(make_client):
    def generate(location, niche, language, on_log):
        on_log(create_log("CRITICAL FAILURE in synthesis engine.", "error"))
        raise SchemaViolation("bad payload", [("keywords", "Field required")])

    client = make_client(generate)
    r = client.get("/api/generate", params={"location": "Milano, IT", "niche": "Idraulico", "language": "it"})

    events = _events(r.text)
    assert events[-1] == ("error", GENERIC_ERROR_MESSAGE)
    assert "keywords" not in events[-1][1]
    assert json.loads(events[0][1])["type"] == "error"


def test_generate_invalid_input(make_client, plan_payload):
    calls = []

    def generate(*args):
        calls.append(args)

    client = make_client(generate)
    r = client.get("/api/generate", params={"location": "Milano, IT", "niche": "", "language": "it"})

    events = _events(r.text)
    assert events == [("error", "niche must be a non-empty string")]
    assert calls == []


def test_unknown_or_malformed_plan_id(make_client, plan_payload):
    client = make_client(_fake_generate(plan_payload))
    assert client.get("/plans/" + "0" * 32 + "/bundle.zip").status_code == 404
    assert client.get("/plans/not-a-plan/plan.json").status_code == 404
    assert client.get("/plans/..%2F..%2Fetc/plan.json").status_code == 404


def test_report_pdf_rendered_on_demand(make_client, plan_payload, monkeypatch):
    from rank_rent_factory import web

    def fake_pdf(plan, output_path):
        output_path.write_bytes(b"%PDF-1.7 " + plan.niche.encode())
        return output_path

    monkeypatch.setattr(web, "generate_plan_pdf", fake_pdf)
    client = make_client(_fake_generate(plan_payload))
    r = client.get("/api/generate", params={"location": "Milano, IT", "niche": "Idraulico", "language": "it"})
    plan_id = json.loads(_events(r.text)[-1][1])["planId"]

    pdf = client.get(f"/plans/{plan_id}/report.pdf")

    assert pdf.status_code == 200
    assert pdf.content.startswith(b"%PDF")


def test_missing_credential_uses_default_pipeline(tmp_path):
    client = TestClient(create_app(settings=Settings(api_key=None, plans_dir=tmp_path)))
    r = client.get("/api/generate", params={"location": "Milano, IT", "niche": "Idraulico", "language": "it"})
    assert _events(r.text) == [("error", GENERIC_ERROR_MESSAGE)]
