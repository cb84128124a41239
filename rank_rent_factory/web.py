"""FastAPI web app: form in, live progress over SSE, plan artifacts out."""

import asyncio
import json
import logging
import re
import uuid
from functools import partial
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import FileResponse, HTMLResponse, StreamingResponse

from .bundle import build_bundle_zip, write_plan_json
from .config import Settings
from .main import generate_business_plan
from .models import BusinessPlan, LogEntry
from .report import generate_plan_pdf
from .session import InputState, PlanSession, ResultsState

logger = logging.getLogger(__name__)

_PLAN_ID = re.compile(r"^[0-9a-f]{32}$")


def create_app(settings: Settings | None = None, generate=None) -> FastAPI:
    settings = settings or Settings.from_env()
    generate = generate or partial(generate_business_plan, settings=settings)
    plans_dir = Path(settings.plans_dir)

    app = FastAPI(title="Rank & Rent Factory")
    app.state.settings = settings

    def _plan_dir(plan_id: str) -> Path | None:
        if not _PLAN_ID.match(plan_id):
            return None
        return plans_dir / plan_id

    def _store_plan(plan: BusinessPlan) -> str:
        plan_id = uuid.uuid4().hex
        target = plans_dir / plan_id
        write_plan_json(plan, target / "plan.json")
        (target / "bundle.zip").write_bytes(build_bundle_zip(plan))
        return plan_id

    @app.get("/", response_class=HTMLResponse)
    async def index():
        return INDEX_HTML

    @app.get("/api/generate")
    async def generate_plan(location: str = "", niche: str = "", language: str = "en"):
        """Generate a business plan via Server-Sent Events."""
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[LogEntry | None] = asyncio.Queue()

        def on_log(entry: LogEntry):
            # Called from the pipeline's worker thread
            loop.call_soon_threadsafe(queue.put_nowait, entry)

        session = PlanSession(generate=generate, on_log=on_log)

        async def run():
            try:
                await session.submit(location, niche, language)
            finally:
                queue.put_nowait(None)

        async def event_stream():
            try:
                task = asyncio.create_task(run())
                while True:
                    entry = await queue.get()
                    if entry is None:
                        break
                    yield _sse("log", json.dumps(entry.to_dict()))
                await task

                state = session.state
                if isinstance(state, ResultsState):
                    plan_id = await asyncio.to_thread(_store_plan, state.plan)
                    payload = {"planId": plan_id, "plan": state.plan.model_dump(by_alias=True)}
                    yield _sse("complete", json.dumps(payload))
                elif isinstance(state, InputState) and state.error:
                    yield _sse("error", state.error)
            except ValueError as e:
                yield _sse("error", str(e))
            except Exception:
                logger.exception("Plan stream failed")
                yield _sse("error", "Unexpected server error. Please try again.")

        return StreamingResponse(
            event_stream(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "X-Accel-Buffering": "no",
            },
        )

    @app.get("/plans/{plan_id}/plan.json")
    async def download_plan(plan_id: str):
        path = _artifact(plan_id, "plan.json")
        if path is None:
            return HTMLResponse("Plan not found.", status_code=404)
        return FileResponse(path, filename="plan.json", media_type="application/json")

    @app.get("/plans/{plan_id}/bundle.zip")
    async def download_bundle(plan_id: str):
        path = _artifact(plan_id, "bundle.zip")
        if path is None:
            return HTMLResponse("Plan not found.", status_code=404)
        return FileResponse(path, filename=f"site_{plan_id[:8]}.zip", media_type="application/zip")

    @app.get("/plans/{plan_id}/report.pdf")
    async def download_report(plan_id: str):
        plan_path = _artifact(plan_id, "plan.json")
        if plan_path is None:
            return HTMLResponse("Plan not found.", status_code=404)
        pdf_path = plan_path.parent / "report.pdf"
        if not pdf_path.exists():
            plan = BusinessPlan.model_validate_json(plan_path.read_text(encoding="utf-8"))
            await asyncio.to_thread(generate_plan_pdf, plan, pdf_path)
        return FileResponse(pdf_path, filename="report.pdf", media_type="application/pdf")

    def _artifact(plan_id: str, name: str) -> Path | None:
        directory = _plan_dir(plan_id)
        if directory is None:
            return None
        path = directory / name
        return path if path.exists() else None

    return app


def _sse(event: str, data: str) -> str:
    return f"event: {event}\ndata: {data}\n\n"


def serve():
    """Entry point: serve the app with uvicorn."""
    import argparse

    import uvicorn

    parser = argparse.ArgumentParser(prog="rank-rent-factory-web")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()
    uvicorn.run("rank_rent_factory.web:app", host=args.host, port=args.port)


# ---------------------------------------------------------------------------
# Inline HTML: single page app
# ---------------------------------------------------------------------------

INDEX_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Rank &amp; Rent Factory</title>
<style>
  *, *::before, *::after { margin: 0; padding: 0; box-sizing: border-box; }

  body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
    background: #0f172a;
    color: #e2e8f0;
    min-height: 100vh;
    display: flex;
    flex-direction: column;
    align-items: center;
    justify-content: center;
    padding: 20px;
  }

  .card {
    background: #111827;
    border: 1px solid #1f2937;
    border-radius: 16px;
    padding: 40px;
    width: 100%;
    max-width: 620px;
  }

  h1 { font-size: 28px; margin-bottom: 6px; }
  h1 span { color: #34d399; }
  .subtitle { font-size: 14px; color: #94a3b8; margin-bottom: 28px; }

  label {
    display: block;
    font-size: 12px;
    font-weight: 600;
    letter-spacing: 0.05em;
    color: #34d399;
    margin: 14px 0 6px;
  }

  input[type="text"], select {
    width: 100%;
    padding: 12px 14px;
    background: #020617;
    border: 1px solid #334155;
    border-radius: 10px;
    color: white;
    font-size: 15px;
    outline: none;
  }

  button, .btn {
    display: inline-block;
    margin-top: 20px;
    padding: 12px 24px;
    background: #059669;
    color: white;
    border: none;
    border-radius: 10px;
    font-size: 15px;
    font-weight: 600;
    cursor: pointer;
    text-decoration: none;
  }

  button:disabled { background: #475569; cursor: not-allowed; }

  #log {
    margin-top: 24px;
    font-family: ui-monospace, Menlo, monospace;
    font-size: 13px;
    background: #020617;
    border-radius: 8px;
    padding: 12px;
    max-height: 260px;
    overflow-y: auto;
    display: none;
  }

  .entry .ts { color: #64748b; margin-right: 8px; }
  .entry.info { color: #cbd5e1; }
  .entry.success { color: #34d399; }
  .entry.warning { color: #facc15; }
  .entry.error { color: #fb7185; }

  #result { margin-top: 24px; display: none; }
  #result p { color: #cbd5e1; font-size: 14px; line-height: 1.6; margin-bottom: 8px; }
  #result .btn { margin-right: 8px; }

  .error-msg {
    margin-top: 16px;
    padding: 12px 16px;
    background: rgba(244, 63, 94, 0.1);
    border: 1px solid rgba(244, 63, 94, 0.5);
    border-radius: 10px;
    color: #fb7185;
    font-size: 14px;
    display: none;
  }
</style>
</head>
<body>
<div class="card">
  <h1>Rank &amp; Rent <span>Factory</span></h1>
  <p class="subtitle">Enter a market. We research it and build your blueprint.</p>

  <form id="form">
    <label for="location">TARGET LOCATION</label>
    <input type="text" id="location" placeholder="e.g. Milano, IT" required>
    <label for="niche">TARGET NICHE</label>
    <input type="text" id="niche" placeholder="e.g. Idraulico" required>
    <label for="language">OUTPUT LANGUAGE</label>
    <select id="language">
      <option value="en">EN</option>
      <option value="it">IT</option>
      <option value="es">ES</option>
      <option value="fr">FR</option>
      <option value="de">DE</option>
    </select>
    <button type="submit" id="btn">Generate Blueprint</button>
  </form>

  <div class="error-msg" id="error"></div>
  <div id="log"></div>

  <div id="result">
    <p id="summary"></p>
    <a class="btn" id="bundle-link" href="#">Site bundle (.zip)</a>
    <a class="btn" id="report-link" href="#">Report (.pdf)</a>
    <a class="btn" id="plan-link" href="#">Plan (.json)</a>
    <button type="button" id="reset">New market</button>
  </div>
</div>

<script>
const form = document.getElementById('form');
const btn = document.getElementById('btn');
const logEl = document.getElementById('log');
const resultEl = document.getElementById('result');
const errorEl = document.getElementById('error');

function setIdle() {
  btn.disabled = false;
  btn.textContent = 'Generate Blueprint';
}

document.getElementById('reset').addEventListener('click', () => {
  resultEl.style.display = 'none';
  logEl.style.display = 'none';
  logEl.innerHTML = '';
  form.style.display = 'block';
});

form.addEventListener('submit', (e) => {
  e.preventDefault();
  const location = document.getElementById('location').value.trim();
  const niche = document.getElementById('niche').value.trim();
  const language = document.getElementById('language').value;
  if (!location || !niche) return;

  logEl.innerHTML = '';
  logEl.style.display = 'block';
  resultEl.style.display = 'none';
  errorEl.style.display = 'none';
  btn.disabled = true;
  btn.textContent = 'Working...';

  const params = new URLSearchParams({ location, niche, language });
  const evtSource = new EventSource('/api/generate?' + params.toString());

  evtSource.addEventListener('log', (e) => {
    const entry = JSON.parse(e.data);
    const row = document.createElement('div');
    row.className = 'entry ' + entry.type;
    const ts = document.createElement('span');
    ts.className = 'ts';
    ts.textContent = '[' + entry.timestamp + ']';
    row.appendChild(ts);
    row.appendChild(document.createTextNode(entry.message));
    logEl.appendChild(row);
    logEl.scrollTop = logEl.scrollHeight;
  });

  evtSource.addEventListener('complete', (e) => {
    evtSource.close();
    const data = JSON.parse(e.data);
    const base = '/plans/' + data.planId;
    document.getElementById('summary').textContent = data.plan.executiveSummary;
    document.getElementById('bundle-link').href = base + '/bundle.zip';
    document.getElementById('report-link').href = base + '/report.pdf';
    document.getElementById('plan-link').href = base + '/plan.json';
    form.style.display = 'none';
    resultEl.style.display = 'block';
    setIdle();
  });

  evtSource.addEventListener('error', (e) => {
    evtSource.close();
    errorEl.textContent = e.data ? e.data : 'Connection lost. Please try again.';
    errorEl.style.display = 'block';
    setIdle();
  });
});
</script>
</body>
</html>
"""


app = create_app()
