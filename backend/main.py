import logging
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse

from errors import EventValidationError, StorageUnavailable
from models import EventCreate
from repo_events import EventRepo
from seed import seed_events
from service_events import EventService
from settings import settings
from sleep import summarize_sleep
from timeline import build_timeline

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="NightCtrl Backend")

# Instantiate the repo + service here so the routes remain thin; tests
# swap them through `app.dependency_overrides`.
repo = EventRepo()
svc = EventService(repo)


def get_service() -> EventService:
    return svc


def get_owner() -> str:
    # single-user demo: every request acts as the configured user
    return settings.default_user


@app.get("/health")
def health(svc: EventService = Depends(get_service)):
    try:
        svc.health_check()
        return {"ok": True}
    except StorageUnavailable as e:
        raise HTTPException(status_code=503, detail=f"DB health check failed: {e}")


@app.post("/events")
def create_event(
    payload: EventCreate,
    svc: EventService = Depends(get_service),
    owner: str = Depends(get_owner),
):
    try:
        return svc.create_event(payload, owner)
    except EventValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Insert failed: {e}")


def _load(svc: EventService, owner: str, start, end) -> list[dict]:
    try:
        return svc.list_events(owner, start, end)
    except EventValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Query failed: {e}")


@app.get("/events")
def list_events(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    svc: EventService = Depends(get_service),
    owner: str = Depends(get_owner),
):
    return _load(svc, owner, start, end)


@app.get("/sleep")
def sleep_summary(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    svc: EventService = Depends(get_service),
    owner: str = Depends(get_owner),
):
    return summarize_sleep(_load(svc, owner, start, end))


@app.get("/timeline")
def timeline(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    svc: EventService = Depends(get_service),
    owner: str = Depends(get_owner),
):
    return build_timeline(_load(svc, owner, start, end))


@app.post("/seed")
def seed(
    days: int = Query(settings.seed_days, ge=1, le=365),
    svc: EventService = Depends(get_service),
    owner: str = Depends(get_owner),
):
    try:
        return {"inserted": seed_events(svc, owner, days)}
    except StorageUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))


@app.get("/ui", response_class=HTMLResponse)
def ui():
    return """
<!doctype html>
<html>
<head>
  <meta charset="utf-8"/>
  <title>NightCtrl</title>
  <style>
    body { font-family: Arial, sans-serif; margin: 20px; max-width: 900px; }
    input, select, button { padding: 8px; }
    .card { padding: 12px; border: 1px solid #ddd; margin: 12px 0; border-radius: 8px; }
    .err { color: #b00020; }
    .bars { display: flex; align-items: flex-end; gap: 8px; height: 200px; }
    .bar { background: #3B82F6; width: 48px; text-align: center; color: #fff; font-size: 12px; }
    .lbl { text-align: center; font-size: 12px; width: 48px; }
    .ts { color: #666; font-size: 12px; }
  </style>
</head>
<body>
  <h2>NightCtrl &mdash; Sleep Timeline</h2>
  <div class="card">
    <select id="type">
      <option value="sleep_start">Bedtime</option>
      <option value="sleep_end">Wake Time</option>
      <option value="supplement">Supplement</option>
    </select>
    <input id="ts" type="datetime-local"/>
    <input id="value" type="number" placeholder="400 (mg)" style="width:100px"/>
    <button onclick="add()">Add Event</button>
    <button onclick="seed()">Seed Demo</button>
    <div id="err" class="err"></div>
  </div>
  <div class="card">
    <h3>Sleep Duration (Last 7 Nights)</h3>
    <div id="chart" class="bars"></div>
    <div id="labels" style="display:flex; gap:8px"></div>
    <div id="avg"></div>
  </div>
  <div class="card"><h3>Timeline</h3><div id="timeline"></div></div>

<script>
function showError(msg){ document.getElementById('err').textContent = msg || ''; }

async function add(){
  const type = document.getElementById('type').value;
  const body = {type, timestamp: document.getElementById('ts').value};
  const v = document.getElementById('value').value;
  if (type === 'supplement' && v !== '') { body.value = parseFloat(v); body.unit = 'mg'; }
  const res = await fetch('/events', {
    method: 'POST', headers: {'Content-Type': 'application/json'}, body: JSON.stringify(body)
  });
  if (!res.ok) {
    const data = await res.json().catch(() => ({}));
    showError(`Could not add event (${res.status}): ${JSON.stringify(data.detail || data)}`);
    return;
  }
  showError('');
  await load();
}
async function seed(){
  const res = await fetch('/seed', {method:'POST'});
  if (!res.ok) { showError(`Seeding failed (${res.status})`); return; }
  await load();
}
async function load(){
  const [sleepRes, tlRes] = await Promise.all([fetch('/sleep'), fetch('/timeline')]);
  if (!sleepRes.ok || !tlRes.ok) { showError('Could not load data'); return; }
  const sleep = await sleepRes.json();
  const days = await tlRes.json();

  const chart = document.getElementById('chart');
  const labels = document.getElementById('labels');
  chart.innerHTML = ''; labels.innerHTML = '';
  sleep.nights.forEach(n => {
    const bar = document.createElement('div');
    bar.className = 'bar';
    bar.style.height = `${Math.min(n.hours, 12) / 12 * 100}%`;
    bar.textContent = n.hours;
    chart.appendChild(bar);
    const l = document.createElement('div');
    l.className = 'lbl'; l.textContent = n.label;
    labels.appendChild(l);
  });
  document.getElementById('avg').textContent = `Average: ${sleep.averageHours} hours`;

  const out = document.getElementById('timeline');
  out.innerHTML = '';
  days.forEach(d => {
    const h = document.createElement('h4');
    h.textContent = d.label;
    out.appendChild(h);
    d.events.forEach(e => {
      const div = document.createElement('div');
      div.innerHTML = `<b>${e.name}</b> <span class="ts">${e.time}</span>` +
        (e.detail ? `<div class="ts">${e.detail}</div>` : '');
      out.appendChild(div);
    });
  });
}
load();
</script>
</body>
</html>
"""
