from typing import List

from fastapi import BackgroundTasks, Depends, FastAPI, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse

from .client import ChosicClient, get_default_client
from .config import settings
from .logger import logger
from .relays import activate_relays
from .schemas import PlaylistResult, RelayStatus, SearchOptions, SuggestionResult

app = FastAPI(title="chosic-scout", version="1.0.0")

# Prometheus metrics – add middleware BEFORE app starts
try:
    from prometheus_fastapi_instrumentator import Instrumentator
    if not getattr(app.state, "metrics_instrumented", False):
        Instrumentator().instrument(app).expose(app, endpoint="/metrics")
        app.state.metrics_instrumented = True
except Exception as e:
    logger.warning(f"Metrics disabled: {e}")

# Shared with get_suggestions/generate_playlist so there is one relay rotation per process
app.state.client = get_default_client()


def get_client(request: Request) -> ChosicClient:
    return request.app.state.client


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}

@app.get("/", response_class=HTMLResponse)
async def index():
    return """
<!doctype html><meta charset="utf-8">
<title>chosic scout</title>
<style>body{font-family:system-ui;margin:2rem;max-width:780px} input,select,button{padding:.5rem;margin:.25rem}</style>
<h1>chosic scout</h1>
<div>
  <input id="q" placeholder="song, artist or genre" value="queen">
  <select id="type">
    <option>song</option><option>artist</option><option>genre</option><option>category</option>
  </select>
  <button onclick="suggest()">Suggest</button>
  <button onclick="playlist()">Playlist</button>
  <button onclick="activate()">Activate relays</button>
</div>
<pre id="out"></pre>
<script>
const out = document.getElementById('out');
const q = () => document.getElementById('q').value;
const type = () => document.getElementById('type').value;
async function suggest(){
  const r = await fetch('/suggestions?' + new URLSearchParams({q: q(), type: type()}));
  out.textContent = await r.text();
}
async function playlist(){
  const r = await fetch('/playlist', {method:'POST', headers:{'Content-Type':'application/json'},
    body: JSON.stringify({query: q(), type: type()})});
  out.textContent = await r.text();
}
async function activate(){
  const r = await fetch('/relays/activate', {method:'POST'});
  const data = await r.json();
  out.textContent = JSON.stringify(data, null, 2);
  // one tab at a time so the browser does not block them as a popup burst
  data.opening.forEach((url, i) => setTimeout(() => window.open(url, '_blank', 'noopener,noreferrer'), i * data.stagger_ms));
}
</script>
"""

@app.get("/suggestions", response_model=SuggestionResult)
async def suggestions(
    q: str = Query("", description="Text typed so far"),
    type: str = Query("song", description="Suggestion table, e.g. song or artist"),
    client: ChosicClient = Depends(get_client),
):
    result = await client.fetch_suggestions(q, type)
    logger.info(f"Responding with {len(result.suggestions)} {result.source} suggestions")
    return result

@app.post("/playlist", response_model=PlaylistResult)
async def playlist(options: SearchOptions, client: ChosicClient = Depends(get_client)):
    result = await client.generate_playlist(options)
    logger.info(f"Responding with {len(result.songs)} {result.source} songs")
    return result

@app.get("/relays", response_model=List[RelayStatus])
async def relays(client: ChosicClient = Depends(get_client)):
    return await client.rotator.probe()

@app.post("/relays/activate", status_code=202)
async def relays_activate(
    background_tasks: BackgroundTasks,
    local: bool = Query(False, description="Also open the pages in a browser on the server host"),
    client: ChosicClient = Depends(get_client),
):
    """
    List the relay consent pages for the caller's browser to open. With
    ?local=true the pages are also opened on this host, which only helps when
    the service runs on the user's own machine.
    """
    pages = [r.activation_url for r in client.rotator.relays if r.activation_url]
    if local:
        background_tasks.add_task(activate_relays, client.rotator.relays)
    stagger_ms = int(settings.ACTIVATION_STAGGER_SECONDS * 1000)
    return JSONResponse(status_code=202, content={"opening": pages, "stagger_ms": stagger_ms})
