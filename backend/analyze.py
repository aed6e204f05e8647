from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from .deps import get_file_store, get_model_provider
from .errors import ProviderError, RepoAnalystError, UnparseableResponse
from .prompts import ANALYSIS_SYSTEM, build_analysis_prompt
from .repo_ref import parse_repo_url
from .retrieval.pack import MANIFEST_FILES
from .retrieval.pipeline import decode
from .sse import EventChannel, stream_events

router = APIRouter()

ANALYSIS_MAX_TOKENS = 800
ANALYSIS_TEMPERATURE = 0.1


def fetch_repo_overview(store, owner: str, name: str) -> dict:
    """README, language list and root manifests; each piece is optional."""
    overview = {"readme": None, "languages": [], "files": []}
    try:
        overview["readme"] = store.get_readme(owner, name)
    except RepoAnalystError as e:
        print(f"[analyze] readme skipped: {type(e).__name__}: {e}")
    try:
        overview["languages"] = store.get_languages(owner, name)
    except RepoAnalystError as e:
        print(f"[analyze] languages skipped: {type(e).__name__}: {e}")
    for path in MANIFEST_FILES:
        try:
            overview["files"].append({"path": path, "content": decode(store.get_file_content(owner, name, path, None))})
        except RepoAnalystError:
            continue
    return overview


def run_analysis(ch: EventChannel, repo: str, owner: str, name: str, store, provider) -> None:
    ch.log("Starting analysis")
    ch.log("Fetching repository contents")
    overview = fetch_repo_overview(store, owner, name)
    ch.log("Fetched README and dependency files")

    prompt = build_analysis_prompt(repo, overview["readme"], overview["languages"], overview["files"])
    ch.log("Sending data to the model for structured analysis")
    if provider is None:
        ch.error("Model provider not configured on server. Set OPENAI_API_KEY to enable analysis.")
        return
    try:
        analysis = provider.complete_json(ANALYSIS_SYSTEM, prompt, ANALYSIS_MAX_TOKENS, ANALYSIS_TEMPERATURE)
    except UnparseableResponse as e:
        ch.error("Model did not return parseable JSON", raw=e.raw)
        return
    except ProviderError as e:
        ch.error(f"Model provider error: {e}")
        return
    ch.log("Received analysis from the model")
    ch.send("result", {"analysis": analysis})


@router.get("/api/analyze")
def analyze(repo: str | None = Query(None), store=Depends(get_file_store), provider=Depends(get_model_provider)):
    """
    Summarize a repository (purpose, languages, frameworks, use cases, difficulty) over SSE.
    """
    if not repo:
        return JSONResponse(status_code=400, content={"error": "missing repo query parameter"})
    parsed = parse_repo_url(repo)
    if not parsed:
        return JSONResponse(status_code=400, content={"error": "invalid github repo url"})
    owner, name = parsed
    return stream_events(lambda ch: run_analysis(ch, repo, owner, name, store, provider))
