"""
Walkthrough / Q&A endpoint: select files, ask the model, return a grounded answer over SSE.
"""
import time

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from .config import WALKTHROUGH_MAX_BYTES, WALKTHROUGH_MAX_FILES, env_int
from .deps import get_file_store, get_model_provider, get_rule_store
from .errors import NotFound, ProviderError, UnparseableResponse
from .grounding import empty_retrieval_answer, validate_answer
from .prompts import WALKTHROUGH_SYSTEM, build_walkthrough_prompt
from .repo_ref import parse_repo_url, repo_key
from .retrieval.pipeline import decode, select_files
from .retrieval.types import SelectionLimits
from .sse import EventChannel, stream_events

router = APIRouter()

WALKTHROUGH_MAX_TOKENS = 1500
WALKTHROUGH_TEMPERATURE = 0.0


def walkthrough_limits() -> SelectionLimits:
    return SelectionLimits(
        max_files=env_int("WALKTHROUGH_MAX_FILES", WALKTHROUGH_MAX_FILES),
        max_bytes=env_int("WALKTHROUGH_MAX_BYTES", WALKTHROUGH_MAX_BYTES),
    )


def run_walkthrough(ch: EventChannel, owner: str, name: str, question: str, store, provider, rules) -> None:
    ch.log("Starting walkthrough")
    ch.log("Fetching repository tree and source files (limited)")
    retrieval = select_files(
        owner, name, question, walkthrough_limits(),
        store=store, embedder=provider, rules=rules, logger=ch.log,
    )
    ch.log(f"Fetched {len(retrieval.files)} files ({retrieval.total_bytes} bytes)")

    if not retrieval.files:
        ch.log("No repository files fetched; cannot produce walkthrough.")
        ch.send("result", {"walkthrough": empty_retrieval_answer().model_dump()})
        return

    prompt = build_walkthrough_prompt(question, retrieval)
    print(f"[walkthrough] repo={owner}/{name} files={len(retrieval.files)} bytes={retrieval.total_bytes} "
          f"prompt_chars={len(prompt)}")
    ch.log("Sending data to the model for walkthrough answer")
    if provider is None:
        ch.error("Model provider not configured on server. Set OPENAI_API_KEY to enable walkthroughs.")
        return

    try:
        raw = provider.complete_json(WALKTHROUGH_SYSTEM, prompt, WALKTHROUGH_MAX_TOKENS, WALKTHROUGH_TEMPERATURE)
    except UnparseableResponse as e:
        ch.error("Model did not return parseable JSON for walkthrough", raw=e.raw)
        return
    except ProviderError as e:
        ch.error(f"Model provider error: {e}")
        return

    answer = validate_answer(raw, retrieval)
    if answer.cannot_answer:
        ch.log("Walkthrough: no in-repo basis for answer (cannot_answer=true)")
    else:
        ch.log("Walkthrough answer (repo-scoped) ready")
    ch.send("result", {"walkthrough": answer.model_dump()})


@router.get("/api/walkthrough")
def walkthrough(
    repo: str | None = Query(None),
    question: str | None = Query(None),
    store=Depends(get_file_store),
    provider=Depends(get_model_provider),
    rule_store=Depends(get_rule_store),
):
    if not repo:
        return JSONResponse(status_code=400, content={"error": "missing repo query parameter"})
    if not question:
        return JSONResponse(status_code=400, content={"error": "missing question query parameter"})
    parsed = parse_repo_url(repo)
    if not parsed:
        return JSONResponse(status_code=400, content={"error": "invalid github repo url"})
    owner, name = parsed
    rules = rule_store.get(repo_key(owner, name))
    return stream_events(lambda ch: run_walkthrough(ch, owner, name, question, store, provider, rules))


@router.get("/api/file")
def get_file(repo: str | None = Query(None), path: str | None = Query(None), store=Depends(get_file_store)):
    """
    Full, untruncated content of one file on the default branch.
    """
    if not repo or not path:
        return JSONResponse(status_code=400, content={"error": "missing repo or path query parameter"})
    parsed = parse_repo_url(repo)
    if not parsed:
        return JSONResponse(status_code=400, content={"error": "invalid github repo url"})
    owner, name = parsed
    t0 = time.time()
    try:
        branch = store.get_default_branch(owner, name)
        content = decode(store.get_file_content(owner, name, path, branch))
    except NotFound:
        return JSONResponse(status_code=404, content={"error": "file not found"})
    except Exception as e:
        print(f"[file] repo={owner}/{name} path={path} error={type(e).__name__}: {e}")
        return JSONResponse(status_code=500, content={"error": str(e) or type(e).__name__})
    print(f"[file] repo={owner}/{name} path={path} chars={len(content)} in {(time.time() - t0)*1000:.1f} ms")
    return {"path": path, "content": content}
