"""
FastAPI application exposing /api/analyze, /api/walkthrough, /api/file and /api/rules.
"""
import os
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from .config import load_env  # noqa: E402
load_env()
from .analyze import router as analyze_router
from .github_store import GitHubFileStore
from .llm import get_provider
from .ratelimit import RateLimiter, RateLimitMiddleware
from .retrieval.rules import RuleStore
from .rules_api import router as rules_router
from .walkthrough import router as walkthrough_router

# Built UI: <repo_root>/client/dist unless FRONTEND_DIR is set.
REPO_ROOT = Path(__file__).resolve().parents[1]
_frontend_env = os.getenv("FRONTEND_DIR", "")
FRONTEND_DIR = Path(_frontend_env).resolve() if _frontend_env else (REPO_ROOT / "client" / "dist")
INDEX_HTML = FRONTEND_DIR / "index.html"


def create_app(file_store=None, model_provider=None, rule_store=None, rate_limiter=None, serve_frontend=True) -> FastAPI:
    """
    Build the app. Collaborators default to the GitHub store, the OpenAI provider (None
    without OPENAI_API_KEY), a fresh rule table and an env-configured rate limiter.
    """
    app = FastAPI()
    app.state.file_store = file_store if file_store is not None else GitHubFileStore.from_env()
    app.state.model_provider = model_provider if model_provider is not None else get_provider()
    app.state.rule_store = rule_store if rule_store is not None else RuleStore()
    app.state.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter.from_env()

    app.add_middleware(RateLimitMiddleware, limiter=app.state.rate_limiter)
    # Allow CORS for all origins (for front-end usage)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(walkthrough_router)
    app.include_router(analyze_router)
    app.include_router(rules_router)

    if serve_frontend and INDEX_HTML.exists():
        print(f"[info] Serving UI from: {FRONTEND_DIR}")
        app.mount("/assets", StaticFiles(directory=str(FRONTEND_DIR / "assets"), check_dir=False), name="assets")

        @app.get("/")
        def serve_index():
            return FileResponse(str(INDEX_HTML))

    return app


app = create_app()
