"""
File selection for one question: tree listing -> filter -> lexical scoring -> optional
semantic re-rank -> budgeted packing with manifest guarantee.
"""
from __future__ import annotations
import concurrent.futures
import time
from typing import Callable, List, Optional, Protocol, Sequence

from ..config import FETCH_CONCURRENCY, SCORING_WINDOW, env_int
from ..errors import RepoAnalystError
from .filters import filter_candidates, scoring_window
from .lexical import extract_keywords, score_file
from .pack import add_manifests, pack_by_budget
from .rerank import Embedder, rerank
from .types import Candidate, Outcome, RetrievalResult, RuleSet, ScoredFile, SelectionLimits, TreeEntry, attempt


class FileStore(Protocol):
    def get_default_branch(self, owner: str, name: str) -> str: ...

    def list_tree(self, owner: str, name: str, ref: str) -> Sequence[TreeEntry]: ...

    def get_file_content(self, owner: str, name: str, path: str, ref: str) -> bytes: ...


def decode(data: bytes | str) -> str:
    if isinstance(data, str):
        return data
    return data.decode("utf-8", errors="replace")


def _emit(logger: Optional[Callable[[str], None]], message: str) -> None:
    if logger is None:
        return
    try:
        logger(message)
    except Exception:
        # progress messages carry no control meaning
        pass


def fetch_and_score(
    store: FileStore,
    owner: str,
    name: str,
    ref: str,
    candidates: List[Candidate],
    keywords: List[str],
    logger: Optional[Callable[[str], None]] = None,
    workers: int | None = None,
) -> List[ScoredFile]:
    """
    Fetch every candidate concurrently and score the ones that arrived.
    A failed fetch removes only that file. Output keeps candidate order.
    """
    workers = workers or env_int("FETCH_CONCURRENCY", FETCH_CONCURRENCY)
    if not candidates:
        return []

    def fetch(c: Candidate) -> Outcome[bytes]:
        return attempt(store.get_file_content, owner, name, c.path, ref)

    with concurrent.futures.ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        outcomes = list(pool.map(fetch, candidates))

    scored: List[ScoredFile] = []
    failed = 0
    for c, out in zip(candidates, outcomes):
        if not out.ok:
            failed += 1
            _emit(logger, f"Skipped {c.path} due to fetch error")
            continue
        scored.append(score_file(c.path, decode(out.value), keywords))
    print(f"[select:fetch] fetched={len(scored)} failed={failed} workers={workers}")
    return scored


def select_files(
    owner: str,
    name: str,
    question: str,
    limits: SelectionLimits | None = None,
    *,
    store: FileStore,
    embedder: Optional[Embedder] = None,
    rules: Optional[RuleSet] = None,
    logger: Optional[Callable[[str], None]] = None,
    window: int | None = None,
) -> RetrievalResult:
    """
    Pick the files most relevant to `question` within `limits`.
    Repository resolution failures produce an empty result with `failure` set instead of raising.
    """
    limits = limits or SelectionLimits()
    window = window if window is not None else env_int("SCORING_WINDOW", SCORING_WINDOW)
    t0 = time.time()
    try:
        branch = store.get_default_branch(owner, name)
        _emit(logger, f"Determined default branch: {branch}")
        tree = store.list_tree(owner, name, branch)
    except RepoAnalystError as e:
        msg = f"Error while building file list: {e}"
        print(f"[select] repo={owner}/{name} error={type(e).__name__}: {e}")
        _emit(logger, msg)
        return RetrievalResult(failure=msg)

    candidates = filter_candidates(tree, rules)
    window_cands = scoring_window(candidates, window)
    keywords = extract_keywords(question)
    print(f"[select] repo={owner}/{name} ref={branch} tree={len(tree)} candidates={len(candidates)} "
          f"window={len(window_cands)} keywords={keywords[:8]}")

    scored = fetch_and_score(store, owner, name, branch, window_cands, keywords, logger)
    ranked = rerank(question, scored, embedder)
    result = pack_by_budget(ranked, limits)

    def fetch_manifest(path: str) -> Optional[str]:
        out = attempt(store.get_file_content, owner, name, path, branch)
        return decode(out.value) if out.ok else None

    add_manifests(result, limits, fetch_manifest)
    took = (time.time() - t0) * 1000
    print(f"[select] files={len(result.files)} bytes={result.total_bytes} took={took:.0f}ms")
    return result
