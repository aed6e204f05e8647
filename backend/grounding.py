"""
Answer grounding: make sure a model answer only cites files that were actually supplied.

The model output is untrusted. `validate_answer` runs one pass over it:
normalize shapes, drop ungrounded sources/references, back-fill citations,
resolve `cannot_answer`, then scrub prose paragraphs that mention files the
model never saw.
"""
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .retrieval.types import RetrievalResult

EMPTY_RETRIEVAL_REASON = (
    "No files could be fetched from GitHub (possible 403 rate limit, missing GITHUB_TOKEN "
    "for private repo, or invalid repository). Configure GITHUB_TOKEN and try again."
)
NO_BASIS_REASON = "The information required to answer this question is not present in the provided repository files."
SCRUBBED_ANSWER = "Some requested components or files are not present in this repository."
SCRUBBED_REASON = "Removed references to files not present in repository."

SOURCES_BACKFILL = 5
EXCERPT_CHARS = 300

# longest extensions first so 'a.json' is not read as 'a.js'
FILE_MENTION_RE = re.compile(
    r"[A-Za-z0-9_\-./]+\.(?:json|java|jsx|tsx|cpp|html|css|php|js|ts|py|go|rb|rs|cs|md|c)(?![A-Za-z0-9_])"
)
_PARAGRAPH_SPLIT = re.compile(r"\n\n+")
_EXTENSION = re.compile(r"\.[^.]+$")


class Reference(BaseModel):
    path: str
    excerpt: str = ""


class WalkthroughAnswer(BaseModel):
    answer: str = ""
    references: List[Reference] = Field(default_factory=list)
    trace: List[str] = Field(default_factory=list)
    sources: List[str] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)
    cannot_answer: bool = False
    reason: str = ""


def empty_retrieval_answer() -> WalkthroughAnswer:
    return WalkthroughAnswer(cannot_answer=True, reason=EMPTY_RETRIEVAL_REASON)


def _as_list(value: Any) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


def _strings(value: Any) -> List[str]:
    return [v for v in _as_list(value) if isinstance(v, str)]


def mentioned_files(text: str) -> List[str]:
    """Distinct file-like tokens in order of first appearance."""
    seen = []
    for m in FILE_MENTION_RE.findall(text or ""):
        if m not in seen:
            seen.append(m)
    return seen


def scrub_prose(answer: str, grounded: set) -> tuple[str, List[str]]:
    """
    Drop every blank-line-delimited paragraph that mentions an ungrounded file token,
    unless the paragraph is itself exactly a grounded path. Returns (answer, unknown tokens).
    Substring matching is coarse and may drop a paragraph that merely resembles a filename.
    """
    unknown = [m for m in mentioned_files(answer) if m not in grounded]
    if not unknown:
        return answer, []
    paras = _PARAGRAPH_SPLIT.split(answer)
    kept = [p for p in paras if not any(u in p for u in unknown) or p.strip() in grounded]
    return "\n\n".join(kept).strip(), unknown


def validate_answer(model_answer: Optional[Dict[str, Any]], retrieval: RetrievalResult) -> WalkthroughAnswer:
    """
    Turn a raw model answer into a WalkthroughAnswer whose sources and references
    are all paths of `retrieval`.
    """
    if not retrieval.files:
        return empty_retrieval_answer()

    raw = model_answer if isinstance(model_answer, dict) else {}
    available = retrieval.paths
    grounded = set(available)
    explicit_cannot = raw.get("cannot_answer") is True

    answer = raw.get("answer") if isinstance(raw.get("answer"), str) else ""
    reason = raw.get("reason") if isinstance(raw.get("reason"), str) else ""
    trace = _strings(raw.get("trace"))
    missing = _strings(raw.get("missing"))

    sources = [s for s in _as_list(raw.get("sources")) if isinstance(s, str) and s in grounded]
    references = []
    for r in _as_list(raw.get("references")):
        if isinstance(r, dict) and isinstance(r.get("path"), str) and r["path"] in grounded:
            excerpt = r.get("excerpt")
            references.append(Reference(path=r["path"], excerpt=excerpt if isinstance(excerpt, str) else ""))

    if not sources and not explicit_cannot:
        sources = available[:SOURCES_BACKFILL]

    if not references and sources and not explicit_cannot:
        first = retrieval.get(sources[0])
        if first is not None:
            references.append(Reference(path=first.path, excerpt=(first.content or "")[:EXCERPT_CHARS]))

    if explicit_cannot or (not references and not answer.strip()):
        print(f"[grounding] cannot_answer=true explicit={explicit_cannot}")
        return WalkthroughAnswer(
            answer="", references=[], trace=[], sources=sources, missing=[],
            cannot_answer=True, reason=reason or NO_BASIS_REASON,
        )

    result = WalkthroughAnswer(
        answer=answer, references=references, trace=trace, sources=sources,
        missing=missing, cannot_answer=False, reason=reason,
    )
    return scrub_answer(result, grounded)


def scrub_answer(result: WalkthroughAnswer, grounded: set) -> WalkthroughAnswer:
    if not result.answer:
        return result
    text, unknown = scrub_prose(result.answer, grounded)
    if not unknown:
        return result
    if not text:
        text = SCRUBBED_ANSWER
    missing = list(result.missing)
    for u in unknown:
        concept = _EXTENSION.sub("", u)
        if concept not in missing:
            missing.append(concept)
    print(f"[grounding] scrubbed unknown_files={unknown}")
    return result.model_copy(update={
        "answer": text,
        "missing": missing,
        "cannot_answer": False,
        "reason": result.reason or SCRUBBED_REASON,
    })
