"""
Keyword-based relevance: question keywords found in a file's path and content.
"""
import re
from typing import List

from .types import ScoredFile

CONTENT_CEILING = 100_000
TRUNCATION_MARKER = "\n\n...TRUNCATED..."
PATH_HIT_SCORE = 10
MAX_HITS_PER_KEYWORD = 20
MIN_KEYWORD_LEN = 4

_NON_WORD = re.compile(r"[^A-Za-z0-9_]+")


def extract_keywords(question: str) -> List[str]:
    """
    Lower-case, split on non-word runs, keep tokens longer than 3 chars (first occurrence order).
    """
    seen = set()
    out = []
    for tok in _NON_WORD.split((question or "").lower()):
        if len(tok) >= MIN_KEYWORD_LEN and tok not in seen:
            seen.add(tok)
            out.append(tok)
    return out


def truncate_content(content: str, ceiling: int = CONTENT_CEILING) -> str:
    if len(content) > ceiling:
        return content[:ceiling] + TRUNCATION_MARKER
    return content


def strip_marker(content: str) -> str:
    return content[:-len(TRUNCATION_MARKER)]


def lexical_score(path: str, content: str, keywords: List[str]) -> int:
    path_lower = path.lower()
    content_lower = content.lower()
    score = 0
    for k in keywords:
        if k in path_lower:
            score += PATH_HIT_SCORE
    for k in keywords:
        score += min(content_lower.count(k), MAX_HITS_PER_KEYWORD)
    return score


def score_file(path: str, raw_content: str, keywords: List[str]) -> ScoredFile:
    """
    Truncate then score one fetched file. `byte_size` is the UTF-8 size of what will be sent.
    """
    content = truncate_content(raw_content)
    truncated = len(raw_content) > CONTENT_CEILING
    score = lexical_score(path, content, keywords)
    return ScoredFile(
        path=path,
        content=content,
        byte_size=len(content.encode("utf-8")),
        lexical_score=score,
        truncated=truncated,
        final_score=score,
    )


def lexical_order(files: List[ScoredFile]) -> List[ScoredFile]:
    """Sort by lexical score descending, shallower path first on ties."""
    return sorted(files, key=lambda f: (-f.lexical_score, f.depth))
