"""
Budgeted packing: admit ranked files under file-count and byte caps, then top up with manifests.
"""
from typing import Callable, Iterable, List, Optional

from .lexical import strip_marker
from .types import RetrievalResult, RetrievedFile, ScoredFile, SelectionLimits

MANIFEST_FILES = ("package.json", "requirements.txt", "pyproject.toml")


def pack_by_budget(ranked: List[ScoredFile], limits: SelectionLimits) -> RetrievalResult:
    """
    Walk the ranking in order and stop at the first file that would break either cap.
    Ranking order wins over packing efficiency, so smaller later files are not pulled forward.
    """
    result = RetrievalResult()
    for f in ranked:
        if len(result.files) >= limits.max_files:
            break
        if result.total_bytes + f.byte_size > limits.max_bytes:
            break
        result.files.append(RetrievedFile(
            path=f.path,
            content=strip_marker(f.content) if f.truncated else f.content,
            truncated=f.truncated,
            byte_size=f.byte_size,
            score=f.final_score if f.final_score is not None else f.lexical_score,
        ))
        result.total_bytes += f.byte_size
    print(f"[pack] admitted={len(result.files)}/{len(ranked)} bytes={result.total_bytes} "
          f"max_files={limits.max_files} max_bytes={limits.max_bytes}")
    return result


def add_manifests(
    result: RetrievalResult,
    limits: SelectionLimits,
    fetch: Callable[[str], Optional[str]],
    manifests: Iterable[str] = MANIFEST_FILES,
) -> RetrievalResult:
    """
    Fetch each top-level manifest not already admitted and add it if it exists and still fits.
    `fetch` returns None (or raises) when the manifest is absent.
    """
    for name in manifests:
        if result.get(name) is not None:
            continue
        if len(result.files) >= limits.max_files:
            break
        try:
            content = fetch(name)
        except Exception as e:
            print(f"[pack] manifest={name} unavailable ({type(e).__name__})")
            continue
        if content is None:
            continue
        size = len(content.encode("utf-8"))
        if result.total_bytes + size > limits.max_bytes:
            print(f"[pack] manifest={name} bytes={size} does not fit")
            continue
        result.files.append(RetrievedFile(path=name, content=content, truncated=False, byte_size=size))
        result.total_bytes += size
    return result
