"""
Core data types for the retrieval workflow: tree entries, candidates, scored files and results.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Optional, TypeVar

from ..config import DEFAULT_MAX_BYTES, DEFAULT_MAX_FILES

T = TypeVar("T")


def path_depth(path: str) -> int:
    """Number of '/'-separated segments; 'a.js' is 1, 'src/a.js' is 2."""
    return len(path.split("/"))


@dataclass(frozen=True)
class TreeEntry:
    """
    One entry of a recursive repository tree listing.
    """
    path: str
    kind: str  # 'blob' | 'tree'
    size_hint: Optional[int] = None


@dataclass
class RuleSet:
    """
    Per-repository path-substring overrides. `allow` wins over `deny`.
    """
    allow: List[str] = field(default_factory=list)
    deny: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"whitelist": list(self.allow), "blacklist": list(self.deny)}


@dataclass(frozen=True)
class Candidate:
    """
    A tree entry that survived filtering and is eligible for scoring.
    """
    path: str
    depth: int
    size_hint: Optional[int] = None

    @classmethod
    def from_entry(cls, entry: TreeEntry) -> "Candidate":
        return cls(path=entry.path, depth=path_depth(entry.path), size_hint=entry.size_hint)


@dataclass
class ScoredFile:
    """
    A fetched candidate with its relevance scores. When `truncated`, `content` ends with the truncation marker.
    """
    path: str
    content: str
    byte_size: int
    lexical_score: float
    truncated: bool = False
    semantic_score: Optional[float] = None
    final_score: Optional[float] = None

    @property
    def depth(self) -> int:
        return path_depth(self.path)


@dataclass
class RetrievedFile:
    path: str
    content: str
    truncated: bool = False
    byte_size: int = 0
    score: Optional[float] = None


@dataclass
class RetrievalResult:
    """
    The files handed to prompt assembly; also the ground truth for citation checks.
    `failure` records why retrieval produced nothing when the repository could not be resolved.
    """
    files: List[RetrievedFile] = field(default_factory=list)
    total_bytes: int = 0
    failure: Optional[str] = None

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]

    def get(self, path: str) -> Optional[RetrievedFile]:
        for f in self.files:
            if f.path == path:
                return f
        return None


@dataclass(frozen=True)
class SelectionLimits:
    max_files: int = DEFAULT_MAX_FILES
    max_bytes: int = DEFAULT_MAX_BYTES


@dataclass
class Outcome(Generic[T]):
    """
    Success/failure variant returned by `attempt`, so callers branch on `ok`
    instead of catching exceptions.
    """
    ok: bool
    value: Optional[T] = None
    error: Optional[BaseException] = None


def attempt(fn: Callable[..., T], *args: Any, **kwargs: Any) -> Outcome[T]:
    try:
        return Outcome(ok=True, value=fn(*args, **kwargs))
    except Exception as e:
        return Outcome(ok=False, error=e)
