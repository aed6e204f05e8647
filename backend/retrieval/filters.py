"""
Candidate filtering: narrow a repository tree to source-like files outside vendor/build directories.
"""
from typing import Iterable, List, Optional

from .types import Candidate, RuleSet, TreeEntry

SOURCE_EXTENSIONS = (
    ".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".go", ".rs", ".c", ".cpp",
    ".cs", ".rb", ".php", ".json", ".md", ".html", ".css",
)

# vendor / third-party / build output / caches
SKIP_PATTERNS = (
    "node_modules/", "vendor/", "third_party/", "site-packages/", "dist/", "build/",
    "coverage/", ".pytest_cache/", ".venv/", "__pycache__/", ".git/",
)


def is_source_path(path: str) -> bool:
    return path.endswith(SOURCE_EXTENSIONS)


def path_allowed(path: str, rules: Optional[RuleSet] = None) -> bool:
    """
    Allow-substrings keep a path unconditionally; otherwise repository deny-substrings,
    then the built-in skip patterns, drop it.
    """
    if rules is not None:
        if any(w and w in path for w in rules.allow):
            return True
        if any(b and b in path for b in rules.deny):
            return False
    return not any(p in path for p in SKIP_PATTERNS)


def filter_candidates(tree: Iterable[TreeEntry], rules: Optional[RuleSet] = None) -> List[Candidate]:
    """
    Keep blob entries with a recognized source extension that pass the path rules.
    """
    return [
        Candidate.from_entry(t)
        for t in tree
        if t.kind == "blob" and is_source_path(t.path) and path_allowed(t.path, rules)
    ]


def scoring_window(candidates: List[Candidate], window: int) -> List[Candidate]:
    """
    Structural order (top-level first, then larger files first) truncated to the
    number of candidates whose content will be fetched for scoring.
    """
    ordered = sorted(candidates, key=lambda c: (c.depth, -(c.size_hint or 0)))
    return ordered[:max(window, 0)]
