"""
Parse GitHub repository references into (owner, name).
"""
import re
from typing import Optional, Tuple

_URL_RE = re.compile(r"github\.com/(.+?)/(.+?)(?:$|/|\.)", re.IGNORECASE)
_LOOSE_RE = re.compile(r"(?:github\.com/)?(.+?)/(.+?)(?:$|/|\.)", re.IGNORECASE)


def parse_repo_url(repo: str) -> Optional[Tuple[str, str]]:
    """'https://github.com/owner/name[.git|/...]' -> ('owner', 'name'); None when not a GitHub URL."""
    m = _URL_RE.search(repo or "")
    return (m.group(1), m.group(2)) if m else None


def parse_repo_ref(repo: str) -> Optional[Tuple[str, str]]:
    """Like parse_repo_url, but also accepts a bare 'owner/name'."""
    m = _URL_RE.search(repo or "") or _LOOSE_RE.search(repo or "")
    return (m.group(1), m.group(2)) if m else None


def repo_key(owner: str, name: str) -> str:
    return f"{owner}/{name}"
