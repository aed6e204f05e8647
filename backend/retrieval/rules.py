"""
Per-repository allow/deny rule table. Held by whoever builds the app and passed in, never global.
"""
import threading
from typing import Dict, Iterable, Optional

from .types import RuleSet


def _clean(patterns) -> list:
    if not isinstance(patterns, (list, tuple)):
        return []
    return [p for p in patterns if isinstance(p, str) and p]


class RuleStore:
    """
    In-memory `owner/name` -> RuleSet table. Not durable across restarts.
    """

    def __init__(self):
        self._rules: Dict[str, RuleSet] = {}
        self._lock = threading.Lock()

    def get(self, repo_key: str) -> Optional[RuleSet]:
        with self._lock:
            rules = self._rules.get(repo_key)
            if rules is None:
                return None
            return RuleSet(allow=list(rules.allow), deny=list(rules.deny))

    def set(self, repo_key: str, allow: Iterable[str] = (), deny: Iterable[str] = ()) -> RuleSet:
        rules = RuleSet(allow=_clean(list(allow)), deny=_clean(list(deny)))
        with self._lock:
            self._rules[repo_key] = rules
        return RuleSet(allow=list(rules.allow), deny=list(rules.deny))

    def set_from_payload(self, repo_key: str, payload: dict) -> RuleSet:
        """Store rules from a `{whitelist, blacklist}` payload; non-list fields become empty."""
        payload = payload if isinstance(payload, dict) else {}
        return self.set(repo_key, _clean(payload.get("whitelist")), _clean(payload.get("blacklist")))
