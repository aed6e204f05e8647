from backend.ratelimit import RateLimiter
from backend.repo_ref import parse_repo_ref, parse_repo_url
from backend.retrieval.rules import RuleStore


def test_rule_store_is_per_instance_and_copies():
    a, b = RuleStore(), RuleStore()
    a.set("o/r", allow=["lib/"], deny=["gen/"])
    assert b.get("o/r") is None
    rules = a.get("o/r")
    rules.allow.append("mutated")
    assert a.get("o/r").allow == ["lib/"]


def test_rule_store_payload_normalization():
    store = RuleStore()
    rules = store.set_from_payload("o/r", {"whitelist": ["a/", 3, ""], "blacklist": None})
    assert rules.allow == ["a/"] and rules.deny == []


def test_rate_limiter_window_resets():
    now = [0.0]
    limiter = RateLimiter(window_ms=1000, max_requests=2, clock=lambda: now[0])
    assert limiter.hit("ip") and limiter.hit("ip")
    assert not limiter.hit("ip")
    assert limiter.hit("other")
    now[0] = 1.5
    assert limiter.hit("ip")


def test_parse_repo_url_variants():
    assert parse_repo_url("https://github.com/octo/demo") == ("octo", "demo")
    assert parse_repo_url("https://github.com/octo/demo.git") == ("octo", "demo")
    assert parse_repo_url("https://github.com/octo/demo/tree/main") == ("octo", "demo")
    assert parse_repo_url("octo/demo") is None
    assert parse_repo_ref("octo/demo") == ("octo", "demo")
