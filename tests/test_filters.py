from backend.retrieval.filters import filter_candidates, scoring_window
from backend.retrieval.types import RuleSet, TreeEntry


def _tree(*paths, kind="blob"):
    return [TreeEntry(path=p, kind=kind) for p in paths]


def test_keeps_only_source_blobs():
    tree = _tree("src/app.js", "logo.png", "Makefile", "README.md") + _tree("src", kind="tree")
    assert [c.path for c in filter_candidates(tree)] == ["src/app.js", "README.md"]


def test_empty_tree_is_not_an_error():
    assert filter_candidates([]) == []


def test_skips_vendor_and_build_dirs():
    tree = _tree("node_modules/x/index.js", "dist/bundle.js", "lib/__pycache__/a.py", "lib/a.py")
    assert [c.path for c in filter_candidates(tree)] == ["lib/a.py"]


def test_allow_rule_overrides_builtin_skip():
    tree = _tree("vendor/ours/core.go", "vendor/theirs/x.go")
    rules = RuleSet(allow=["vendor/ours/"])
    assert [c.path for c in filter_candidates(tree, rules)] == ["vendor/ours/core.go"]


def test_allow_wins_over_deny():
    tree = _tree("src/gen/api.ts", "src/gen/other.ts", "src/main.ts")
    rules = RuleSet(allow=["api.ts"], deny=["src/gen/"])
    assert [c.path for c in filter_candidates(tree, rules)] == ["src/gen/api.ts", "src/main.ts"]


def test_candidate_depth():
    c = filter_candidates(_tree("a/b/c.py"))[0]
    assert c.depth == 3


def test_scoring_window_prefers_top_level_then_larger():
    tree = [
        TreeEntry("deep/nested/x.py", "blob", 10),
        TreeEntry("small.py", "blob", 5),
        TreeEntry("big.py", "blob", 500),
        TreeEntry("src/mid.py", "blob", 50),
    ]
    window = scoring_window(filter_candidates(tree), 3)
    assert [c.path for c in window] == ["big.py", "small.py", "src/mid.py"]
