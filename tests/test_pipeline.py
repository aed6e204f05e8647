from backend.errors import NotFound, RateLimited
from backend.retrieval.pipeline import select_files
from backend.retrieval.types import RuleSet, SelectionLimits, TreeEntry


def test_selects_relevant_files_within_budget(make_store):
    store = make_store({
        "auth/login.js": "function login(user) { return auth(user) }",
        "utils.js": "export const sum = (a, b) => a + b",
        "README.md": "# demo",
    })
    logs = []
    result = select_files("o", "r", "Where is auth handled?", SelectionLimits(max_files=2, max_bytes=10_000),
                          store=store, logger=logs.append)
    assert result.paths[0] == "auth/login.js"
    assert len(result.files) <= 2
    assert result.total_bytes <= 10_000
    assert "Determined default branch: main" in logs


def test_equal_scores_pick_shallower_file(make_store):
    store = make_store({"pkg/deep.js": "same", "top.js": "same"})
    result = select_files("o", "r", "unrelated question", SelectionLimits(max_files=1, max_bytes=10_000), store=store)
    assert result.paths == ["top.js"]


def test_fetch_failure_only_drops_that_file(make_store):
    store = make_store({"a.js": "alpha", "b.js": "beta"}, failing={"a.js"})
    logs = []
    result = select_files("o", "r", "beta things", store=store, logger=logs.append)
    assert result.paths == ["b.js"]
    assert "Skipped a.js due to fetch error" in logs


def test_rules_are_applied(make_store):
    store = make_store({"vendor/lib.js": "lib", "main.js": "main"})
    result = select_files("o", "r", "question", store=store, rules=RuleSet(allow=["vendor/"], deny=["main"]))
    assert result.paths == ["vendor/lib.js"]


def test_manifest_included_even_when_not_a_candidate(make_store):
    store = make_store({"app.py": "print('hi')", "requirements.txt": "fastapi\n"})
    result = select_files("o", "r", "what does app print", store=store)
    assert set(result.paths) == {"app.py", "requirements.txt"}


def test_unresolvable_repo_yields_empty_result(make_store):
    for err in (NotFound("repository o/r not found"), RateLimited()):
        logs = []
        store = make_store({"a.js": "x"}, resolve_error=err)
        result = select_files("o", "r", "q", store=store, logger=logs.append)
        assert result.files == []
        assert result.failure
        assert any(m.startswith("Error while building file list") for m in logs)


def test_broken_logger_does_not_matter(make_store):
    def logger(msg):
        raise ValueError("closed")

    result = select_files("o", "r", "q", store=make_store({"a.js": "x"}), logger=logger)
    assert result.paths == ["a.js"]


def test_scoring_window_bounds_fetches(make_store):
    store = make_store({f"f{i}.js": "x" for i in range(10)},
                       extra_tree=[TreeEntry("docs", "tree")])
    select_files("o", "r", "q", store=store, window=3)
    assert len([p for p in store.fetched if p.endswith(".js")]) == 3


def test_embedder_failure_keeps_lexical_ranking(make_store, make_provider):
    store = make_store({"auth.js": "auth", "other.js": "nothing"})
    provider = make_provider(embed_error=RuntimeError("quota"))
    result = select_files("o", "r", "auth please", store=store, embedder=provider)
    assert result.paths == ["auth.js", "other.js"]
