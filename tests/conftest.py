import pytest

from backend.errors import NotFound
from backend.retrieval.types import TreeEntry


class FakeStore:
    """In-memory file store: `files` maps path -> text; paths in `failing` raise on fetch."""

    def __init__(self, files=None, extra_tree=(), failing=(), branch="main", resolve_error=None,
                 readme=None, languages=()):
        self.files = dict(files or {})
        self.extra_tree = list(extra_tree)
        self.failing = set(failing)
        self.branch = branch
        self.resolve_error = resolve_error
        self.readme = readme
        self.languages = list(languages)
        self.fetched = []

    def get_default_branch(self, owner, name):
        if self.resolve_error is not None:
            raise self.resolve_error
        return self.branch

    def list_tree(self, owner, name, ref):
        entries = [TreeEntry(path=p, kind="blob", size_hint=len(c)) for p, c in self.files.items()]
        return entries + self.extra_tree

    def get_file_content(self, owner, name, path, ref=None):
        self.fetched.append(path)
        if path in self.failing:
            raise RuntimeError(f"boom {path}")
        if path not in self.files:
            raise NotFound(path)
        return self.files[path].encode("utf-8")

    def get_readme(self, owner, name):
        return self.readme

    def get_languages(self, owner, name):
        return self.languages


class FakeProvider:
    """Returns a canned JSON answer; `embeddings` maps text prefix -> vector, or raise `embed_error`."""

    def __init__(self, answer=None, error=None, vectors=None, embed_error=None):
        self.answer = answer if answer is not None else {}
        self.error = error
        self.vectors = vectors
        self.embed_error = embed_error
        self.prompts = []

    def complete_json(self, system_prompt, user_prompt, max_tokens, temperature):
        self.prompts.append(user_prompt)
        if self.error is not None:
            raise self.error
        return self.answer

    def embed(self, texts):
        if self.embed_error is not None:
            raise self.embed_error
        if self.vectors is None:
            raise RuntimeError("no embeddings configured")
        return self.vectors(texts)


@pytest.fixture
def make_store():
    return FakeStore


@pytest.fixture
def make_provider():
    return FakeProvider
