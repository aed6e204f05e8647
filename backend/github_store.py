"""
GitHub REST client used as the repository file store.
"""
import base64
import time
from typing import Callable, List, Optional, TypeVar
from urllib.parse import quote

import httpx

from .config import env_str
from .errors import FileStoreError, NotFound, RateLimited
from .retrieval.types import TreeEntry

T = TypeVar("T")

GITHUB_API_URL = "https://api.github.com"
RETRY_ATTEMPTS = 3
RETRY_BACKOFF = 0.3


def with_retry(
    fn: Callable[[], T],
    attempts: int = RETRY_ATTEMPTS,
    backoff: float = RETRY_BACKOFF,
    sleep: Callable[[float], None] = time.sleep,
    retry_on: tuple = (RateLimited, FileStoreError),
) -> T:
    """
    Call `fn` up to `attempts` times, sleeping backoff * 2**i between tries.
    Only idempotent reads go through here. Non-transient FileStoreErrors are not retried.
    """
    last: Optional[Exception] = None
    for i in range(attempts):
        try:
            return fn()
        except retry_on as e:
            if isinstance(e, FileStoreError) and not e.transient:
                raise
            last = e
            if i < attempts - 1:
                sleep(backoff * (2 ** i))
    raise last


def _raise_for_status(resp: httpx.Response, what: str) -> None:
    code = resp.status_code
    if code < 400:
        return
    if code == 404:
        raise NotFound(f"{what} not found")
    if code == 429 or (code == 403 and resp.headers.get("x-ratelimit-remaining") == "0"):
        retry_after = resp.headers.get("retry-after")
        raise RateLimited(retry_after=float(retry_after) if retry_after and retry_after.isdigit() else None)
    if code in (401, 403):
        raise NotFound(f"{what} not accessible (HTTP {code})")
    raise FileStoreError(f"{what}: HTTP {code}", status_code=code, transient=code >= 500)


class GitHubFileStore:
    """
    Reads repository metadata, trees and file contents through the GitHub API.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
        timeout: float = 20.0,
    ):
        self.base_url = (base_url or env_str("GITHUB_API_URL", GITHUB_API_URL)).rstrip("/")
        headers = {"Accept": "application/vnd.github+json"}
        if token:
            headers["Authorization"] = f"token {token}"
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)
        self._headers = headers
        self._sleep = sleep

    @classmethod
    def from_env(cls) -> "GitHubFileStore":
        return cls(token=env_str("GITHUB_TOKEN"))

    def close(self) -> None:
        self._client.close()

    def _get_json(self, url: str, what: str, params: Optional[dict] = None, retry: bool = True):
        def call():
            try:
                resp = self._client.get(url, headers=self._headers, params=params)
            except httpx.TransportError as e:
                raise FileStoreError(f"{what}: {type(e).__name__}: {e}", transient=True) from e
            _raise_for_status(resp, what)
            return resp.json()

        if not retry:
            return call()
        return with_retry(call, sleep=self._sleep)

    def _repo_url(self, owner: str, name: str) -> str:
        return f"{self.base_url}/repos/{quote(owner, safe='')}/{quote(name, safe='')}"

    def get_default_branch(self, owner: str, name: str) -> str:
        data = self._get_json(self._repo_url(owner, name), f"repository {owner}/{name}")
        return (data or {}).get("default_branch") or "main"

    def list_tree(self, owner: str, name: str, ref: str) -> List[TreeEntry]:
        url = f"{self._repo_url(owner, name)}/git/trees/{quote(ref, safe='')}"
        data = self._get_json(url, f"tree {owner}/{name}@{ref}", params={"recursive": "1"})
        if (data or {}).get("truncated"):
            print(f"[github] tree listing truncated for {owner}/{name}@{ref}")
        entries = []
        for t in (data or {}).get("tree") or []:
            path = t.get("path")
            if not isinstance(path, str):
                continue
            size = t.get("size")
            entries.append(TreeEntry(path=path, kind=t.get("type", "blob"), size_hint=size if isinstance(size, int) else None))
        return entries

    def get_file_content(self, owner: str, name: str, path: str, ref: Optional[str] = None) -> bytes:
        url = f"{self._repo_url(owner, name)}/contents/{quote(path)}"
        params = {"ref": ref} if ref else None
        data = self._get_json(url, f"file {path}", params=params)
        return _decode_content(data, path)

    def get_readme(self, owner: str, name: str) -> Optional[str]:
        """README text, or None when the repository has none."""
        try:
            data = self._get_json(f"{self._repo_url(owner, name)}/readme", "readme", retry=False)
            return _decode_content(data, "README").decode("utf-8", errors="replace")
        except NotFound:
            return None

    def get_languages(self, owner: str, name: str) -> List[str]:
        data = self._get_json(f"{self._repo_url(owner, name)}/languages", "languages", retry=False)
        return list((data or {}).keys()) if isinstance(data, dict) else []


def _decode_content(data, path: str) -> bytes:
    if not isinstance(data, dict) or data.get("type", "file") != "file":
        raise NotFound(f"{path} is not a file")
    content = data.get("content")
    encoding = data.get("encoding") or "base64"
    # files over 1 MB come back as encoding "none" with empty content
    if not content or encoding == "none":
        raise NotFound(f"{path} has no content")
    if encoding == "base64":
        return base64.b64decode(content)
    return content.encode("utf-8")
