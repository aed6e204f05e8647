"""
Model provider: JSON completions and embeddings through langchain_openai.
"""
import json
import time
from typing import Any, Dict, List, Optional

from langchain_openai import ChatOpenAI, OpenAIEmbeddings

from .config import DEFAULT_EMBED_MODEL, DEFAULT_LLM_MODEL, env_str
from .errors import ProviderError, UnparseableResponse

# the OpenAI client retries transient failures itself with exponential backoff
CHAT_MAX_RETRIES = 2
EMBED_MAX_RETRIES = 0


def parse_json_response(text: str) -> Dict[str, Any]:
    """
    Parse model output as a JSON object; if that fails, retry on the outermost {...} span.
    """
    text = text or ""
    try:
        data = json.loads(text)
    except ValueError:
        data = None
        start = text.find("{")
        end = text.rfind("}")
        if start != -1 and end > start:
            try:
                data = json.loads(text[start:end + 1])
            except ValueError:
                data = None
    if not isinstance(data, dict):
        raise UnparseableResponse(text)
    return data


def _message_text(msg) -> str:
    content = getattr(msg, "content", msg)
    if isinstance(content, list):
        # content blocks
        return "".join(c.get("text", "") if isinstance(c, dict) else str(c) for c in content)
    return content if isinstance(content, str) else str(content or "")


class OpenAIProvider:
    """
    Chat completion + embedding provider. Completions get up to 3 attempts from
    the client; embeddings get one, since rerank falls back to lexical order.
    """

    def __init__(self, api_key: str, model: Optional[str] = None, embed_model: Optional[str] = None):
        self.api_key = api_key
        self.model = model or DEFAULT_LLM_MODEL
        self.embed_model = embed_model or DEFAULT_EMBED_MODEL
        self._embeddings: Optional[OpenAIEmbeddings] = None

    def _chat(self, max_tokens: int, temperature: float) -> ChatOpenAI:
        return ChatOpenAI(model=self.model, api_key=self.api_key, max_tokens=max_tokens,
                          temperature=temperature, max_retries=CHAT_MAX_RETRIES)

    def _embedder(self) -> OpenAIEmbeddings:
        if self._embeddings is None:
            self._embeddings = OpenAIEmbeddings(model=self.embed_model, api_key=self.api_key,
                                                max_retries=EMBED_MAX_RETRIES)
        return self._embeddings

    def complete_text(self, system_prompt: str, user_prompt: str, max_tokens: int = 1500, temperature: float = 0.0) -> str:
        llm = self._chat(max_tokens, temperature)
        messages = [("system", system_prompt), ("human", user_prompt)]
        t0 = time.time()
        try:
            msg = llm.invoke(messages)
        except Exception as e:
            print(f"[llm] invoke failed: {type(e).__name__}: {e}")
            raise ProviderError(f"{type(e).__name__}: {e}") from e
        text = _message_text(msg)
        print(f"[llm] model={self.model} answered in {(time.time() - t0)*1000:.1f} ms, len={len(text)}")
        return text

    def complete_json(self, system_prompt: str, user_prompt: str, max_tokens: int = 1500, temperature: float = 0.0) -> Dict[str, Any]:
        return parse_json_response(self.complete_text(system_prompt, user_prompt, max_tokens, temperature))

    def embed(self, texts: List[str]) -> List[List[float]]:
        return self._embedder().embed_documents(texts)


def get_provider() -> Optional[OpenAIProvider]:
    key = env_str("OPENAI_API_KEY")
    if not key:
        print("[warn] OPENAI_API_KEY is not set; model calls will fail until it is configured.")
        return None
    return OpenAIProvider(key, model=env_str("LLM_MODEL"), embed_model=env_str("EMBED_MODEL"))
