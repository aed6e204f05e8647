"""
Semantic re-ranking: blend question/file embedding similarity with the lexical score.
Degrade to lexical-only order if embeddings are unavailable or fail.
"""
import time
from typing import List, Optional, Protocol, Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from .lexical import lexical_order
from .types import ScoredFile, attempt

EMBED_PREFIX_CHARS = 2000
W_LEXICAL = 0.2
W_SEMANTIC = 100.0


class Embedder(Protocol):
    def embed(self, texts: List[str]) -> Sequence[Sequence[float]]: ...


def _similarities(embedder: Embedder, question: str, files: List[ScoredFile]) -> np.ndarray:
    texts = [question] + [f.content[:EMBED_PREFIX_CHARS] for f in files]
    vectors = embedder.embed(texts)
    if vectors is None or len(vectors) != len(texts):
        got = None if vectors is None else len(vectors)
        raise ValueError(f"embedding count mismatch: expected {len(texts)} got {got}")
    mat = np.asarray(vectors, dtype=float)
    if mat.ndim != 2 or mat.shape[1] == 0:
        raise ValueError(f"malformed embedding matrix shape={mat.shape}")
    # zero vectors yield similarity 0
    return cosine_similarity(mat[:1], mat[1:])[0]


def rerank(question: str, files: List[ScoredFile], embedder: Optional[Embedder] = None) -> List[ScoredFile]:
    """
    Return files ordered by `lexical*0.2 + cosine*100` (shallower path first on ties).
    Skipped when there is no embedder, no files, or the question is empty or only
    whitespace; any embedding error falls back to pure lexical order with no
    partial blending.
    """
    if embedder is None or not (question or "").strip() or not files:
        return lexical_order(files)

    start = time.time()
    outcome = attempt(_similarities, embedder, question, files)
    if not outcome.ok:
        print(f"[rerank] fallback=lexical error={type(outcome.error).__name__}: {outcome.error}")
        for f in files:
            f.semantic_score = None
            f.final_score = f.lexical_score
        return lexical_order(files)

    for f, sim in zip(files, outcome.value):
        f.semantic_score = float(sim)
        f.final_score = f.lexical_score * W_LEXICAL + float(sim) * W_SEMANTIC
    result = sorted(files, key=lambda f: (-f.final_score, f.depth))
    took = time.time() - start
    print(f"[rerank] took={took:.3f}s files={len(result)}")
    return result
