"""
Prompt assembly for walkthrough answers and repository analysis.
"""
from typing import List, Optional

from .retrieval.types import RetrievalResult

WALKTHROUGH_SYSTEM = (
    "You are a disciplined repository code analyst. Use ONLY the repository files provided in the user's message.\n"
    'Return ONLY valid JSON matching the schema: {"answer":"string","references":[{"path":"string","excerpt":"string"}],'
    '"trace":["string"],"sources":["string"],"missing":["string"],"cannot_answer":boolean,"reason":"string"}.\n'
    "Guidelines:\n"
    "- Answer with what IS present in the provided files.\n"
    "- Never mention a file path that is not EXACTLY one of the provided file paths.\n"
    "- For each requested feature or concept that is NOT present (e.g. authentication, payment, database), "
    "add a short phrase to 'missing' and do not invent implementation details.\n"
    "- Do not invent code, files, libraries or frameworks.\n"
    "- If some relevant information exists, set cannot_answer=false and list absent concepts in 'missing'.\n"
    "- Set cannot_answer=true only when nothing in the files helps with any part of the question; then "
    "answer='', references=[], trace=[], missing=[] and give a concise reason.\n"
    "- Give at least one reference and list every file you drew from in 'sources'.\n"
    "- Reference excerpts must be exact substrings of the file content.\n"
    "- Keep the answer concise and scoped to the repository contents."
)

ANALYSIS_SYSTEM = "You output strict JSON only."


def build_walkthrough_prompt(question: str, retrieval: RetrievalResult) -> str:
    parts = [
        f'You are an expert code reviewer and software engineer. The user asked: "{question}"\n\n',
        "Use the provided repository files to answer the question in depth. When referencing code, include "
        "file paths and short code snippets. If you trace a request or function across files, show the "
        "step-by-step trace. If the files do not contain the answer, say explicitly what is missing.\n\n",
        "Repository files:\n",
    ]
    for f in retrieval.files:
        note = " (truncated)" if f.truncated else ""
        parts.append(f"--- {f.path}{note}\n{f.content}\n\n")
    return "".join(parts)


def build_analysis_prompt(repo_url: str, readme: Optional[str], languages: List[str], files: List[dict]) -> str:
    deps = "\n\n".join(f"--- {f['path']}\n{f['content']}" for f in files)
    return (
        f"You are a repository analysis agent. Analyze the repository at {repo_url} and respond with ONLY valid "
        'JSON matching the schema: {"project_summary":string,"primary_languages":[string],'
        '"key_frameworks":[string],"possible_use_cases":[string],"difficulty_rating":string}.\n\n'
        f"Languages reported by GitHub: {', '.join(languages) if languages else 'unknown'}\n\n"
        f"README:\n{readme or ''}\n\n"
        f"Dependency files:\n{deps}"
    )
