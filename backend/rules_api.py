from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .deps import get_rule_store
from .repo_ref import parse_repo_ref, parse_repo_url, repo_key
from .retrieval.types import RuleSet

router = APIRouter()


class RulesRequest(BaseModel):
    repo: Optional[str] = None
    rules: Optional[Dict[str, Any]] = None


@router.get("/api/rules")
def get_rules(repo: str | None = Query(None), rule_store=Depends(get_rule_store)):
    if not repo:
        return JSONResponse(status_code=400, content={"error": "missing repo query parameter"})
    parsed = parse_repo_url(repo)
    if not parsed:
        return JSONResponse(status_code=400, content={"error": "invalid github repo url"})
    key = repo_key(*parsed)
    rules = rule_store.get(key) or RuleSet()
    return {"repo": key, "rules": rules.to_dict()}


@router.post("/api/rules")
def set_rules(req: RulesRequest, rule_store=Depends(get_rule_store)):
    """
    Replace the allow/deny path rules for one repository (in memory only).
    """
    if not req.repo or req.rules is None:
        return JSONResponse(status_code=400, content={"error": "missing repo or rules in body"})
    parsed = parse_repo_ref(req.repo)
    if not parsed:
        return JSONResponse(status_code=400, content={"error": "invalid repo format"})
    key = repo_key(*parsed)
    rules = rule_store.set_from_payload(key, req.rules)
    print(f"[rules] repo={key} whitelist={len(rules.allow)} blacklist={len(rules.deny)}")
    return {"repo": key, "rules": rules.to_dict()}
