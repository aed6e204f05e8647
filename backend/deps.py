"""
FastAPI dependency providers. Collaborators live on app.state so tests can swap them.
"""
from fastapi import Request

from .retrieval.rules import RuleStore


def get_file_store(request: Request):
    return request.app.state.file_store


def get_model_provider(request: Request):
    return request.app.state.model_provider


def get_rule_store(request: Request) -> RuleStore:
    return request.app.state.rule_store
