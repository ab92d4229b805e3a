"""
models.py

pydantic models for the persisted config document and the api payloads.

the document is a tree: workspaces -> collections -> requests, with environments
kept as a flat sibling list. nested sequences are optional on disk and default to
empty so older files keep loading.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from .settings import CONFIG_VERSION


class Variable(BaseModel):
    key: str
    value: str


class Request(BaseModel):
    id: str
    name: str
    req_type: str = Field(..., description="discriminator, e.g. http or curl import")
    method: str = Field(..., description="http verb as free text, not validated")
    curl: str = Field(..., description="opaque request definition, usually a curl command")


class Collection(BaseModel):
    id: str
    name: str
    requests: list[Request] = Field(default_factory=list)


class Workspace(BaseModel):
    id: str
    name: str
    collections: list[Collection] = Field(default_factory=list)


class Environment(BaseModel):
    id: str
    name: str
    variables: list[Variable] = Field(default_factory=list)


class CallistoConfig(BaseModel):
    version: str
    workspaces: list[Workspace] = Field(default_factory=list)
    environments: list[Environment] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> CallistoConfig:
        return cls(version=CONFIG_VERSION)


class HttpRequest(BaseModel):
    method: str
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | None = None


class HttpResponse(BaseModel):
    status: int
    status_text: str
    headers: dict[str, str]
    body: str
    time: int = Field(..., description="elapsed milliseconds")
    size: int = Field(..., description="raw body size in bytes")


class AddWorkspaceRequest(BaseModel):
    name: str


class CollectionNameRequest(BaseModel):
    name: str


class RequestFieldsRequest(BaseModel):
    name: str
    req_type: str
    method: str
    curl: str


class EnvironmentRequest(BaseModel):
    name: str
    variables: list[Variable] = Field(default_factory=list)
