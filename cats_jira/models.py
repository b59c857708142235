"""Shared pydantic models, the contract between the transport, the client and main.py."""

import hashlib

from pydantic import BaseModel, ConfigDict


class Project(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    key: str  # CATS, OPS, ...
    name: str
    url: str  # REST self link


class IssueType(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class CimProject(BaseModel):
    """A project as described by the create-issue metadata."""

    model_config = ConfigDict(frozen=True)

    id: str
    key: str
    name: str
    issue_types: list[IssueType] = []


class Field(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str  # customfield_10100 or a built-in id such as "summary"
    name: str  # not unique on the server
    custom: bool = False


class Transition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str


class Issue(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    key: str  # CATS-123
    url: str  # REST self link
    summary: str | None = None
    status: str | None = None

    @property
    def transitions_url(self) -> str:
        return f"{self.url}/transitions"


class CreatedIssue(BaseModel):
    """Returned by create_issue; just what the caller needs."""

    model_config = ConfigDict(frozen=True)

    id: int
    key: str
    url: str


class SearchPage(BaseModel):
    model_config = ConfigDict(frozen=True)

    issues: list[Issue]
    start_at: int
    max_results: int
    total: int


class RepoDetails(BaseModel):
    """Where the code under test lives."""

    model_config = ConfigDict(frozen=True)

    url: str | None = None
    branch: str | None = None
    commit: str | None = None


class UniformTestResult(BaseModel):
    """A test failure as reported by CATS."""

    model_config = ConfigDict(frozen=True)

    summary: str | None = None
    description: str | None = None
    fingerprint: str  # stable identity of the failure across runs

    def content_hash(self, repo: RepoDetails) -> str:
        """Hash identifying this failure within a repository and branch.

        Stored on the issue so later runs can find it again.
        """
        text = "\n".join([repo.url or "", repo.branch or "", self.fingerprint])
        return hashlib.sha1(text.encode("utf-8")).hexdigest()
