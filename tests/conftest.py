"""Shared test fixtures."""

from concurrent.futures import Future

import pytest

from cats_jira.models import (
    CimProject,
    CreatedIssue,
    Field,
    Issue,
    IssueType,
    Project,
    RepoDetails,
    SearchPage,
    Transition,
    UniformTestResult,
)
from cats_jira.settings import CatsSettings
from cats_jira.transport.base import JiraTransport

JIRA_URL = "https://jira.example.com"


def done(value) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future


def failed(exc: BaseException) -> Future:
    future: Future = Future()
    future.set_exception(exc)
    return future


def make_issue(n: int) -> Issue:
    return Issue(id=10000 + n, key=f"CATS-{n}", url=f"{JIRA_URL}/rest/api/2/issue/{10000 + n}")


CATS_FIELDS = [
    Field(id="summary", name="Summary"),
    Field(id="customfield_10100", name="CATS Repository", custom=True),
    Field(id="customfield_10101", name="CATS Branch", custom=True),
    Field(id="customfield_10102", name="CATS Commit", custom=True),
    Field(id="customfield_10103", name="CATS Hash", custom=True),
]


class FakeTransport(JiraTransport):
    """In-memory transport returning completed futures and recording calls."""

    def __init__(
        self,
        issues: list[Issue] | None = None,
        fields: list[Field] | None = None,
        issue_types: list[IssueType] | None = None,
        transitions: list[Transition] | None = None,
    ) -> None:
        self.issues = issues or []
        self.fields = CATS_FIELDS if fields is None else fields
        self.issue_types = issue_types or [IssueType(id="1", name="Bug"), IssueType(id="3", name="Task")]
        self.transitions = transitions or [Transition(id=2, name="Close Issue"), Transition(id=5, name="Resolve Issue")]
        self.searches: list[tuple[str, int, int]] = []
        self.created: list[dict] = []
        self.applied: list[tuple[str, int]] = []
        self.metadata_keys: list[list[str]] = []
        self.field_fetches = 0
        self.close_calls = 0

    def get_all_projects(self) -> Future:
        return done([Project(id="10000", key="CATS", name="CATS", url=f"{JIRA_URL}/rest/api/2/project/10000")])

    def get_create_issue_metadata(self, project_keys: list[str]) -> Future:
        self.metadata_keys.append(project_keys)
        if project_keys != ["CATS"]:
            return done([])
        return done([CimProject(id="10000", key="CATS", name="CATS", issue_types=self.issue_types)])

    def get_fields(self) -> Future:
        self.field_fetches += 1
        return done(self.fields)

    def create_issue(self, payload: dict) -> Future:
        self.created.append(payload)
        return done(CreatedIssue(id=10999, key="CATS-999", url=f"{JIRA_URL}/rest/api/2/issue/10999"))

    def search_jql(self, jql: str, max_results: int, start_at: int, fields: list[str] | None = None) -> Future:
        self.searches.append((jql, max_results, start_at))
        page = self.issues[start_at : start_at + max_results]
        return done(SearchPage(issues=page, start_at=start_at, max_results=max_results, total=len(self.issues)))

    def get_transitions(self, url: str) -> Future:
        return done(self.transitions)

    def transition(self, issue: Issue, transition_id: int) -> Future:
        self.applied.append((issue.key, transition_id))
        return done(None)

    def close(self) -> None:
        self.close_calls += 1


@pytest.fixture
def settings() -> CatsSettings:
    return CatsSettings(  # type: ignore[call-arg]
        url=JIRA_URL,
        user="cats",
        password="s3cret",
        project="CATS",
    )


@pytest.fixture
def repo() -> RepoDetails:
    return RepoDetails(url="https://git.example.com/cats.git", branch="main", commit="abc123")


@pytest.fixture
def failure() -> UniformTestResult:
    return UniformTestResult(
        summary="test_login fails",
        description="AssertionError: expected 200, got 500",
        fingerprint="tests/test_auth.py::test_login",
    )
