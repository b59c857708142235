"""Tests for cats_jira.models."""

import pytest

from cats_jira.models import Issue, RepoDetails, Transition, UniformTestResult


def test_issue_frozen() -> None:
    issue = Issue(id=1, key="CATS-1", url="https://jira.example.com/rest/api/2/issue/1")
    with pytest.raises(Exception):  # ValidationError or TypeError depending on pydantic version
        issue.key = "changed"  # type: ignore[misc]


def test_issue_id_coerced_from_json_string() -> None:
    issue = Issue(id="10001", key="CATS-1", url="https://jira.example.com/rest/api/2/issue/10001")  # type: ignore[arg-type]
    assert issue.id == 10001
    assert issue.summary is None
    assert issue.status is None


def test_transitions_url() -> None:
    issue = Issue(id=1, key="CATS-1", url="https://jira.example.com/rest/api/2/issue/1")
    assert issue.transitions_url == "https://jira.example.com/rest/api/2/issue/1/transitions"


def test_transition_id_coerced() -> None:
    assert Transition(id="31", name="Close Issue").id == 31  # type: ignore[arg-type]


def test_repo_details_frozen(repo: RepoDetails) -> None:
    with pytest.raises(Exception):
        repo.branch = "other"  # type: ignore[misc]


def test_repo_details_defaults() -> None:
    repo = RepoDetails()
    assert repo.url is None
    assert repo.branch is None
    assert repo.commit is None


class TestContentHash:
    def test_stable(self, failure: UniformTestResult, repo: RepoDetails) -> None:
        assert failure.content_hash(repo) == failure.content_hash(repo)
        assert len(failure.content_hash(repo)) == 40

    def test_depends_on_branch(self, failure: UniformTestResult, repo: RepoDetails) -> None:
        other = RepoDetails(url=repo.url, branch="release", commit=repo.commit)
        assert failure.content_hash(repo) != failure.content_hash(other)

    def test_ignores_commit(self, failure: UniformTestResult, repo: RepoDetails) -> None:
        # the same failure on a later commit is still the same issue
        later = RepoDetails(url=repo.url, branch=repo.branch, commit="def456")
        assert failure.content_hash(repo) == failure.content_hash(later)

    def test_depends_on_fingerprint(self, failure: UniformTestResult, repo: RepoDetails) -> None:
        other = UniformTestResult(fingerprint="tests/test_auth.py::test_logout")
        assert failure.content_hash(repo) != other.content_hash(repo)
