"""Abstract base class for Jira transports.

Every call is dispatched asynchronously and returns a Future; callers unwrap
it with cats_jira.faults.claim.
"""

from abc import ABC, abstractmethod
from concurrent.futures import Future

from cats_jira.models import CimProject, CreatedIssue, Field, Issue, Project, SearchPage, Transition


class JiraTransport(ABC):
    @abstractmethod
    def get_all_projects(self) -> "Future[list[Project]]": ...

    @abstractmethod
    def get_create_issue_metadata(self, project_keys: list[str]) -> "Future[list[CimProject]]": ...

    @abstractmethod
    def get_fields(self) -> "Future[list[Field]]": ...

    @abstractmethod
    def create_issue(self, payload: dict) -> "Future[CreatedIssue]": ...

    @abstractmethod
    def search_jql(
        self,
        jql: str,
        max_results: int,
        start_at: int,
        fields: list[str] | None = None,
    ) -> "Future[SearchPage]": ...

    @abstractmethod
    def get_transitions(self, url: str) -> "Future[list[Transition]]": ...

    @abstractmethod
    def transition(self, issue: Issue, transition_id: int) -> "Future[None]": ...

    @abstractmethod
    def close(self) -> None:
        """Release the connection. Must be called exactly once."""
