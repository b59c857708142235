"""High level Jira client for CATS.

Every call blocks until the server answers and raises a JiraFault on error.
Values left as None are taken from the configured settings.

The client must be closed when no longer needed, on every exit path. Use it
as a context manager:

    with JiraClient(get_settings()) as client:
        client.list_unresolved_issues(None, None, repo)
"""

import logging
import threading
from concurrent.futures import Future
from typing import TypeVar

from cats_jira.faults import NotFoundFault, claim
from cats_jira.models import CreatedIssue, Issue, IssueType, Project, RepoDetails, Transition, UniformTestResult
from cats_jira.query import CATS_BRANCH, CATS_COMMIT, CATS_HASH, CATS_REPOSITORY, build_unresolved_query
from cats_jira.schema import FieldCache, match_issue, match_issue_type, match_transition
from cats_jira.search import ISSUES_REQUEST_SIZE, TOTAL_ISSUES_LIMIT, accumulate
from cats_jira.settings import CatsSettings, Defaults, Key
from cats_jira.transport.base import JiraTransport
from cats_jira.transport.rest import RestTransport

# Anonymous connections work but can't create or close anything.
ALLOW_ANON = False

T = TypeVar("T")

logger = logging.getLogger(__name__)


class JiraClient:
    def __init__(
        self,
        settings: CatsSettings,
        url: str | None = None,
        user: str | None = None,
        password: str | None = None,
        transport: JiraTransport | None = None,
    ) -> None:
        self._defaults = Defaults(settings)
        self._url = self._defaults.with_default(Key.url, url)
        if transport is None:
            transport = self._connect(settings, user, password)
        self._transport = transport
        self._fields = FieldCache(lambda: self._claim(self._transport.get_fields()))
        self._close_lock = threading.Lock()
        self._closed = False

    def _connect(self, settings: CatsSettings, user: str | None, password: str | None) -> RestTransport:
        user = self._defaults.with_default(Key.user, user)
        password = self._defaults.credential(Key.password, password, allow_anonymous=ALLOW_ANON)
        if password is None:
            logger.info("Connecting anonymously to %s", self._url)
        else:
            logger.info("Connecting to %s as %s", self._url, user)
        return RestTransport(self._url, user=user, password=password, timeout=settings.timeout)

    def __enter__(self) -> "JiraClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self._transport.close()

    def _claim(self, future: "Future[T]") -> T:
        return claim(future, self._url)

    def list_projects(self) -> list[Project]:
        return self._claim(self._transport.get_all_projects())

    def list_issue_types(self, project: str | None = None) -> list[IssueType]:
        """Issue types that can be created in the project."""
        key = self._defaults.with_default(Key.project, project)
        projects = self._claim(self._transport.get_create_issue_metadata([key]))
        if not projects:
            raise NotFoundFault(f"Could not find project {key}")
        return list(projects[0].issue_types)

    def create_issue(
        self,
        project: str | None,
        issue_type: str | None,
        repo: RepoDetails,
        result: UniformTestResult,
    ) -> CreatedIssue:
        """Create an issue for a test failure.

        The issue type is matched against the project's known types and the
        CATS custom fields are filled from the repository details.
        """
        key = self._defaults.with_default(Key.project, project)
        type_ = match_issue_type(self._defaults.with_default(Key.issue_type, issue_type), self.list_issue_types(key))
        fields = {
            "project": {"key": key},
            "issuetype": {"id": type_.id},
            "summary": self._defaults.with_default(Key.summary, result.summary),
            "description": self._defaults.with_default(Key.description, result.description),
            self._fields.lookup(CATS_REPOSITORY).id: self._defaults.optional(Key.repository, repo.url) or None,
            self._fields.lookup(CATS_BRANCH).id: self._defaults.optional(Key.branch, repo.branch) or None,
            self._fields.lookup(CATS_COMMIT).id: self._defaults.optional(Key.commit, repo.commit) or None,
            self._fields.lookup(CATS_HASH).id: result.content_hash(repo),
        }
        created = self._claim(self._transport.create_issue({"fields": fields}))
        logger.info("Created %s", created.key)
        return created

    def list_unresolved_issues(
        self,
        project: str | None,
        issue_type: str | None,
        repo: RepoDetails,
    ) -> list[Issue]:
        """Unresolved issues of the type in the project, filtered by repository and branch when known."""
        key = self._defaults.with_default(Key.project, project)
        type_ = match_issue_type(self._defaults.with_default(Key.issue_type, issue_type), self.list_issue_types(key))
        jql = build_unresolved_query(
            key,
            self._defaults.with_default(Key.role),
            type_.name,
            repository=self._defaults.optional(Key.repository, repo.url),
            branch=self._defaults.optional(Key.branch, repo.branch),
        )
        logger.debug("Searching: %s", jql)

        def fetch_page(start_at: int, max_results: int) -> list[Issue]:
            return self._claim(self._transport.search_jql(jql, max_results, start_at)).issues

        return accumulate(fetch_page, page_size=ISSUES_REQUEST_SIZE, limit=TOTAL_ISSUES_LIMIT)

    def list_transitions(self, url: str) -> list[Transition]:
        return self._claim(self._transport.get_transitions(url))

    def close_issue(self, issue: Issue, transition_name: str | None = None) -> None:
        """Apply the named transition (closing, usually) to the issue."""
        name = self._defaults.with_default(Key.transition, transition_name)
        transition = match_transition(name, self.list_transitions(issue.transitions_url))
        self._claim(self._transport.transition(issue, transition.id))
        logger.info("Applied '%s' to %s", transition.name, issue.key)

    def close_issue_by_id(
        self,
        project: str | None,
        issue_type: str | None,
        repo: RepoDetails,
        issue_id: int,
        transition_name: str | None = None,
    ) -> None:
        issue = match_issue(issue_id, self.list_unresolved_issues(project, issue_type, repo))
        self.close_issue(issue, transition_name)
