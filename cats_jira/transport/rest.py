"""Jira REST API v2 transport."""

import logging
from concurrent.futures import Future, ThreadPoolExecutor

import httpx

from cats_jira.faults import TransportFault
from cats_jira.models import CimProject, CreatedIssue, Field, Issue, IssueType, Project, SearchPage, Transition
from cats_jira.transport.base import JiraTransport

API_PATH = "/rest/api/2"

logger = logging.getLogger(__name__)


class RestTransport(JiraTransport):
    """Runs each request on a single worker thread and hands back a Future.

    The worker and the HTTP connection pool stay alive until close().
    """

    def __init__(
        self,
        url: str,
        user: str | None = None,
        password: str | None = None,
        timeout: float = 30,
    ) -> None:
        self._base = url.rstrip("/") + API_PATH
        auth = httpx.BasicAuth(user or "", password) if password is not None else None
        self._http = httpx.Client(
            auth=auth,
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="cats-jira")

    def _request(self, method: str, url: str, params: dict | None = None, body: dict | None = None) -> dict | list | None:
        try:
            response = self._http.request(method, url, params=params, json=body)
        except (httpx.ProtocolError, httpx.DecodingError) as exc:
            raise TransportFault(f"{method} {url} failed: {exc}") from exc
        if response.is_error:
            raise TransportFault(
                f"{method} {url} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise TransportFault(f"{method} {url} returned a body that is not JSON") from exc

    def _submit(self, call) -> Future:
        return self._executor.submit(call)

    def _issue_from_node(self, node: dict) -> Issue:
        fields = node.get("fields") or {}
        status = fields.get("status") or {}
        return Issue(
            id=node["id"],
            key=node["key"],
            url=node["self"],
            summary=fields.get("summary"),
            status=status.get("name"),
        )

    def get_all_projects(self) -> "Future[list[Project]]":
        def call() -> list[Project]:
            nodes = self._request("GET", f"{self._base}/project")
            return [
                Project(id=n["id"], key=n["key"], name=n["name"], url=n["self"])
                for n in nodes  # type: ignore[union-attr]
            ]

        return self._submit(call)

    def get_create_issue_metadata(self, project_keys: list[str]) -> "Future[list[CimProject]]":
        def call() -> list[CimProject]:
            data = self._request(
                "GET",
                f"{self._base}/issue/createmeta",
                params={"projectKeys": ",".join(project_keys)},
            )
            return [
                CimProject(
                    id=p["id"],
                    key=p["key"],
                    name=p["name"],
                    issue_types=[IssueType(id=t["id"], name=t["name"]) for t in p.get("issuetypes", [])],
                )
                for p in data.get("projects", [])  # type: ignore[union-attr]
            ]

        return self._submit(call)

    def get_fields(self) -> "Future[list[Field]]":
        def call() -> list[Field]:
            nodes = self._request("GET", f"{self._base}/field")
            return [
                Field(id=n["id"], name=n["name"], custom=n.get("custom", False))
                for n in nodes  # type: ignore[union-attr]
            ]

        return self._submit(call)

    def create_issue(self, payload: dict) -> "Future[CreatedIssue]":
        def call() -> CreatedIssue:
            node = self._request("POST", f"{self._base}/issue", body=payload)
            return CreatedIssue(id=node["id"], key=node["key"], url=node["self"])  # type: ignore[index]

        return self._submit(call)

    def search_jql(
        self,
        jql: str,
        max_results: int,
        start_at: int,
        fields: list[str] | None = None,
    ) -> "Future[SearchPage]":
        def call() -> SearchPage:
            body: dict = {"jql": jql, "startAt": start_at, "maxResults": max_results}
            if fields is not None:
                body["fields"] = fields
            data = self._request("POST", f"{self._base}/search", body=body)
            issues = [self._issue_from_node(n) for n in data.get("issues", [])]  # type: ignore[union-attr]
            return SearchPage(
                issues=issues,
                start_at=data.get("startAt", start_at),  # type: ignore[union-attr]
                max_results=data.get("maxResults", max_results),  # type: ignore[union-attr]
                total=data.get("total", len(issues)),  # type: ignore[union-attr]
            )

        return self._submit(call)

    def get_transitions(self, url: str) -> "Future[list[Transition]]":
        def call() -> list[Transition]:
            data = self._request("GET", url)
            return [Transition(id=t["id"], name=t["name"]) for t in data.get("transitions", [])]  # type: ignore[union-attr]

        return self._submit(call)

    def transition(self, issue: Issue, transition_id: int) -> "Future[None]":
        def call() -> None:
            self._request("POST", issue.transitions_url, body={"transition": {"id": str(transition_id)}})

        return self._submit(call)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self._http.close()
        logger.debug("Transport closed")
