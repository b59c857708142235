"""Resolve user-supplied names against what the Jira server reports."""

import logging
import threading
from collections.abc import Callable, Iterable

from cats_jira.faults import AmbiguousFault, NotFoundFault
from cats_jira.models import Field, Issue, IssueType, Transition

logger = logging.getLogger(__name__)


class _Duplicate:
    """Cache entry for a name that more than one field carries."""

    def __repr__(self) -> str:
        return "DUPLICATE"


DUPLICATE = _Duplicate()


def match_issue_type(name: str, types: Iterable[IssueType]) -> IssueType:
    """Case-insensitive exact match; the first match wins."""
    wanted = name.lower()
    for issue_type in types:
        if issue_type.name.lower() == wanted:
            return issue_type
    raise NotFoundFault(f"No issue type matching {name}")


def match_transition(name: str, transitions: Iterable[Transition]) -> Transition:
    wanted = name.lower()
    for transition in transitions:
        if transition.name.lower() == wanted:
            return transition
    raise NotFoundFault(f"No transition matching {name}")


def match_issue(issue_id: int, issues: Iterable[Issue]) -> Issue:
    for issue in issues:
        if issue.id == issue_id:
            return issue
    raise NotFoundFault(f"No issue matching ID {issue_id}")


class FieldCache:
    """Field metadata by name, fetched once on first lookup.

    loader returns the server's full field list. Names carried by more than
    one field map to DUPLICATE and can never be looked up.
    """

    def __init__(self, loader: Callable[[], Iterable[Field]]) -> None:
        self._loader = loader
        self._lock = threading.Lock()
        self._entries: dict[str, Field | _Duplicate] | None = None

    def _populated(self) -> dict[str, Field | _Duplicate]:
        entries = self._entries
        if entries is None:
            with self._lock:
                if self._entries is None:
                    built: dict[str, Field | _Duplicate] = {}
                    for field in self._loader():
                        built[field.name] = DUPLICATE if field.name in built else field
                    logger.debug("Cached %d field names", len(built))
                    self._entries = built
                entries = self._entries
        return entries

    def lookup(self, name: str) -> Field:
        entry = self._populated().get(name)
        if entry is None:
            raise NotFoundFault(f"Unknown field name '{name}' (was this field added to Jira?)")
        if isinstance(entry, _Duplicate):
            raise AmbiguousFault(f"Field name '{name}' is not unique")
        return entry
