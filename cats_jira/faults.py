"""Fault taxonomy and translation of transport failures into it."""

import socket
from concurrent.futures import Future
from typing import TypeVar

T = TypeVar("T")


class JiraFault(Exception):
    """Base class for everything this package raises on purpose."""


class ConfigFault(JiraFault):
    """A required value was neither given nor configured."""


class AuthFault(JiraFault):
    """The server rejected the credentials (HTTP 401)."""


class RemoteFault(JiraFault):
    """The server answered with an error status other than 401."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConnectivityFault(JiraFault):
    """The Jira host name could not be resolved."""

    def __init__(self, message: str, url: str | None) -> None:
        super().__init__(message)
        self.url = url


class TransportFault(JiraFault):
    """A protocol-level failure reported by the transport.

    status_code is None when the request never produced an HTTP status.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundFault(JiraFault):
    """No issue type, field, transition, project or issue matched."""


class AmbiguousFault(JiraFault):
    """A field name is carried by more than one server field."""


class TooManyResultsFault(JiraFault):
    """A search returned more issues than we are willing to hold."""

    def __init__(self, message: str, count: int) -> None:
        super().__init__(message)
        self.count = count


def _unknown_host(exc: BaseException) -> bool:
    seen: set[int] = set()
    cause = exc.__cause__ or exc.__context__
    while cause is not None and id(cause) not in seen:
        if isinstance(cause, socket.gaierror):
            return True
        seen.add(id(cause))
        cause = cause.__cause__ or cause.__context__
    return False


def claim(future: "Future[T]", url: str | None = None) -> T:
    """Wait for a transport call and return its result, translating failures.

    url is the configured Jira URL, used only in the connectivity message.
    """
    try:
        return future.result()
    except TransportFault as exc:
        if exc.status_code is None:
            raise
        if exc.status_code == 401:
            raise AuthFault("Authorisation error - check user and password") from exc
        raise RemoteFault(
            f"The REST client received an HTTP {exc.status_code} error - check Jira",
            status_code=exc.status_code,
        ) from exc
    except Exception as exc:
        if _unknown_host(exc):
            raise ConnectivityFault(f"Host at {url} is unknown - check the Jira url", url=url) from exc
        raise
