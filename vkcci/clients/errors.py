"""
Remote API errors.

The underlying client library (now, ``aiohttp``) can be replaced in the future.
We cannot rely on embedding its exceptions all over the code in the provider.
Hence, we have our own hierarchy of exceptions for the remote API errors.

There are two distinct families of errors:

* Transport errors: the request did not reach the remote API, or its response
  did not reach us, or the request could not even be built (e.g. signed).
  Such errors say nothing about the state of the remote resources.
* API errors: the remote API has received and processed the request,
  and has replied with an error status (4xx, 5xx). These are the remote API's
  definitive replies, and they are informative of the remote state
  (e.g. 404 means the resource is absent, 409 means it already exists).

The original errors of the client library are chained as the causes of our own
specialised errors -- for better explainability of errors in the stack traces.

Some selected statuses of the API errors are made into their own classes,
so that they could be intercepted and handled in other places of the provider.
All other statuses are raised as the base error class and are indistinguishable
from each other (except via the exception's fields).
"""
import collections.abc
import dataclasses
import json
from typing import Any, Collection, Mapping, Optional

from typing_extensions import Literal, TypedDict


class RawStatusCause(TypedDict):
    field: str
    reason: str
    message: str


class RawStatusDetails(TypedDict):
    name: str
    uid: str
    kind: str
    group: str
    causes: Collection[RawStatusCause]


class RawStatus(TypedDict):
    apiVersion: str
    kind: Literal["Status"]
    code: int
    status: Literal["Success", "Failure"]
    reason: str
    message: str
    details: RawStatusDetails


@dataclasses.dataclass(frozen=True)
class Response:
    """
    A fully read response of the remote API. The connection is released already.
    """
    status: int
    body: bytes
    headers: Mapping[str, str] = dataclasses.field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class TransportError(Exception):
    """
    The request has failed on the way to or from the remote API.
    """

    def __init__(self, message: str, *, attempts: int = 1) -> None:
        super().__init__(message)
        self.attempts = attempts


class APIError(Exception):

    def __init__(
            self,
            payload: Optional[RawStatus],
            *,
            status: int,
    ) -> None:
        message = payload.get('message') if payload else None
        super().__init__(message or f"The remote API replied with HTTP {status}.", payload)
        self._status = status
        self._payload = payload

    @property
    def status(self) -> int:
        return self._status

    @property
    def code(self) -> Optional[int]:
        return self._payload.get('code') if self._payload else None

    @property
    def message(self) -> Optional[str]:
        return self._payload.get('message') if self._payload else None

    @property
    def details(self) -> Optional[RawStatusDetails]:
        return self._payload.get('details') if self._payload else None


class APIUnauthorizedError(APIError):
    pass


class APIForbiddenError(APIError):
    pass


class APINotFoundError(APIError):
    pass


class APIConflictError(APIError):
    pass


def check_response(
        response: Response,
) -> None:
    """
    Check for specialised API errors, and raise with extended information.
    """
    if response.status >= 400:

        payload: Optional[RawStatus]
        try:
            payload = json.loads(response.body)
        except (UnicodeDecodeError, ValueError):
            payload = None

        # Better be safe: who knows which sensitive information can be dumped unless kind==Status.
        if not isinstance(payload, collections.abc.Mapping) or payload.get('kind') != 'Status':
            payload = None

        cls = (
            APIUnauthorizedError if response.status == 401 else
            APIForbiddenError if response.status == 403 else
            APINotFoundError if response.status == 404 else
            APIConflictError if response.status == 409 else
            APIError
        )
        raise cls(payload, status=response.status)


def parse_response(
        response: Response,
) -> Any:
    """
    Check the response for errors, and either raise or return the parsed data.
    """
    check_response(response)
    try:
        return json.loads(response.body)
    except (UnicodeDecodeError, ValueError) as e:
        raise TransportError(f"The remote API replied with a non-JSON body: {e}") from e
