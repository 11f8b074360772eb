"""
AK/SK request signing for the remote API.

Every request is authenticated individually: there is no handshake, no session,
no token. Instead, a keyed digest (HMAC-SHA256) over a canonical representation
of the request is attached to the request's headers, together with the access
key and the scope (date, region, service) of the key used for the digest.

The remote API re-calculates the same digest with the same secret key on its
side, and compares. The signature is bound to a timestamp (``X-Sdk-Date``),
which the remote API checks against its own clock to limit the replay window.

The canonical request is::

    METHOD
    /canonical/path/
    canonical=query&string=sorted
    header1:value1
    header2:value2

    header1;header2
    hex(sha256(body))

The signing key is derived from the secret key by chaining HMACs over
the date, region, service, and a fixed terminator -- so that the derived keys
are limited in time and scope even if they leak.

The signing is deterministic: the same request with the same credential
at the same timestamp always produces the same signature.
"""
import dataclasses
import datetime
import hashlib
import hmac
import urllib.parse
from typing import List, Optional, Tuple

from multidict import CIMultiDict

from vkcci.structs import credentials

ALGORITHM = 'SDK-HMAC-SHA256'
TERMINATOR = 'sdk_request'
KEY_PREFIX = 'SDK'
DATE_HEADER = 'X-Sdk-Date'
DATE_FORMAT = '%Y%m%dT%H%M%SZ'
SHORT_DATE_FORMAT = '%Y%m%d'

# The headers which are added by the signing itself, and are not "payload" headers.
AUTH_HEADERS = frozenset({'authorization', DATE_HEADER.lower()})


class SigningError(Exception):
    """ Raised when a request cannot be signed: incomplete credentials or body. """


@dataclasses.dataclass
class Request:
    """
    A fully built request as it is going to be sent, but not sent yet.

    The body must be finalized before signing: the signature covers it.
    """
    method: str
    url: str
    headers: CIMultiDict[str] = dataclasses.field(default_factory=CIMultiDict)
    body: bytes = b''


def sign(
        request: Request,
        credential: credentials.Credential,
        *,
        now: Optional[datetime.datetime] = None,
) -> Request:
    """
    Sign the request in place (only its headers), and return it for convenience.

    Nothing is modified if the request cannot be signed.
    """
    if not credential.access_key:
        raise SigningError("The access key is empty.")
    if not credential.secret_key:
        raise SigningError("The secret key is empty.")
    if not credential.region or not credential.service:
        raise SigningError("The region & service scope is incomplete.")
    if not isinstance(request.body, bytes):
        raise SigningError(f"The body is not finalized: {type(request.body).__name__}")

    now = now if now is not None else datetime.datetime.now(datetime.timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(datetime.timezone.utc)
    timestamp = now.strftime(DATE_FORMAT)
    scope = '/'.join([now.strftime(SHORT_DATE_FORMAT), credential.region, credential.service, TERMINATOR])

    # Canonicalize first: if it fails, the headers remain untouched.
    parsed = urllib.parse.urlsplit(request.url)
    headers = CIMultiDict(request.headers)
    headers[DATE_HEADER] = timestamp
    if 'Host' not in headers:
        headers['Host'] = parsed.netloc
    canonical_headers, signed_headers = _canonical_headers(headers)
    canonical_request = '\n'.join([
        request.method.upper(),
        _canonical_path(parsed.path),
        _canonical_query(parsed.query),
        canonical_headers,
        signed_headers,
        _hexdigest(request.body),
    ])
    string_to_sign = '\n'.join([
        ALGORITHM,
        timestamp,
        scope,
        _hexdigest(canonical_request.encode('utf-8')),
    ])
    key = _derive_key(credential, now)
    signature = hmac.new(key, string_to_sign.encode('utf-8'), hashlib.sha256).hexdigest()

    request.headers[DATE_HEADER] = timestamp
    request.headers['Host'] = headers['Host']
    request.headers['Authorization'] = (
        f"{ALGORITHM} "
        f"Credential={credential.access_key}/{scope}, "
        f"SignedHeaders={signed_headers}, "
        f"Signature={signature}"
    )
    return request


def _hexdigest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _canonical_path(path: str) -> str:
    segments = [urllib.parse.quote(urllib.parse.unquote(segment), safe='~') for segment in path.split('/')]
    canonical = '/'.join(segments) or '/'
    return canonical if canonical.endswith('/') else canonical + '/'


def _canonical_query(query: str) -> str:
    pairs = urllib.parse.parse_qsl(query, keep_blank_values=True)
    quoted = sorted((urllib.parse.quote(k, safe='~'), urllib.parse.quote(v, safe='~')) for k, v in pairs)
    return '&'.join(f'{k}={v}' for k, v in quoted)


def _canonical_headers(headers: CIMultiDict[str]) -> Tuple[str, str]:
    values: List[Tuple[str, str]] = sorted(
        (name.lower(), ' '.join(value.split()))
        for name, value in headers.items()
        if name.lower() != 'authorization'
    )
    lines = ''.join(f'{name}:{value}\n' for name, value in values)
    names = ';'.join(sorted({name for name, _ in values}))
    return lines, names


def _derive_key(credential: credentials.Credential, now: datetime.datetime) -> bytes:
    key = (KEY_PREFIX + credential.secret_key).encode('utf-8')
    for part in [now.strftime(SHORT_DATE_FORMAT), credential.region, credential.service, TERMINATOR]:
        key = hmac.new(key, part.encode('utf-8'), hashlib.sha256).digest()
    return key
