import asyncio
import collections.abc
import itertools
import json
from typing import Any, Mapping, Optional

import aiohttp
from multidict import CIMultiDict

from vkcci.clients import auth, errors, signing
from vkcci.helpers import typedefs
from vkcci.structs import configuration

CONTENT_TYPE = 'application/json; charset=utf-8'


async def request(
        method: str,
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.ProviderSettings,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> errors.Response:
    """
    Sign & send one request, and return the fully read response of any status.

    The HTTP statuses are not interpreted here: it is the caller's job to check
    them (see :func:`errors.check_response`). Only the failures to build, sign,
    send, or receive the request/response are raised as `TransportError`.
    """
    if '://' not in url:
        url = context.server.rstrip('/') + '/' + url.lstrip('/')

    if timeout is None:
        timeout = aiohttp.ClientTimeout(
            total=settings.networking.request_timeout,
            sock_connect=settings.networking.connect_timeout,
        )

    try:
        body = b'' if payload is None else json.dumps(payload).encode('utf-8')
    except (TypeError, ValueError) as e:  # ValueError for the circular references.
        raise errors.TransportError(f"The payload is not serializable: {e}") from e

    backoffs = settings.networking.error_backoffs
    backoffs = backoffs if isinstance(backoffs, collections.abc.Iterable) else [backoffs]
    count = len(backoffs) + 1 if isinstance(backoffs, collections.abc.Sized) else None
    backoff: Optional[float]
    for retry, backoff in enumerate(itertools.chain(backoffs, [None]), start=1):
        idx = f"#{retry}/{count}" if count is not None else f"#{retry}"
        what = f"{method.upper()} {url}"

        # Re-sign on every attempt: the signature is bound to the time of sending.
        prepared = signing.Request(method=method.upper(), url=url, body=body)
        prepared.headers.update(headers or {})
        prepared.headers['Content-Type'] = CONTENT_TYPE
        try:
            signing.sign(prepared, context.credential)
        except signing.SigningError as e:
            raise errors.TransportError(f"Signing the request failed: {what} -> {e}") from e

        try:
            if retry > 1:
                logger.debug(f"Request attempt {idx}: {what}")

            async with context.session.request(
                method=prepared.method,
                url=prepared.url,
                data=prepared.body if payload is not None else None,
                headers=CIMultiDict(prepared.headers),
                timeout=timeout,
            ) as response:
                data = await response.read()
                result = errors.Response(status=response.status, body=data, headers=dict(response.headers))

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            if backoff is None:  # i.e. the last or the only attempt.
                logger.error(f"Request attempt {idx} failed; escalating: {what} -> {e!r}")
                raise errors.TransportError(f"Request failed: {what} -> {e!r}", attempts=retry) from e
            else:
                logger.error(f"Request attempt {idx} failed; will retry: {what} -> {e!r}")
                await asyncio.sleep(backoff)  # non-awakable! but still cancellable.
        else:
            if retry > 1:
                logger.debug(f"Request attempt {idx} succeeded: {what}")
            return result

    raise RuntimeError("Broken retryable routine.")  # impossible, but needed for type-checking.


async def get(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.ProviderSettings,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> Any:
    response = await request(
        method='get',
        url=url,
        context=context,
        settings=settings,
        timeout=timeout,
        logger=logger,
    )
    return errors.parse_response(response)


async def post(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.ProviderSettings,
        payload: Optional[object] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> errors.Response:
    response = await request(
        method='post',
        url=url,
        payload=payload,
        context=context,
        settings=settings,
        timeout=timeout,
        logger=logger,
    )
    errors.check_response(response)
    return response


async def put(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.ProviderSettings,
        payload: Optional[object] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> errors.Response:
    response = await request(
        method='put',
        url=url,
        payload=payload,
        context=context,
        settings=settings,
        timeout=timeout,
        logger=logger,
    )
    errors.check_response(response)
    return response


async def delete(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.ProviderSettings,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> errors.Response:
    response = await request(
        method='delete',
        url=url,
        context=context,
        settings=settings,
        timeout=timeout,
        logger=logger,
    )
    errors.check_response(response)
    return response
