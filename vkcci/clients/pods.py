"""
The pods' CRUD calls to the remote API, with no translation of the pods.

All pods live in one remote project, regardless of their namespaces.
The namespaces' translation is the caller's job (see `structs.namespaces`).
"""
import urllib.parse
from typing import Any, List, Optional

import aiohttp

from vkcci.clients import api, auth, errors
from vkcci.helpers import typedefs
from vkcci.structs import bodies, configuration


def get_url(project: str, name: Optional[str] = None) -> str:
    url = f'/api/v1/namespaces/{urllib.parse.quote(project, safe="")}/pods'
    if name is not None:
        url += f'/{urllib.parse.quote(name, safe="")}'
    return url


async def create_pod(
        *,
        body: bodies.RawPod,
        context: auth.APIContext,
        settings: configuration.ProviderSettings,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> None:
    await api.post(
        url=get_url(settings.remote.project),
        payload=body,
        context=context,
        settings=settings,
        timeout=timeout,
        logger=logger,
    )


async def replace_pod(
        *,
        body: bodies.RawPod,
        context: auth.APIContext,
        settings: configuration.ProviderSettings,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> None:
    """
    Replace the whole pod (not patch it). The pod is identified by its body.
    """
    await api.put(
        url=get_url(settings.remote.project),
        payload=body,
        context=context,
        settings=settings,
        timeout=timeout,
        logger=logger,
    )


async def delete_pod(
        *,
        name: str,
        context: auth.APIContext,
        settings: configuration.ProviderSettings,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> None:
    await api.delete(
        url=get_url(settings.remote.project, name),
        context=context,
        settings=settings,
        timeout=timeout,
        logger=logger,
    )


async def read_pod(
        *,
        name: str,
        context: auth.APIContext,
        settings: configuration.ProviderSettings,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> bodies.RawPod:
    body: bodies.RawPod = await api.get(
        url=get_url(settings.remote.project, name),
        context=context,
        settings=settings,
        timeout=timeout,
        logger=logger,
    )
    return body


async def list_pods(
        *,
        context: auth.APIContext,
        settings: configuration.ProviderSettings,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> List[bodies.RawPod]:
    """
    List all the pods of the project, regardless of their original namespaces.

    The remote API replies either with a plain JSON list of pods, or with a
    ``PodList`` object with the pods in its ``items`` field. Both are accepted.
    """
    rsp: Any = await api.get(
        url=get_url(settings.remote.project),
        context=context,
        settings=settings,
        timeout=timeout,
        logger=logger,
    )
    if isinstance(rsp, list):
        items = rsp
    elif isinstance(rsp, dict):
        items = rsp.get('items') or []
    else:
        raise errors.TransportError(f"The remote API replied with an unexpected listing: {rsp!r}")
    if not isinstance(items, list):
        raise errors.TransportError(f"The remote API replied with unexpected items: {items!r}")

    for item in items:
        if not isinstance(item, dict) or not isinstance(item.get('metadata', {}), dict):
            raise errors.TransportError(f"The remote API listed an unexpected pod: {item!r}")
        if isinstance(rsp, dict) and isinstance(rsp.get('kind'), str):
            item.setdefault('kind', rsp['kind'][:-4] if rsp['kind'][-4:] == 'List' else rsp['kind'])
        if isinstance(rsp, dict) and 'apiVersion' in rsp:
            item.setdefault('apiVersion', rsp['apiVersion'])
    return items
