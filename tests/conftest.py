import asyncio
import dataclasses
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import aiohttp.web
import pytest
from aiohttp.test_utils import TestServer

from vkcci.clients.auth import APIContext
from vkcci.structs.configuration import ProviderSettings
from vkcci.structs.credentials import Credential


def pytest_configure(config):
    # Warnings from the testing tools out of our control should not fail the tests.
    config.addinivalue_line('filterwarnings', 'ignore::DeprecationWarning:pythonjsonlogger')


@pytest.fixture()
def logger():
    return logging.getLogger('vkcci.tests')


@pytest.fixture()
def credential():
    return Credential(access_key='AK123', secret_key='SK456', region='cn-north-1', service='cci')


#
# A fake remote API: the real HTTP server with a minimal in-memory implementation.
# Reasons:
# 1. We test the signed requests as they go over the wire, not the mocks of them.
# 2. No external calls must be made under any circumstances.
#    The unit-tests must be fully isolated from the environment.
#

@dataclasses.dataclass(frozen=True)
class RecordedRequest:
    method: str
    path: str
    headers: Dict[str, str]
    body: bytes

    @property
    def data(self) -> Any:
        return json.loads(self.body) if self.body else None


@dataclasses.dataclass(frozen=True)
class ScriptedResponse:
    status: int = 200
    payload: Any = None
    text: Optional[str] = None
    delay: float = 0


class FakeCCI:
    """
    A remote API with one or many projects, and the pods in them.

    Sample usage::

        async def test_me(fake_cci):
            fake_cci.script('get', '/api/v1/namespaces/proj-1/pods', status=500)
            ...
            assert fake_cci.requests[0].method == 'GET'
    """

    def __init__(self) -> None:
        super().__init__()
        self.requests: List[RecordedRequest] = []
        self.projects: Dict[str, Dict[str, Any]] = {}
        self.scripts: Dict[Tuple[str, str], List[ScriptedResponse]] = {}

    def script(self, method: str, path: str, **kwargs: Any) -> None:
        """ Override the next reply to this method+path (consumed once). """
        self.scripts.setdefault((method.upper(), path), []).append(ScriptedResponse(**kwargs))

    def add_pod(self, project: str, pod: Dict[str, Any]) -> None:
        self.projects.setdefault(project, {})[pod['metadata']['name']] = pod

    async def handle(self, request: aiohttp.web.Request) -> aiohttp.web.StreamResponse:
        body = await request.read()
        self.requests.append(RecordedRequest(
            method=request.method,
            path=request.path,
            headers=dict(request.headers),
            body=body,
        ))

        scripts = self.scripts.get((request.method, request.path))
        if scripts:
            scripted = scripts.pop(0)
            if scripted.delay:
                await asyncio.sleep(scripted.delay)
            if scripted.text is not None:
                return aiohttp.web.Response(status=scripted.status, text=scripted.text)
            return aiohttp.web.json_response(scripted.payload, status=scripted.status)

        parts = request.path.strip('/').split('/')
        data = json.loads(body) if body else None
        if parts[:3] == ['api', 'v1', 'namespaces'] and len(parts) == 3 and request.method == 'POST':
            name = data['metadata']['name']
            if name in self.projects:
                return _status(409, f"namespaces {name!r} already exists")
            self.projects[name] = {}
            return aiohttp.web.json_response(data, status=201)
        if parts[:3] == ['api', 'v1', 'namespaces'] and len(parts) >= 5 and parts[4] == 'pods':
            pods = self.projects.get(parts[3])
            if pods is None:
                return _status(404, f"namespaces {parts[3]!r} not found")
            if len(parts) == 5 and request.method == 'GET':
                return aiohttp.web.json_response(list(pods.values()))
            if len(parts) == 5 and request.method == 'POST':
                if data['metadata']['name'] in pods:
                    return _status(409, f"pods {data['metadata']['name']!r} already exists")
                pods[data['metadata']['name']] = data
                return aiohttp.web.json_response(data, status=201)
            if len(parts) == 5 and request.method == 'PUT':
                if data['metadata']['name'] not in pods:
                    return _status(404, f"pods {data['metadata']['name']!r} not found")
                pods[data['metadata']['name']] = data
                return aiohttp.web.json_response(data)
            if len(parts) == 6 and request.method == 'GET':
                if parts[5] not in pods:
                    return _status(404, f"pods {parts[5]!r} not found")
                return aiohttp.web.json_response(pods[parts[5]])
            if len(parts) == 6 and request.method == 'DELETE':
                if parts[5] not in pods:
                    return _status(404, f"pods {parts[5]!r} not found")
                return aiohttp.web.json_response(pods.pop(parts[5]))
        return _status(404, "the path is not served")


def _status(code: int, message: str) -> aiohttp.web.Response:
    payload = {'apiVersion': 'v1', 'kind': 'Status', 'status': 'Failure', 'code': code, 'message': message}
    return aiohttp.web.json_response(payload, status=code)


@pytest.fixture()
async def fake_cci():
    fake = FakeCCI()
    app = aiohttp.web.Application()
    app.router.add_route('*', '/{tail:.*}', fake.handle)
    server = TestServer(app)
    await server.start_server()
    fake.url = str(server.make_url('')).rstrip('/')
    try:
        yield fake
    finally:
        await server.close()


@pytest.fixture()
def settings(fake_cci):
    settings = ProviderSettings()
    settings.remote.endpoint = fake_cci.url
    settings.remote.project = 'proj-1'
    return settings


@pytest.fixture()
async def context(settings, credential):
    context = APIContext(server=settings.remote.endpoint, credential=credential)
    async with context:
        yield context
