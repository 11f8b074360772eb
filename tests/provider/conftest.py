import pytest

from vkcci.providers.cci import CCIProvider


@pytest.fixture()
async def provider(fake_cci, settings, credential):
    provider = await CCIProvider.create(settings, credential=credential)
    fake_cci.requests.clear()  # only the project's creation, not interesting
    async with provider:
        yield provider


@pytest.fixture()
def pod():
    return {
        'apiVersion': 'v1',
        'kind': 'Pod',
        'metadata': {'name': 'myapp', 'namespace': 'default'},
        'spec': {'containers': [{'name': 'main', 'image': 'nginx'}]},
    }
