import functools
import textwrap

import click.testing
import pytest

from vkcci.cli import main


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner):
    return functools.partial(runner.invoke, main)


@pytest.fixture(autouse=True)
def configure(mocker):
    return mocker.patch('vkcci.engines.loggers.configure')


@pytest.fixture()
def list_pods(mocker):
    return mocker.patch('vkcci.cli._list_pods')


@pytest.fixture()
def node_status(mocker):
    return mocker.patch('vkcci.cli._node_status')


@pytest.fixture()
def config_path(tmp_path):
    path = tmp_path / 'settings.yaml'
    path.write_text(textwrap.dedent("""
        remote:
          endpoint: https://cci.example.com
          project: proj-1
        credentials:
          access_key: AK123
          secret_key: SK456
    """))
    return str(path)
