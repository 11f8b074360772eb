import pytest

from vkcci.cli import _list_pods, _node_status
from vkcci.engines.loggers import LogFormat
from vkcci.providers.errors import InitError


def test_help(invoke):
    result = invoke(['--help'])
    assert result.exit_code == 0
    assert 'pods' in result.output
    assert 'node' in result.output


@pytest.mark.parametrize('command', ['pods', 'node'])
def test_command_help(invoke, command):
    result = invoke([command, '--help'])
    assert result.exit_code == 0
    assert '--config' in result.output
    assert '--log-format' in result.output


def test_pods_are_printed_with_namespaces(invoke, list_pods, config_path):
    list_pods.return_value = [
        {'metadata': {'name': 'myapp', 'namespace': 'default'}, 'status': {'phase': 'Running'}},
        {'metadata': {'name': 'other', 'namespace': 'team-a'}},
    ]
    result = invoke(['pods', '-c', config_path])
    assert result.exit_code == 0, result.output
    assert result.output == 'default/myapp Running\nteam-a/other Unknown\n'


def test_settings_are_loaded_from_the_file(invoke, list_pods, config_path):
    list_pods.return_value = []
    result = invoke(['pods', '-c', config_path])
    assert result.exit_code == 0, result.output
    settings, creds = list_pods.call_args[0]
    assert settings.remote.endpoint == 'https://cci.example.com'
    assert settings.remote.project == 'proj-1'
    assert settings.networking.insecure is False
    assert creds == {'access_key': 'AK123', 'secret_key': 'SK456'}


def test_options_override_the_file(invoke, list_pods, config_path):
    list_pods.return_value = []
    result = invoke(['pods', '-c', config_path,
                     '--project', 'proj-2', '--endpoint', 'https://other.example.com', '--insecure'])
    assert result.exit_code == 0, result.output
    settings, _ = list_pods.call_args[0]
    assert settings.remote.endpoint == 'https://other.example.com'
    assert settings.remote.project == 'proj-2'
    assert settings.networking.insecure is True


def test_missing_config_file(invoke, list_pods, tmp_path):
    result = invoke(['pods', '-c', str(tmp_path / 'absent.yaml')])
    assert result.exit_code != 0
    assert not list_pods.called


def test_logging_options(invoke, list_pods, configure, config_path):
    list_pods.return_value = []
    result = invoke(['pods', '-c', config_path, '--verbose', '--log-format', 'json', '--no-log-prefix'])
    assert result.exit_code == 0, result.output
    assert configure.call_count == 1
    assert configure.call_args[1]['verbose'] is True
    assert configure.call_args[1]['debug'] is False
    assert configure.call_args[1]['log_format'] is LogFormat.JSON
    assert configure.call_args[1]['log_prefix'] is False


def test_node_status_is_printed_as_yaml(invoke, node_status, config_path):
    node_status.return_value = {
        'capacity': {'cpu': '20', 'memory': '100Gi', 'pods': '20'},
        'operatingSystem': 'Linux',
    }
    result = invoke(['node', '-c', config_path])
    assert result.exit_code == 0, result.output
    assert result.output == (
        "capacity:\n"
        "  cpu: '20'\n"
        "  memory: 100Gi\n"
        "  pods: '20'\n"
        "operatingSystem: Linux\n"
    )


def test_login_errors_fail_the_command(invoke, mocker, tmp_path):
    mocker.patch.dict('os.environ', clear=True)
    path = tmp_path / 'settings.yaml'
    path.write_text('remote: {project: proj-1}')
    result = invoke(['pods', '-c', str(path)])
    assert result.exit_code == 1
    assert result.output == 'Error: The access key is empty; set CCI_APP_KEY.\n'
    assert 'Traceback' not in result.output


@pytest.mark.parametrize('command, worker', [('pods', '_list_pods'), ('node', '_node_status')])
def test_init_errors_fail_the_command(invoke, mocker, config_path, command, worker):
    mocker.patch(f'vkcci.cli.{worker}', side_effect=InitError("Cannot ensure the project 'proj-1'"))
    result = invoke([command, '-c', config_path])
    assert result.exit_code == 1
    assert result.output == "Error: Cannot ensure the project 'proj-1'\n"


async def test_pods_listing_against_the_api(fake_cci, settings, mocker):
    mocker.patch.dict('os.environ', clear=True)
    fake_cci.add_pod('proj-1', {
        'metadata': {'name': 'myapp', 'namespace': 'proj-1',
                     'annotations': {'virtual-kubelet-namespace': 'default'}},
    })
    pods = await _list_pods(settings, {'access_key': 'AK123', 'secret_key': 'SK456'})
    assert pods == [{'metadata': {'name': 'myapp', 'namespace': 'default'}}]


async def test_node_status_against_the_api(fake_cci, settings, mocker):
    mocker.patch.dict('os.environ', clear=True)
    status = await _node_status(settings, {'access_key': 'AK123', 'secret_key': 'SK456'})
    assert status['capacity'] == {'cpu': '20', 'memory': '100Gi', 'pods': '20'}
    assert status['operatingSystem'] == 'Linux'
    assert status['daemonEndpoints'] == {'kubeletEndpoint': {'Port': 10250}}
    assert len(status['conditions']) == 5
