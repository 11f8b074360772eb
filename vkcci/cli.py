import asyncio
import functools
from typing import Any, Callable, Coroutine, Optional

import click
import yaml

from vkcci.engines import loggers
from vkcci.providers import cci, errors
from vkcci.structs import configuration, credentials
from vkcci.utilities import loaders


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @click.option('--log-refkey', type=str)
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                log_prefix: Optional[bool] = False,
                log_refkey: Optional[str] = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


def provider_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to load the settings & credentials in all commands the same way."""
    @click.option('-c', '--config', 'config_path', type=click.Path(exists=True, dir_okay=False))
    @click.option('--project', type=str)
    @click.option('--endpoint', type=str)
    @click.option('--insecure', is_flag=True)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(config_path: Optional[str],
                project: Optional[str],
                endpoint: Optional[str],
                insecure: bool,
                *args: Any, **kwargs: Any) -> Any:
        settings, creds = loaders.load_settings(config_path)
        if project:
            settings.remote.project = project
        if endpoint:
            settings.remote.endpoint = endpoint
        if insecure:
            settings.networking.insecure = True
        return fn(*args, settings=settings, creds=creds, **kwargs)

    return wrapper


@click.version_option(prog_name='vkcci')
@click.group(name='vkcci', context_settings=dict(
    auto_envvar_prefix='VKCCI',
))
def main() -> None:
    pass


@main.command()
@logging_options
@provider_options
def pods(settings: configuration.ProviderSettings, creds: Any) -> None:
    """ List the pods of the project with their cluster namespaces. """
    for pod in _run(_list_pods(settings, creds)):
        metadata = pod.get('metadata', {})
        phase = pod.get('status', {}).get('phase', 'Unknown')
        click.echo(f"{metadata.get('namespace', '')}/{metadata.get('name', '')} {phase}")


@main.command()
@logging_options
@provider_options
def node(settings: configuration.ProviderSettings, creds: Any) -> None:
    """ Show the virtual node's status as reported to the cluster. """
    status = _run(_node_status(settings, creds))
    click.echo(yaml.safe_dump(status, sort_keys=False), nl=False)


async def _list_pods(settings: configuration.ProviderSettings, creds: Any) -> Any:
    credential = loaders.load_credential(settings, access_key=creds.get('access_key'),
                                         secret_key=creds.get('secret_key'))
    async with await cci.CCIProvider.create(settings, credential=credential) as provider:
        return await provider.get_pods()


async def _node_status(settings: configuration.ProviderSettings, creds: Any) -> Any:
    credential = loaders.load_credential(settings, access_key=creds.get('access_key'),
                                         secret_key=creds.get('secret_key'))
    async with await cci.CCIProvider.create(settings, credential=credential) as provider:
        return {
            'capacity': {key: str(val) for key, val in provider.capacity().items()},
            'addresses': provider.node_addresses(),
            'daemonEndpoints': provider.node_daemon_endpoints(),
            'conditions': provider.node_conditions(),
            'operatingSystem': provider.operating_system(),
        }


def _run(coro: Coroutine[Any, Any, Any]) -> Any:
    try:
        return asyncio.run(coro)
    except (credentials.LoginError, errors.InitError) as e:
        raise click.ClickException(str(e)) from e
