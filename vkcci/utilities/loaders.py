"""
Loading of the provider's settings and credentials from the outer world.

The settings file is YAML, with the same groups & names as in the settings::

    remote:
      endpoint: https://cciback.cn-north-1.huaweicloud.com
      project: my-project
      region: cn-north-1
      service: cci
    networking:
      request_timeout: 30
      error_backoffs: [1, 2, 4]
    node:
      cpu: "4"
      memory: 8Gi
      pods: "110"
    credentials:
      access_key: ...
      secret_key: ...

The credentials can be (and should better be) overridden with the environment
variables ``CCI_APP_KEY`` & ``CCI_APP_SECRET`` instead of the file.
"""
import dataclasses
import os
from typing import Any, Mapping, Optional, Tuple

import yaml

from vkcci.structs import configuration, credentials

ACCESS_KEY_ENVVARS = ('CCI_APP_KEY', 'CCI_APP_KEP')  # the latter is a legacy misspelling.
SECRET_KEY_ENVVARS = ('CCI_APP_SECRET',)


def load_settings(
        path: Optional[str] = None,
) -> Tuple[configuration.ProviderSettings, Mapping[str, str]]:
    """
    Load the settings and the file-stored credentials (if any) from a YAML file.

    Without a path, the defaults are returned (with no credentials).
    """
    settings = configuration.ProviderSettings()
    if path is None:
        return settings, {}

    with open(path, encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"The settings file must contain a mapping: {path}")

    data = dict(data)
    creds = data.pop('credentials', None) or {}
    for group_name, values in data.items():
        group = getattr(settings, group_name, None)
        if group is None or not dataclasses.is_dataclass(group):
            raise ValueError(f"Unknown settings group: {group_name!r}")
        _update_group(group, group_name, values or {})

    if not isinstance(creds, dict):
        raise ValueError(f"The credentials must be a mapping: {path}")
    return settings, {str(key): str(val) for key, val in creds.items() if val is not None}


def _update_group(group: Any, group_name: str, values: Mapping[str, Any]) -> None:
    known = {field.name for field in dataclasses.fields(group)}
    for name, value in values.items():
        if name not in known:
            raise ValueError(f"Unknown setting: {group_name}.{name}")
        if name == 'error_backoffs' and isinstance(value, list):
            value = tuple(value)
        setattr(group, name, value)


def load_credential(
        settings: configuration.ProviderSettings,
        *,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
) -> credentials.Credential:
    """
    Combine the explicit credentials with the environment's overrides.

    The environment variables take precedence, as it was always in this provider.
    """
    environ = os.environ if environ is None else environ
    for name in ACCESS_KEY_ENVVARS:
        if environ.get(name):
            access_key = environ[name]
            break
    for name in SECRET_KEY_ENVVARS:
        if environ.get(name):
            secret_key = environ[name]
            break

    if not access_key:
        raise credentials.LoginError(f"The access key is empty; set {ACCESS_KEY_ENVVARS[0]}.")
    if not secret_key:
        raise credentials.LoginError(f"The secret key is empty; set {SECRET_KEY_ENVVARS[0]}.")
    return credentials.Credential(
        access_key=access_key,
        secret_key=secret_key,
        region=settings.remote.region,
        service=settings.remote.service,
    )
