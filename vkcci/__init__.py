"""
The main module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the package's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from vkcci.clients.errors import (
    APIError,
    APIConflictError,
    APINotFoundError,
    TransportError,
)
from vkcci.clients.projects import (
    ProjectOutcome,
)
from vkcci.clients.signing import (
    Request,
    SigningError,
    sign,
)
from vkcci.engines.loggers import (
    LogFormat,
    configure,
)
from vkcci.providers.cci import (
    CCIProvider,
)
from vkcci.providers.errors import (
    InitError,
    LifecycleError,
    PodNotFoundError,
)
from vkcci.providers.interface import (
    Provider,
)
from vkcci.structs.configuration import (
    ProviderSettings,
    RemoteSettings,
    NetworkingSettings,
    NodeSettings,
    CachingSettings,
)
from vkcci.structs.credentials import (
    Credential,
    LoginError,
)
from vkcci.structs.namespaces import (
    NAMESPACE_ANNOTATION,
    decode as decode_namespace,
    encode as encode_namespace,
)
from vkcci.structs.quantities import (
    Quantity,
)
from vkcci.utilities.loaders import (
    load_credential,
    load_settings,
)

__all__ = [
    'APIError', 'APIConflictError', 'APINotFoundError', 'TransportError',
    'ProjectOutcome',
    'Request', 'SigningError', 'sign',
    'LogFormat', 'configure',
    'CCIProvider',
    'InitError', 'LifecycleError', 'PodNotFoundError',
    'Provider',
    'ProviderSettings', 'RemoteSettings', 'NetworkingSettings', 'NodeSettings', 'CachingSettings',
    'Credential', 'LoginError',
    'NAMESPACE_ANNOTATION', 'decode_namespace', 'encode_namespace',
    'Quantity',
    'load_credential', 'load_settings',
]
