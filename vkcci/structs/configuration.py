"""
All configuration flags, options, settings to fine-tune a provider.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

The settings are consumed as they are: the provider does not re-read them
at runtime. Some of them are only used once, at the provider's creation
(e.g. the node's capacity), some are used on every request (e.g. timeouts).

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults).
The only setting without a usable default is the remote project's name.

.. seealso::
    :func:`vkcci.utilities.loaders.load_settings` for the file format.
"""
import dataclasses
from typing import Iterable, Optional, Tuple

DEFAULT_API_ENDPOINT = 'https://cciback.cn-north-1.huaweicloud.com'


@dataclasses.dataclass
class RemoteSettings:
    """
    Where the remote control plane is and how the provider is scoped in it.
    """

    endpoint: str = DEFAULT_API_ENDPOINT
    """
    The base URL of the remote control plane. All API paths are relative to it.
    """

    project: str = ''
    """
    The remote project, i.e. the only flat namespace where all the pods go.
    Created at the provider's startup if it does not exist yet.
    """

    region: str = 'cn-north-1'
    """
    The region to which the request signatures are scoped.
    """

    service: str = 'cci'
    """
    The service to which the request signatures are scoped.
    """


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = None
    """
    A timeout (in seconds) for a whole request, including the body's reading.
    If ``None``, there is no timeout (the caller should impose one if needed).
    """

    connect_timeout: Optional[float] = None
    """
    A timeout (in seconds) for establishing a connection to the remote API.
    """

    error_backoffs: Iterable[float] = ()
    """
    Backoffs (in seconds) for retrying the requests on the networking errors.

    Every backoff allows one more attempt after the sleep of that duration.
    By default, there are no retries: a request fails on the first error.
    Use :meth:`exponential` to generate a capped exponential sequence.

    Only the network-level errors are retried: the HTTP errors (4xx, 5xx)
    are not, since they are already the remote API's definitive replies.
    """

    insecure: bool = False
    """
    Skip the TLS certificate verification of the remote API. Highly unsafe!

    The certificates are verified by default. This is an explicit escape hatch
    for the endpoints with self-signed or otherwise broken certificates.
    """

    ca_path: Optional[str] = None
    """
    A path to the CA bundle to verify the remote API with (instead of the system one).
    """

    @staticmethod
    def exponential(
            *,
            initial: float = 1.0,
            factor: float = 2.0,
            cap: float = 60.0,
            attempts: int = 5,
    ) -> Tuple[float, ...]:
        """
        Build the retrying backoffs, each next one bigger, but not above the cap.

        E.g., with the defaults: ``(1, 2, 4, 8, 16)``.
        """
        if attempts < 0:
            raise ValueError(f"The number of attempts cannot be negative: {attempts!r}")
        return tuple(min(cap, initial * factor ** idx) for idx in range(attempts))


@dataclasses.dataclass
class NodeSettings:
    """
    The static facts about the virtual node as reported to the cluster.
    """

    name: str = 'virtual-kubelet'

    internal_ip: str = ''

    daemon_endpoint_port: int = 10250

    operating_system: str = 'Linux'

    cpu: str = '20'
    """
    The node's CPU capacity as a resource quantity (e.g. ``"4"`` or ``"500m"``).
    """

    memory: str = '100Gi'
    """
    The node's memory capacity as a resource quantity (e.g. ``"8Gi"``).
    """

    pods: str = '20'
    """
    How many pods can be scheduled to the node, as a resource quantity.
    """


@dataclasses.dataclass
class CachingSettings:

    ttl: float = 0.0
    """
    For how long (in seconds) the fetched pods are served from memory.

    If zero or negative (the default), every read goes to the remote API.
    Any write (create/update/delete) invalidates the cached entries anyway.
    """


@dataclasses.dataclass
class ProviderSettings:
    remote: RemoteSettings = dataclasses.field(default_factory=RemoteSettings)
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    node: NodeSettings = dataclasses.field(default_factory=NodeSettings)
    caching: CachingSettings = dataclasses.field(default_factory=CachingSettings)
