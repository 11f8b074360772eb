"""
The provider of a virtual node backed by the remote serverless containers (CCI).

Every pod assigned to the virtual node is created in the remote API,
and every read of the pods is served from the remote API -- the provider has
no state of its own besides the optional short-lived cache (off by default).
So, the changes made remotely (e.g. the pods' statuses) are visible instantly,
and the provider can be restarted at any time without losing anything.

The remote API has only one flat namespace per provider: the project.
The pods' true namespaces are preserved in their annotations on the way there,
and are restored on the way back (see :mod:`vkcci.structs.namespaces`).
"""
import contextlib
import datetime
import logging
from types import TracebackType
from typing import Dict, Iterator, List, Optional, Type

from vkcci.clients import auth, errors, pods, projects
from vkcci.engines import loggers
from vkcci.helpers import typedefs
from vkcci.providers.errors import InitError, LifecycleError, PodNotFoundError
from vkcci.structs import bodies, caches, configuration, credentials, namespaces, quantities

logger = logging.getLogger(__name__)

# The static conditions: there is no real health probing of the remote service.
NODE_CONDITIONS = [
    ('Ready', 'True', 'KubeletReady', "kubelet is ready."),
    ('OutOfDisk', 'False', 'KubeletHasSufficientDisk', "kubelet has sufficient disk space available"),
    ('MemoryPressure', 'False', 'KubeletHasSufficientMemory', "kubelet has sufficient memory available"),
    ('DiskPressure', 'False', 'KubeletHasNoDiskPressure', "kubelet has no disk pressure"),
    ('NetworkUnavailable', 'False', 'RouteCreated', "RouteController created a route"),
]


class CCIProvider:
    """
    The pods' lifecycle and the node's status for the host runtime.

    Use :meth:`create` to construct it: the project must be ensured remotely
    before the provider is usable, and this is an asynchronous activity.
    """

    def __init__(
            self,
            *,
            settings: configuration.ProviderSettings,
            context: auth.APIContext,
            project_outcome: projects.ProjectOutcome,
            capacity: Dict[str, quantities.Quantity],
    ) -> None:
        super().__init__()
        self.settings = settings
        self.context = context
        self.project_outcome = project_outcome
        self.cache = caches.PodCache(ttl=settings.caching.ttl)
        self._capacity = capacity

    @classmethod
    async def create(
            cls,
            settings: configuration.ProviderSettings,
            *,
            credential: credentials.Credential,
            logger: Optional[typedefs.Logger] = None,
    ) -> "CCIProvider":
        logger = logger if logger is not None else logging.getLogger(__name__)

        # Fail on the misconfiguration early, before any remote calls are made.
        if not settings.remote.project:
            raise InitError("The project name is not configured.")
        capacity = parse_capacity(settings.node)

        context = auth.APIContext(
            server=settings.remote.endpoint,
            credential=credential,
            insecure=settings.networking.insecure,
            ca_path=settings.networking.ca_path,
        )
        try:
            outcome = await projects.ensure_project(context=context, settings=settings, logger=logger)
        except (errors.TransportError, errors.APIError) as e:
            await context.close()
            raise InitError(f"Cannot ensure the project {settings.remote.project!r}: {e}") from e

        return cls(settings=settings, context=context, project_outcome=outcome, capacity=capacity)

    async def close(self) -> None:
        await self.context.close()

    async def __aenter__(self) -> "CCIProvider":
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc_val: Optional[BaseException],
            exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    @property
    def project(self) -> str:
        return self.settings.remote.project

    async def create_pod(self, pod: bodies.RawPod) -> None:
        namespace, name = bodies.get_namespace(pod), bodies.get_name(pod)
        pod_logger = loggers.PodLogger(namespace=namespace, name=name)
        encoded = namespaces.encode(pod, self.project)
        with _translated_errors('create', namespace=namespace, name=name):
            await pods.create_pod(body=encoded, context=self.context,
                                  settings=self.settings, logger=pod_logger)
        self.cache.invalidate(name)
        pod_logger.info(f"Pod is created in project {self.project!r}.")

    async def update_pod(self, pod: bodies.RawPod) -> None:
        namespace, name = bodies.get_namespace(pod), bodies.get_name(pod)
        pod_logger = loggers.PodLogger(namespace=namespace, name=name)
        encoded = namespaces.encode(pod, self.project)
        with _translated_errors('update', namespace=namespace, name=name):
            await pods.replace_pod(body=encoded, context=self.context,
                                   settings=self.settings, logger=pod_logger)
        self.cache.invalidate(name)
        pod_logger.info(f"Pod is updated in project {self.project!r}.")

    async def delete_pod(self, pod: bodies.RawPod) -> None:
        namespace, name = bodies.get_namespace(pod), bodies.get_name(pod)
        pod_logger = loggers.PodLogger(namespace=namespace, name=name)
        with _translated_errors('delete', namespace=namespace, name=name):
            await pods.delete_pod(name=name, context=self.context,
                                  settings=self.settings, logger=pod_logger)
        self.cache.invalidate(name)
        pod_logger.info(f"Pod is deleted from project {self.project!r}.")

    async def get_pod(self, namespace: str, name: str) -> bodies.RawPod:
        """
        Fetch a pod by its identity as known in the cluster.

        The remote project is flat, so the pod is looked up by name only.
        A pod remembered to be in another namespace is reported as absent.
        """
        pod_logger = loggers.PodLogger(namespace=namespace, name=name)
        raw = self.cache.get(name)
        generation = self.cache.generation(name)
        if raw is None:
            with _translated_errors('get', namespace=namespace, name=name):
                raw = await pods.read_pod(name=name, context=self.context,
                                          settings=self.settings, logger=pod_logger)
            if not isinstance(raw, dict) or not isinstance(raw.get('metadata', {}), dict):
                raise LifecycleError(f"unexpected reply {raw!r}", verb='get', namespace=namespace, name=name)
            self.cache.put(name, raw, generation=generation)

        if not namespaces.is_encoded(raw):
            pod_logger.debug("Pod has no namespace marker; keeping the remote namespace.")
        pod = namespaces.decode(raw)
        if namespaces.is_encoded(raw) and bodies.get_namespace(pod) != namespace:
            raise PodNotFoundError(f"the pod belongs to namespace {bodies.get_namespace(pod)!r}",
                                   verb='get', namespace=namespace, name=name)
        return pod

    async def get_pods(self) -> List[bodies.RawPod]:
        raws = self.cache.get_all()
        generation = self.cache.generation()
        if raws is None:
            with _translated_errors('list'):
                raws = await pods.list_pods(context=self.context, settings=self.settings, logger=logger)
            self.cache.put_all(raws, generation=generation)

        unmarked = [bodies.get_name(raw) for raw in raws if not namespaces.is_encoded(raw)]
        if unmarked:
            logger.debug(f"Pods without namespace markers keep the remote namespace: {unmarked!r}")
        return [namespaces.decode(raw) for raw in raws]

    async def get_pod_status(self, namespace: str, name: str) -> bodies.RawPodStatus:
        pod = await self.get_pod(namespace, name)
        return pod.get('status') or {}

    async def get_container_logs(
            self,
            namespace: str,
            pod_name: str,
            container_name: str,
            tail_lines: int,
    ) -> str:
        # TODO: fetch the logs once the remote API exposes a logs endpoint for the containers.
        return ''

    def capacity(self) -> Dict[str, quantities.Quantity]:
        return dict(self._capacity)

    def node_conditions(self) -> List[bodies.NodeCondition]:
        now = datetime.datetime.now(datetime.timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')
        return [
            {
                'type': type_,
                'status': status,
                'lastHeartbeatTime': now,
                'lastTransitionTime': now,
                'reason': reason,
                'message': message,
            }
            for type_, status, reason, message in NODE_CONDITIONS
        ]

    def node_addresses(self) -> List[bodies.NodeAddress]:
        return [{'type': 'InternalIP', 'address': self.settings.node.internal_ip}]

    def node_daemon_endpoints(self) -> bodies.NodeDaemonEndpoints:
        return {'kubeletEndpoint': {'Port': self.settings.node.daemon_endpoint_port}}

    def operating_system(self) -> str:
        return self.settings.node.operating_system


def parse_capacity(node: configuration.NodeSettings) -> Dict[str, quantities.Quantity]:
    return {
        'cpu': quantities.Quantity.parse(node.cpu),
        'memory': quantities.Quantity.parse(node.memory),
        'pods': quantities.Quantity.parse(node.pods),
    }


@contextlib.contextmanager
def _translated_errors(
        verb: str,
        *,
        namespace: Optional[str] = None,
        name: Optional[str] = None,
) -> Iterator[None]:
    """ Convert the remote API's & transport errors to the lifecycle errors. """
    try:
        yield
    except errors.APINotFoundError as e:
        if verb == 'get':
            raise PodNotFoundError(str(e), verb=verb, namespace=namespace, name=name) from e
        raise LifecycleError(str(e), verb=verb, namespace=namespace, name=name) from e
    except (errors.APIError, errors.TransportError) as e:
        raise LifecycleError(str(e), verb=verb, namespace=namespace, name=name) from e
