"""
The capabilities which the host runtime expects from every provider.

The host runtime calls these methods on its own schedule: the pods' methods
when the pods assigned to the virtual node change, the node's methods when
it refreshes the node's status. The calls can be concurrent.
"""
from typing import List, Mapping, Sequence

from typing_extensions import Protocol, runtime_checkable

from vkcci.structs import bodies, quantities


@runtime_checkable
class Provider(Protocol):

    async def create_pod(self, pod: bodies.RawPod) -> None: ...

    async def update_pod(self, pod: bodies.RawPod) -> None: ...

    async def delete_pod(self, pod: bodies.RawPod) -> None: ...

    async def get_pod(self, namespace: str, name: str) -> bodies.RawPod: ...

    async def get_pods(self) -> Sequence[bodies.RawPod]: ...

    async def get_pod_status(self, namespace: str, name: str) -> bodies.RawPodStatus: ...

    async def get_container_logs(
            self, namespace: str, pod_name: str, container_name: str, tail_lines: int,
    ) -> str: ...

    def capacity(self) -> Mapping[str, quantities.Quantity]: ...

    def node_conditions(self) -> List[bodies.NodeCondition]: ...

    def node_addresses(self) -> List[bodies.NodeAddress]: ...

    def node_daemon_endpoints(self) -> bodies.NodeDaemonEndpoints: ...

    def operating_system(self) -> str: ...
