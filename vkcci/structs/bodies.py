"""
All the structures coming from/to the remote API and the host runtime.

The remote API speaks the cluster-native schema of pods (kind, apiVersion,
metadata, spec, status), so the same structures are used on both sides.

For strict type-checking, they are detailed to the per-field level
(e.g. `TypedDict` instead of just ``Mapping[Any, Any]``) --
as used by the provider. The pods can have arbitrary fields at runtime,
which are not declared in the type definitions at type-checking time,
and which are passed through as is.
"""
from typing import Any, List, Mapping, MutableMapping

from typing_extensions import TypedDict

Labels = Mapping[str, str]
Annotations = MutableMapping[str, str]


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    labels: Labels
    annotations: Annotations
    resourceVersion: str
    creationTimestamp: str


class RawPodStatus(TypedDict, total=False):
    phase: str
    conditions: List[Any]
    hostIP: str
    podIP: str
    startTime: str
    containerStatuses: List[Any]


class RawPod(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: RawPodStatus


class RawNamespace(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta


class NodeCondition(TypedDict):
    type: str
    status: str
    lastHeartbeatTime: str
    lastTransitionTime: str
    reason: str
    message: str


class NodeAddress(TypedDict):
    type: str
    address: str


class DaemonEndpoint(TypedDict):
    Port: int


class NodeDaemonEndpoints(TypedDict):
    kubeletEndpoint: DaemonEndpoint


def build_project(name: str) -> RawNamespace:
    return {
        'apiVersion': 'v1',
        'kind': 'Namespace',
        'metadata': {'name': name},
    }


def get_name(body: Mapping[str, Any]) -> str:
    return str(body.get('metadata', {}).get('name') or '')


def get_namespace(body: Mapping[str, Any]) -> str:
    return str(body.get('metadata', {}).get('namespace') or '')
