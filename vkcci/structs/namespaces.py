"""
Namespace flattening: the cluster's many namespaces in the remote single one.

The remote API has only one flat namespace per provider: the project.
All pods, regardless of their namespaces in the cluster, are stored there.
To restore the pods' true namespaces when they are read back, the original
namespace is stored in an annotation of the pod itself: the namespace marker.

The marker is put on every pod sent to the remote API (:func:`encode`),
and is consumed from every pod received from the remote API (:func:`decode`),
so that the host runtime never sees it.

Both functions are pure: they return the modified copies of the bodies,
and never modify the original bodies (which belong to the caller).
"""
import copy
from typing import Any, Mapping, MutableMapping, TypeVar

NAMESPACE_ANNOTATION = 'virtual-kubelet-namespace'
""" The reserved annotation with the pod's namespace as seen in the cluster. """

_B = TypeVar('_B', bound=Mapping[str, Any])


def is_encoded(body: Mapping[str, Any]) -> bool:
    annotations = body.get('metadata', {}).get('annotations') or {}
    return NAMESPACE_ANNOTATION in annotations


def encode(body: _B, project: str) -> _B:
    """
    Move the pod to the remote project, remembering its true namespace.

    The encoding is idempotent: a pod that is already moved to the project
    keeps its previously remembered namespace, not the project's name.
    """
    encoded: Any = copy.deepcopy(body)
    metadata: MutableMapping[str, Any] = encoded.setdefault('metadata', {})
    annotations: MutableMapping[str, str] = metadata.get('annotations') or {}
    namespace = metadata.get('namespace') or ''
    if NAMESPACE_ANNOTATION in annotations and namespace == project:
        namespace = annotations[NAMESPACE_ANNOTATION]
    annotations[NAMESPACE_ANNOTATION] = namespace
    metadata['annotations'] = annotations
    metadata['namespace'] = project
    return encoded


def decode(body: _B) -> _B:
    """
    Restore the pod's true namespace from the marker, and remove the marker.

    A pod without the marker keeps the namespace as received from the remote
    API, i.e. usually the project's name; this is not considered an error.
    """
    decoded: Any = copy.deepcopy(body)
    metadata: MutableMapping[str, Any] = decoded.get('metadata') or {}
    annotations: MutableMapping[str, str] = metadata.get('annotations') or {}
    if NAMESPACE_ANNOTATION in annotations:
        metadata['namespace'] = annotations.pop(NAMESPACE_ANNOTATION)
        if not annotations:
            del metadata['annotations']
    return decoded
