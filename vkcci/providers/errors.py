"""
Errors of the pods' lifecycle, as seen by the host runtime.

Every failed operation is reported with the operation's verb and the pod's
identity (as known in the cluster), with the low-level cause chained.
"""
from typing import Optional


class InitError(Exception):
    """ The provider cannot be initialized: e.g. the project cannot be ensured. """


class LifecycleError(Exception):

    def __init__(
            self,
            message: str,
            *,
            verb: str,
            namespace: Optional[str] = None,
            name: Optional[str] = None,
    ) -> None:
        identity = f"{namespace}/{name}" if namespace else f"{name}" if name else "pods"
        super().__init__(f"{verb} {identity} failed: {message}")
        self.verb = verb
        self.namespace = namespace
        self.name = name


class PodNotFoundError(LifecycleError):
    """ The pod is absent in the remote API. This is an expected state, not a fault. """
