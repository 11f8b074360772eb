"""
A short-lived in-memory cache of the pods as read from the remote API.

The host runtime polls the pods often, sometimes for each pod individually
right after listing them all. With a non-zero TTL, the repeated reads within
that time are served from memory instead of the remote API.

Every write to the remote API invalidates the written pod and the listing,
so that the provider's own changes are always visible in the next read.
The changes made remotely by others are only visible after the TTL expires.

The reads and the writes can overlap: a read started before a write can
finish after it, with the pre-write body in hands. Such a body must not be
stored. So, every invalidation bumps a generation, the readers remember
the generation before going remote, and the stale results are not stored.

With a zero TTL (the default), nothing is stored, and every read is remote.
"""
import collections
import copy
import time
from typing import Callable, Dict, List, Optional, Tuple

from vkcci.structs import bodies

Generation = Tuple[int, int]


class PodCache:

    def __init__(
            self,
            ttl: float = 0.0,
            *,
            clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self.ttl = ttl
        self._clock = clock
        self._pods: Dict[str, Tuple[float, bodies.RawPod]] = {}
        self._listing: Optional[Tuple[float, List[bodies.RawPod]]] = None
        self._epoch = 0  # bumped on every invalidation, i.e. also for the listing.
        self._generations: Dict[str, int] = collections.defaultdict(int)

    @property
    def enabled(self) -> bool:
        return self.ttl > 0

    def generation(self, name: Optional[str] = None) -> Generation:
        """ A token to pass to `put`/`put_all` after the remote read. """
        return (self._epoch, self._generations[name] if name is not None else 0)

    def get(self, name: str) -> Optional[bodies.RawPod]:
        entry = self._pods.get(name)
        if entry is None:
            return None
        expires, body = entry
        if self._clock() >= expires:
            del self._pods[name]
            return None
        return copy.deepcopy(body)

    def put(self, name: str, body: bodies.RawPod, *, generation: Optional[Generation] = None) -> None:
        if generation is not None and generation[1] != self._generations[name]:
            return
        if self.enabled:
            self._pods[name] = (self._clock() + self.ttl, copy.deepcopy(body))

    def get_all(self) -> Optional[List[bodies.RawPod]]:
        if self._listing is None:
            return None
        expires, pods = self._listing
        if self._clock() >= expires:
            self._listing = None
            return None
        return copy.deepcopy(pods)

    def put_all(self, pods: List[bodies.RawPod], *, generation: Optional[Generation] = None) -> None:
        if generation is not None and generation[0] != self._epoch:
            return
        if self.enabled:
            self._listing = (self._clock() + self.ttl, copy.deepcopy(pods))

    def invalidate(self, name: Optional[str] = None) -> None:
        """ Forget the pod (or all pods if no name is given) and the listing. """
        if name is None:
            for known in set(self._pods) | set(self._generations):
                self._generations[known] += 1
            self._pods.clear()
        else:
            self._generations[name] += 1
            self._pods.pop(name, None)
        self._epoch += 1
        self._listing = None
