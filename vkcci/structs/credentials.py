"""
Authentication-related structures.

The remote API authenticates every request individually by its signature
(see :mod:`vkcci.clients.signing`); there are no sessions or tokens.
So, a minimally sufficient data structure is the long-lived key pair
plus the scope to which the signatures are bound.

The secret key must never leak into the logs: the ``repr()`` hides it.
"""
import dataclasses


class LoginError(Exception):
    """ Raised when the provider has no usable credentials to sign with. """


@dataclasses.dataclass(frozen=True)
class Credential:
    """
    An access-key/secret-key pair with the region & service scope.
    """
    access_key: str
    secret_key: str = dataclasses.field(repr=False)
    region: str = ''
    service: str = ''
