import enum
from typing import Optional

import aiohttp

from vkcci.clients import api, auth, errors
from vkcci.helpers import typedefs
from vkcci.structs import bodies, configuration

PROJECTS_URL = '/api/v1/namespaces'


class ProjectOutcome(enum.Enum):
    """ What the idempotent creation of a project has ended with. """
    CREATED = 'created'
    EXISTED = 'existed'


async def ensure_project(
        *,
        context: auth.APIContext,
        settings: configuration.ProviderSettings,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> ProjectOutcome:
    """
    Create the project unless it exists, and report which of these happened.

    The "already exists" reply of the remote API is not an error here.
    All other errors are escalated as they are.
    """
    project = settings.remote.project
    try:
        await api.post(
            url=PROJECTS_URL,
            payload=bodies.build_project(project),
            context=context,
            settings=settings,
            timeout=timeout,
            logger=logger,
        )
    except errors.APIConflictError:
        logger.debug(f"Project {project!r} already exists.")
        return ProjectOutcome.EXISTED
    else:
        logger.info(f"Project {project!r} is created.")
        return ProjectOutcome.CREATED
