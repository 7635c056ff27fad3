import asyncio
from collections.abc import Iterable

import aiohttp

from gengc._cogs.clients import clusters, errors
from gengc._cogs.configs import configuration
from gengc._cogs.helpers import typedefs
from gengc._cogs.structs import bodies


async def delete_objects(
        *,
        cluster: clusters.Cluster,
        objs: Iterable[bodies.GenericObject],
        settings: configuration.CollectorSettings,
        logger: typedefs.Logger,
) -> None:
    """
    Delete the objects one by one, regardless of the failures of other objects.

    The objects which are already gone are considered as deleted.
    All other failures are logged and left for the next collection,
    where these objects will be found again (as long as they still exist).
    """
    for obj in objs:
        if obj.name is None:
            logger.warning(f"Cannot delete a nameless stale resource: {obj!r}")
            continue

        try:
            await cluster.delete_obj(
                resource=obj.resource,
                namespace=obj.namespace,
                name=obj.name,
                propagation_policy=settings.collection.propagation_policy,
                logger=logger,
            )
        except errors.APINotFoundError:
            logger.debug(f"Stale resource is already deleted: {obj.kind}/{obj.name}")
        except (errors.APIError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Cannot delete stale resource {obj.kind}/{obj.name}: {e!r}")
        except Exception as e:
            logger.exception(f"Cannot delete stale resource {obj.kind}/{obj.name}: {e!r}")
        else:
            logger.debug(f"Stale resource is deleted: {obj.kind}/{obj.name}")
