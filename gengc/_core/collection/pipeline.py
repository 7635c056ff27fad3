import asyncio

import aiohttp

from gengc._cogs.clients import clusters, errors
from gengc._cogs.configs import configuration
from gengc._cogs.helpers import typedefs
from gengc._cogs.structs import integrations, selectors
from gengc._core.actions import loggers
from gengc._core.collection import collecting, deleting


async def collect_garbage(
        *,
        cluster: clusters.Cluster,
        integration: integrations.Integration,
        settings: configuration.CollectorSettings,
        logger: typedefs.Logger | None = None,
) -> None:
    """
    Delete the integration's resources of the generations older than its own.

    The generation is taken from the integration as it was passed in,
    even if the integration has changed in the cluster since then.
    The collection failures are logged and never escalated: the stale
    resources will be found again in the next collection.
    """
    logger = logger if logger is not None else loggers.IntegrationLogger(integration=integration)
    try:
        objs = await collecting.collect_stale_objects(
            cluster=cluster,
            namespace=integration.namespace,
            name=integration.name,
            generation=integration.generation,
            settings=settings,
            logger=logger,
        )
    except (selectors.SelectorError, errors.APIError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error(f"Cannot collect older generation resources: {e!r}")
        return

    if objs:
        logger.info(f"Deleting {len(objs)} resource(s) of generations older than {integration.generation}.")
    await deleting.delete_objects(
        cluster=cluster,
        objs=objs,
        settings=settings,
        logger=logger,
    )
