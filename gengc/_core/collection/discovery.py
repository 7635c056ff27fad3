from collections.abc import Collection, Iterable

from gengc._cogs.clients import clusters, errors
from gengc._cogs.helpers import typedefs
from gengc._cogs.structs import references


async def discover_resources(
        *,
        cluster: clusters.Cluster,
        verbs: Iterable[str],
        logger: typedefs.Logger,
) -> Collection[references.Resource]:
    """
    Discover the namespaced resource kinds that support all the required verbs.

    If only some API groups fail in the discovery, continue with the resources
    of the other groups. If the discovery fails as a whole, fail too.
    """
    verbs = frozenset(verbs)
    try:
        resources = await cluster.scan_resources(logger=logger)
    except errors.GroupDiscoveryError as e:
        logger.warning(f"Proceeding with the partial discovery: {e}")
        resources = e.resources

    return [
        resource
        for resource in resources
        if resource.namespaced and resource.preferred
        if resource.supports(verbs)
    ]
