from gengc._cogs.clients import clusters, errors
from gengc._cogs.configs import configuration
from gengc._cogs.helpers import typedefs
from gengc._cogs.structs import bodies, references, selectors
from gengc._core.collection import discovery, labelling


def build_selector(name: str, generation: int) -> selectors.LabelSelector:
    """
    Build a selector of the integration's resources of the older generations.

    Raise :class:`selectors.SelectorError` if the integration's name
    cannot be used as a label value (i.e. if the selector is malformed).
    """
    return selectors.parse(','.join([
        f'{labelling.INTEGRATION_LABEL}={name}',
        f'{labelling.GENERATION_LABEL}<{generation}',
    ]))


async def collect_stale_objects(
        *,
        cluster: clusters.Cluster,
        namespace: references.NamespaceName,
        name: str,
        generation: int,
        settings: configuration.CollectorSettings,
        logger: typedefs.Logger,
) -> list[bodies.GenericObject]:
    """
    Find all objects of the integration with the generations below the bound.

    All namespaced kinds of the cluster are queried one by one, so it takes
    time in big clusters. The kinds which cannot be listed (e.g. forbidden
    or vanished since the discovery) are skipped. All other errors are
    escalated, and the collection is aborted as a whole.
    """
    selector = build_selector(name, generation)
    resources = await discovery.discover_resources(
        cluster=cluster,
        verbs=settings.discovery.verbs,
        logger=logger,
    )

    objs: list[bodies.GenericObject] = []
    for resource in resources:
        try:
            raws = await cluster.list_objs(
                resource=resource,
                namespace=namespace,
                selector=selector,
                logger=logger,
            )
        except errors.APIError as e:
            if e.status in settings.collection.skipped_statuses:
                logger.debug(f"Skipping {resource!r} from collection: {e.status} {e.message or ''}")
                continue
            raise

        # Some aggregated APIs ignore the label selectors: never trust them blindly.
        for raw in raws:
            obj = bodies.GenericObject(resource=resource, raw=raw)
            if selector.matches(obj.labels):
                objs.append(obj)
    return objs
