from gengc._cogs.clients import api, auth
from gengc._cogs.configs import configuration
from gengc._cogs.helpers import typedefs
from gengc._cogs.structs import references


async def delete_obj(
        *,
        context: auth.APIContext,
        settings: configuration.CollectorSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        propagation_policy: str | None = None,
        logger: typedefs.Logger,
) -> None:
    """
    Delete one specific object with the requested propagation of the deletion.

    With the ``"Background"`` propagation, the call returns as soon as
    the object itself is deleted; its dependents are deleted by the cluster
    later. Any API errors are escalated as is, including 404 for the objects
    that are already gone --- it is the caller's decision how to treat them.
    """
    payload: dict[str, str] = {'apiVersion': 'v1', 'kind': 'DeleteOptions'}
    if propagation_policy is not None:
        payload['propagationPolicy'] = propagation_policy
    await api.delete(
        url=resource.get_url(namespace=namespace, name=name),
        payload=payload,
        context=context,
        settings=settings,
        logger=logger,
    )
