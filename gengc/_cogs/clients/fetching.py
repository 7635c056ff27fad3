from collections.abc import Collection

from gengc._cogs.clients import api, auth
from gengc._cogs.configs import configuration
from gengc._cogs.helpers import typedefs
from gengc._cogs.structs import bodies, references, selectors


async def list_objs(
        *,
        context: auth.APIContext,
        settings: configuration.CollectorSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        selector: selectors.LabelSelector | None = None,
        logger: typedefs.Logger,
) -> Collection[bodies.RawBody]:
    """
    List the objects of a specific resource kind, optionally by labels.

    The kind is not known statically, so the objects are returned as raw
    dicts. The list responses usually omit the kinds & API versions
    of the individual items, so they are restored from the list itself.
    """
    params = {'labelSelector': str(selector)} if selector else None
    rsp = await api.get(
        url=resource.get_url(namespace=namespace),
        params=params,
        context=context,
        settings=settings,
        logger=logger,
    )

    items: list[bodies.RawBody] = []
    for item in rsp.get('items', []):
        if 'kind' in rsp:
            item.setdefault('kind', rsp['kind'][:-4] if rsp['kind'][-4:] == 'List' else rsp['kind'])
        if 'apiVersion' in rsp:
            item.setdefault('apiVersion', rsp['apiVersion'])
        items.append(item)
    return items
