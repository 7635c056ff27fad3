import asyncio
from collections.abc import Collection, MutableMapping

import aiohttp

from gengc._cogs.clients import api, auth, errors
from gengc._cogs.configs import configuration
from gengc._cogs.helpers import typedefs
from gengc._cogs.structs import references


async def scan_resources(
        *,
        context: auth.APIContext,
        settings: configuration.CollectorSettings,
        logger: typedefs.Logger,
) -> Collection[references.Resource]:
    """
    Scan the cluster for the resources of the preferred versions of all groups.

    The root listings (``/api`` & ``/apis``) are essential: if they fail,
    the whole scanning fails. If only some group-versions fail to respond,
    the scanning continues with the other groups, and then the failures are
    reported via :class:`errors.GroupDiscoveryError` with the resources found.

    The group-versions are scanned sequentially, not in parallel,
    so that the API server is not flooded with requests.
    """
    failures: dict[str, BaseException] = {}
    resources: set[references.Resource] = set()
    resources.update(await _read_old_api(context=context, settings=settings, logger=logger,
                                         failures=failures))
    resources.update(await _read_new_apis(context=context, settings=settings, logger=logger,
                                          failures=failures))
    if failures:
        raise errors.GroupDiscoveryError(failures, resources=resources)
    return resources


async def _read_old_api(
        *,
        context: auth.APIContext,
        settings: configuration.CollectorSettings,
        logger: typedefs.Logger,
        failures: MutableMapping[str, BaseException],
) -> Collection[references.Resource]:
    resources: set[references.Resource] = set()
    rsp = await api.get('/api', context=context, settings=settings, logger=logger)
    for version_name in rsp.get('versions', []):
        resources.update(await _read_version(
            url=f'/api/{version_name}',
            group='',
            version=version_name,
            context=context,
            settings=settings,
            logger=logger,
            failures=failures,
        ))
    return resources


async def _read_new_apis(
        *,
        context: auth.APIContext,
        settings: configuration.CollectorSettings,
        logger: typedefs.Logger,
        failures: MutableMapping[str, BaseException],
) -> Collection[references.Resource]:
    resources: set[references.Resource] = set()
    rsp = await api.get('/apis', context=context, settings=settings, logger=logger)
    for group_dat in rsp.get('groups', []):
        version = group_dat['preferredVersion']['version']
        resources.update(await _read_version(
            url=f'/apis/{group_dat["name"]}/{version}',
            group=group_dat['name'],
            version=version,
            context=context,
            settings=settings,
            logger=logger,
            failures=failures,
        ))
    return resources


async def _read_version(
        *,
        url: str,
        group: str,
        version: str,
        context: auth.APIContext,
        settings: configuration.CollectorSettings,
        logger: typedefs.Logger,
        failures: MutableMapping[str, BaseException],
) -> Collection[references.Resource]:
    try:
        rsp = await api.get(url, context=context, settings=settings, logger=logger)
    except errors.APINotFoundError:
        # This happens when the last and the only resource of a group/version
        # has been deleted, the whole group/version is gone, and we rescan it.
        return set()
    except (errors.APIError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        failures[f'{group}/{version}'.lstrip('/')] = e
        return set()
    else:
        return {
            references.Resource(
                group=group,
                version=version,
                kind=resource['kind'],
                plural=resource['name'],
                namespaced=resource['namespaced'],
                preferred=True,
                verbs=frozenset(resource.get('verbs') or []),
            )
            for resource in rsp.get('resources', [])
            if '/' not in resource['name']
        }
