"""
The cluster as an injectable capability.

Everything the garbage collection needs from the cluster is in one protocol,
so that the actual API can be replaced with an in-memory cluster in tests
(see :class:`gengc.testing.FakeCluster`), or with other client libraries.
There is no global connection anywhere: the cluster is always passed around.
"""
from collections.abc import Collection
from typing import Protocol

from gengc._cogs.clients import auth, deleting, fetching, scanning
from gengc._cogs.configs import configuration
from gengc._cogs.helpers import typedefs
from gengc._cogs.structs import bodies, credentials, references, selectors


class Cluster(Protocol):

    async def scan_resources(
            self,
            *,
            logger: typedefs.Logger,
    ) -> Collection[references.Resource]:
        """
        Discover the resources of the preferred versions of all API groups.

        Raise :class:`errors.GroupDiscoveryError` with the discovered resources
        if some API groups have failed, but not the whole discovery.
        """
        ...

    async def list_objs(
            self,
            *,
            resource: references.Resource,
            namespace: references.Namespace,
            selector: selectors.LabelSelector | None = None,
            logger: typedefs.Logger,
    ) -> Collection[bodies.RawBody]:
        ...

    async def delete_obj(
            self,
            *,
            resource: references.Resource,
            namespace: references.Namespace,
            name: str,
            propagation_policy: str | None = None,
            logger: typedefs.Logger,
    ) -> None:
        ...


class APICluster:
    """
    The real cluster, as accessed via its HTTP API.
    """

    def __init__(
            self,
            *,
            context: auth.APIContext,
            settings: configuration.CollectorSettings,
    ) -> None:
        super().__init__()
        self.context = context
        self.settings = settings

    @classmethod
    def from_connection_info(
            cls,
            info: credentials.ConnectionInfo,
            *,
            settings: configuration.CollectorSettings,
    ) -> "APICluster":
        return cls(context=auth.APIContext(info), settings=settings)

    async def __aenter__(self) -> "APICluster":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self.context.close()

    async def scan_resources(
            self,
            *,
            logger: typedefs.Logger,
    ) -> Collection[references.Resource]:
        return await scanning.scan_resources(
            context=self.context,
            settings=self.settings,
            logger=logger,
        )

    async def list_objs(
            self,
            *,
            resource: references.Resource,
            namespace: references.Namespace,
            selector: selectors.LabelSelector | None = None,
            logger: typedefs.Logger,
    ) -> Collection[bodies.RawBody]:
        return await fetching.list_objs(
            context=self.context,
            settings=self.settings,
            resource=resource,
            namespace=namespace,
            selector=selector,
            logger=logger,
        )

    async def delete_obj(
            self,
            *,
            resource: references.Resource,
            namespace: references.Namespace,
            name: str,
            propagation_policy: str | None = None,
            logger: typedefs.Logger,
    ) -> None:
        await deleting.delete_obj(
            context=self.context,
            settings=self.settings,
            resource=resource,
            namespace=namespace,
            name=name,
            propagation_policy=propagation_policy,
            logger=logger,
        )
