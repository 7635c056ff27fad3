"""
Helper tools to test the garbage collection in the controllers' own tests.

:class:`FakeCluster` keeps the objects in memory and implements
the same protocol as the real cluster, so the whole collection can be run
against it with no API server. The failures of the real API servers
(e.g. the broken aggregated API groups) can be injected explicitly.
"""
import copy
from collections.abc import Collection, Iterable, Mapping
from typing import NamedTuple

from gengc._cogs.clients import errors
from gengc._cogs.helpers import typedefs
from gengc._cogs.structs import bodies, references, selectors


class ListCall(NamedTuple):
    resource: references.Resource
    namespace: references.Namespace
    selector: selectors.LabelSelector | None


class DeleteCall(NamedTuple):
    resource: references.Resource
    namespace: references.Namespace
    name: str
    propagation_policy: str | None


class FakeCluster:
    """
    An in-memory cluster with the resource kinds and the objects in it.

    The objects are stored per resource kind, in the order of addition.
    The listing applies the label selectors the same way the API servers do;
    set ``ignore_selectors`` for the kinds that imitate the APIs ignoring them.
    All the calls are remembered for the assertions in tests.
    """

    def __init__(
            self,
            resources: Iterable[references.Resource] = (),
            *,
            ignore_selectors: Iterable[references.Resource] = (),
    ) -> None:
        super().__init__()
        self.resources: list[references.Resource] = list(resources)
        self.ignore_selectors: set[references.Resource] = set(ignore_selectors)
        self.objects: dict[references.Resource, list[bodies.RawBody]] = {}
        self.closed: bool = False

        # Injectable failures.
        self.discovery_error: BaseException | None = None
        self.group_failures: dict[str, BaseException] = {}
        self.list_errors: dict[references.Resource, BaseException] = {}
        self.delete_errors: dict[tuple[references.Resource, str], BaseException] = {}

        # Recorded calls.
        self.scan_calls: int = 0
        self.list_calls: list[ListCall] = []
        self.delete_calls: list[DeleteCall] = []

    async def __aenter__(self) -> "FakeCluster":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def close(self) -> None:
        self.closed = True

    def add(self, resource: references.Resource, body: bodies.RawBody) -> bodies.RawBody:
        """ Store an object (a deep copy of it) as if it was created by someone. """
        if resource not in self.resources:
            self.resources.append(resource)
        body = copy.deepcopy(body)
        body.setdefault('apiVersion', resource.api_version)
        if resource.kind is not None:
            body.setdefault('kind', resource.kind)
        self.objects.setdefault(resource, []).append(body)
        return body

    def get(
            self,
            resource: references.Resource,
            *,
            namespace: references.Namespace,
            name: str,
    ) -> bodies.RawBody | None:
        for body in self.objects.get(resource, []):
            if _identify(body) == (namespace, name):
                return body
        return None

    def names(self, resource: references.Resource) -> list[str]:
        return [body.get('metadata', {}).get('name', '') for body in self.objects.get(resource, [])]

    async def scan_resources(
            self,
            *,
            logger: typedefs.Logger,
    ) -> Collection[references.Resource]:
        self.scan_calls += 1
        if self.discovery_error is not None:
            raise self.discovery_error
        if self.group_failures:
            resources = [
                resource for resource in self.resources
                if _group_version(resource) not in self.group_failures
            ]
            raise errors.GroupDiscoveryError(self.group_failures, resources=resources)
        return list(self.resources)

    async def list_objs(
            self,
            *,
            resource: references.Resource,
            namespace: references.Namespace,
            selector: selectors.LabelSelector | None = None,
            logger: typedefs.Logger,
    ) -> Collection[bodies.RawBody]:
        self.list_calls.append(ListCall(resource, namespace, selector))
        if resource in self.list_errors:
            raise self.list_errors[resource]
        if resource not in self.resources:
            raise _not_found(f"the server could not find the requested resource {resource!r}")
        return [
            copy.deepcopy(body)
            for body in self.objects.get(resource, [])
            if namespace is None or _identify(body)[0] == namespace
            if selector is None or resource in self.ignore_selectors
               or selector.matches(_labels(body))
        ]

    async def delete_obj(
            self,
            *,
            resource: references.Resource,
            namespace: references.Namespace,
            name: str,
            propagation_policy: str | None = None,
            logger: typedefs.Logger,
    ) -> None:
        self.delete_calls.append(DeleteCall(resource, namespace, name, propagation_policy))
        if (resource, name) in self.delete_errors:
            raise self.delete_errors[resource, name]
        body = self.get(resource, namespace=namespace, name=name)
        if body is None:
            raise _not_found(f"{resource.plural} {name!r} not found")
        self.objects[resource].remove(body)


def _identify(body: bodies.RawBody) -> tuple[str | None, str | None]:
    metadata = body.get('metadata', {})
    return metadata.get('namespace'), metadata.get('name')


def _labels(body: bodies.RawBody) -> Mapping[str, str]:
    return body.get('metadata', {}).get('labels') or {}


def _group_version(resource: references.Resource) -> str:
    return f'{resource.group}/{resource.version}'.lstrip('/')


def _not_found(message: str) -> errors.APINotFoundError:
    return errors.APINotFoundError({
        'apiVersion': 'v1',
        'kind': 'Status',
        'code': 404,
        'status': 'Failure',
        'reason': 'NotFound',
        'message': message,
    }, status=404)  # type: ignore[typeddict-item]
