"""
All the structures coming from/to the Kubernetes API.

The objects of arbitrary kinds are handled generically: as JSON-decoded
dicts (``RawBody``), as received in listing calls or as rendered by
the controller before creation. No kind-specific classes are used.

For strict type-checking, the used fields are detailed via `TypedDict`.
All other fields of the objects are present at runtime, but not declared.
"""
import dataclasses
from collections.abc import Mapping
from typing import Any

from typing_extensions import TypedDict

from gengc._cogs.structs import references

Labels = Mapping[str, str]
Annotations = Mapping[str, str]


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    labels: Labels
    annotations: Annotations
    generation: int
    resourceVersion: str
    creationTimestamp: str


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]


@dataclasses.dataclass(frozen=True)
class GenericObject:
    """
    An object of any resource kind, as found in the cluster.

    The object carries the resource it was listed from, so that the API URLs
    could be built for it later (e.g. for deletion), with no knowledge
    of what the resource kind actually is.
    """
    resource: references.Resource
    raw: RawBody

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.kind}/{self.name} in {self.namespace!r}>'

    @property
    def kind(self) -> str | None:
        return self.raw.get('kind', self.resource.kind)

    @property
    def api_version(self) -> str:
        return self.raw.get('apiVersion', self.resource.api_version)

    @property
    def name(self) -> str | None:
        return self.raw.get('metadata', {}).get('name')

    @property
    def namespace(self) -> references.Namespace:
        namespace = self.raw.get('metadata', {}).get('namespace')
        return references.NamespaceName(namespace) if namespace is not None else None

    @property
    def uid(self) -> str | None:
        return self.raw.get('metadata', {}).get('uid')

    @property
    def labels(self) -> Labels:
        return self.raw.get('metadata', {}).get('labels') or {}
