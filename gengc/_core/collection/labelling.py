"""
Labelling of the resources produced for an integration.

The labels are the only link between the integration and its resources:
the stale resources are later found by these labels and nothing else.
A resource created without them is invisible to the garbage collection
and remains in the cluster forever.
"""
import collections.abc
from collections.abc import Iterable, Iterator, MutableMapping
from typing import Any, Union

from gengc._cogs.structs import integrations

INTEGRATION_LABEL = 'camel.apache.org/integration'
GENERATION_LABEL = 'camel.apache.org/generation'

K8sObject = MutableMapping[Any, Any]
K8sObjects = Union[K8sObject, Iterable[K8sObject], Iterable[Iterable[K8sObject]]]


def build_labels(integration: integrations.Integration) -> dict[str, str]:
    return {
        INTEGRATION_LABEL: integration.name,
        GENERATION_LABEL: str(integration.generation),
    }


def label_resources(
        objs: K8sObjects,
        *,
        integration: integrations.Integration,
) -> None:
    """
    Stamp the objects with the integration's name & current generation.

    Other labels of the objects are preserved. Only these two labels
    are overwritten if present, so the labelling can be applied repeatedly.
    """
    labels = build_labels(integration)
    for obj in walk(objs):
        if isinstance(obj, collections.abc.MutableMapping):
            if obj.get('metadata') is None:
                obj['metadata'] = {}
            metadata = obj['metadata']
            if metadata.get('labels') is None:
                metadata['labels'] = {}
            metadata['labels'].update(labels)
        else:
            raise TypeError(f"K8s object class is not supported: {type(obj)}")


def walk(objs: Any) -> Iterator[Any]:
    """
    Iterate over objects, flattening the lists/tuples/iterables recursively.

    The dicts/mappings are excluded, despite they are iterables too,
    as they are treated as objects themselves. So are the strings.
    """
    if objs is None:
        pass
    elif isinstance(objs, collections.abc.Mapping):
        yield objs
    elif isinstance(objs, (str, bytes)):
        yield objs  # to be rejected as an unsupported object, not iterated char by char.
    elif isinstance(objs, collections.abc.Iterable):
        for obj in objs:
            yield from walk(obj)
    else:
        yield objs
