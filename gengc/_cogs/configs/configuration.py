"""
All configuration flags, options, settings to fine-tune the garbage collector.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults).
The settings are set either in code or via the CLI options;
there are no configuration files to load them from.
"""
import dataclasses
from collections.abc import Iterable


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: float | None = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout for the whole API request (incl. connecting and reading).
    """

    connect_timeout: float | None = None
    """
    A timeout for establishing a connection to the API server.
    """

    error_backoffs: float | Iterable[float] = (1, 1, 2, 3, 5, 8)
    """
    Backoff intervals in case of connection errors, server errors (5xx),
    or timeouts. Every following error leads to the next backoff interval.
    Once the intervals are over, the error is escalated to the caller.

    To disable the retries, set it to ``[]`` or ``()``.
    """


@dataclasses.dataclass
class DiscoverySettings:

    verbs: frozenset[str] = frozenset({'create', 'list'})
    """
    The verbs that a resource kind must support (all of them) to be collected.

    A kind which cannot be listed is useless for collection. A kind which
    cannot be created cannot have been produced by the controller,
    so querying it is a waste of time (e.g. the aggregated read-only APIs).
    """


@dataclasses.dataclass
class CollectionSettings:

    enabled: bool = True
    """
    Should the stale resources be collected at all?

    If disabled, the resources are neither labelled nor collected;
    the previously created resources then remain in the cluster forever.
    """

    skipped_statuses: frozenset[int] = frozenset({403, 404})
    """
    HTTP statuses of the per-kind listing that skip the kind but continue
    with other kinds. All other errors abort the collection run.

    Typically, these are the aggregated or virtual APIs that either do not
    serve the generic list requests or are not accessible to the controller.
    """

    propagation_policy: str = 'Background'
    """
    The propagation policy of the deletion: ``"Background"``, ``"Foreground"``,
    or ``"Orphan"``. With the background propagation, the dependents are
    deleted by the cluster after the deletion request returns.
    """


@dataclasses.dataclass
class CollectorSettings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    discovery: DiscoverySettings = dataclasses.field(default_factory=DiscoverySettings)
    collection: CollectionSettings = dataclasses.field(default_factory=CollectionSettings)
