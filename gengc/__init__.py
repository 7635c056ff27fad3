"""
The main module of the garbage collector for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from gengc._cogs.aiokits.aiotasks import (
    Spawner,
    Scheduler,
    InlineScheduler,
)
from gengc._cogs.clients.clusters import (
    Cluster,
    APICluster,
)
from gengc._cogs.clients.errors import (
    APIError,
    APIClientError,
    APIServerError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIConflictError,
    GroupDiscoveryError,
)
from gengc._cogs.configs.configuration import (
    CollectorSettings,
    NetworkingSettings,
    DiscoverySettings,
    CollectionSettings,
)
from gengc._cogs.helpers.typedefs import (
    Logger,
)
from gengc._cogs.helpers.versions import (
    version as __version__,
)
from gengc._cogs.structs.bodies import (
    RawBody,
    RawMeta,
    Labels,
    Annotations,
    GenericObject,
)
from gengc._cogs.structs.credentials import (
    LoginError,
    ConnectionInfo,
)
from gengc._cogs.structs.integrations import (
    Integration,
    IntegrationPhase,
)
from gengc._cogs.structs.references import (
    Resource,
    Namespace,
    NamespaceName,
)
from gengc._cogs.structs.selectors import (
    LabelSelector,
    Requirement,
    Operator,
    SelectorError,
    parse as parse_selector,
)
from gengc._core.actions.loggers import (
    configure as configure_logging,
    LogFormat,
    IntegrationLogger,
)
from gengc._core.collection.collecting import (
    build_selector,
    collect_stale_objects,
)
from gengc._core.collection.deleting import (
    delete_objects,
)
from gengc._core.collection.discovery import (
    discover_resources,
)
from gengc._core.collection.labelling import (
    INTEGRATION_LABEL,
    GENERATION_LABEL,
    build_labels,
    label_resources,
)
from gengc._core.collection.pipeline import (
    collect_garbage,
)
from gengc._core.intents.piggybacking import (
    login,
    login_with_kubeconfig,
    login_with_service_account,
)
from gengc._core.traits.environment import (
    Environment,
    PostAction,
    PostProcessor,
)
from gengc._core.traits.gc import (
    GarbageCollectorTrait,
)

__all__ = [
    'Spawner', 'Scheduler', 'InlineScheduler',
    'Cluster', 'APICluster',
    'APIError', 'APIClientError', 'APIServerError',
    'APIUnauthorizedError', 'APIForbiddenError', 'APINotFoundError', 'APIConflictError',
    'GroupDiscoveryError',
    'CollectorSettings', 'NetworkingSettings', 'DiscoverySettings', 'CollectionSettings',
    'Logger',
    'RawBody', 'RawMeta', 'Labels', 'Annotations', 'GenericObject',
    'LoginError', 'ConnectionInfo',
    'Integration', 'IntegrationPhase',
    'Resource', 'Namespace', 'NamespaceName',
    'LabelSelector', 'Requirement', 'Operator', 'SelectorError', 'parse_selector',
    'configure_logging', 'LogFormat', 'IntegrationLogger',
    'build_selector', 'collect_stale_objects',
    'delete_objects',
    'discover_resources',
    'INTEGRATION_LABEL', 'GENERATION_LABEL', 'build_labels', 'label_resources',
    'collect_garbage',
    'login', 'login_with_kubeconfig', 'login_with_service_account',
    'Environment', 'PostAction', 'PostProcessor',
    'GarbageCollectorTrait',
]
