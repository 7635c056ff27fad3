"""
The boundary between the reconciler and the garbage collection.

The reconciler renders the resources of an integration into an environment,
runs the post-processors on them (synchronously, before the resources are
created or updated in the cluster), and then runs the post-actions.
Neither the rendering nor the creation of the resources is done here.
"""
import dataclasses
from collections.abc import Awaitable, Callable

from gengc._cogs.aiokits import aiotasks
from gengc._cogs.clients import clusters
from gengc._cogs.configs import configuration
from gengc._cogs.structs import bodies, integrations

PostProcessor = Callable[['Environment'], None]
PostAction = Callable[['Environment'], Awaitable[None]]


@dataclasses.dataclass
class Environment:
    integration: integrations.Integration
    cluster: clusters.Cluster
    scheduler: aiotasks.Spawner
    settings: configuration.CollectorSettings = dataclasses.field(
        default_factory=configuration.CollectorSettings)
    resources: list[bodies.RawBody] = dataclasses.field(default_factory=list)
    post_processors: list[PostProcessor] = dataclasses.field(default_factory=list)
    post_actions: list[PostAction] = dataclasses.field(default_factory=list)

    def run_post_processors(self) -> None:
        for post_processor in self.post_processors:
            post_processor(self)

    async def run_post_actions(self) -> None:
        for post_action in self.post_actions:
            await post_action(self)
