"""
The garbage collection as a trait of the integrations' reconciliation.

In every resource-producing phase, the resources are labelled with
the integration's name and generation. In the deploying phase, the resources
of the older generations are collected and deleted in the background,
so that the reconciliation does not wait for the slow collection.
"""
from gengc._cogs.aiokits import aiotasks
from gengc._cogs.structs import integrations
from gengc._core.actions import loggers
from gengc._core.collection import labelling, pipeline
from gengc._core.traits import environment

LABELLING_PHASES = (
    integrations.IntegrationPhase.INITIALIZATION,
    integrations.IntegrationPhase.DEPLOYING,
)
COLLECTING_PHASES = (
    integrations.IntegrationPhase.DEPLOYING,
)


class GarbageCollectorTrait:
    id = 'gc'

    def __init__(self, *, enabled: bool | None = None) -> None:
        super().__init__()
        self.enabled = enabled

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} enabled={self.enabled!r}>'

    def configure(self, env: environment.Environment) -> bool:
        if self.enabled is not None and not self.enabled:
            return False
        if not env.settings.collection.enabled:
            return False
        return env.integration.in_phase(*LABELLING_PHASES)

    def apply(self, env: environment.Environment) -> None:
        env.post_processors.append(self.label_resources)
        if env.integration.in_phase(*COLLECTING_PHASES):
            env.post_actions.append(self.spawn_collection)

    def label_resources(self, env: environment.Environment) -> None:
        labelling.label_resources(env.resources, integration=env.integration)

    async def spawn_collection(self, env: environment.Environment) -> None:
        """
        Start the collection in the background and return immediately.

        Nothing is reported back: neither the results, nor the failures.
        The collection's own failures are logged by the collection itself;
        the unexpected crashes are logged by the task's guard.
        """
        integration = env.integration
        logger = loggers.IntegrationLogger(integration=integration)
        name = f"garbage collection of {integration.namespace}/{integration.name}@{integration.generation}"
        await env.scheduler.spawn(
            name=name,
            coro=aiotasks.guard(
                name=name,
                finishable=True,
                logger=logger,
                coro=pipeline.collect_garbage(
                    cluster=env.cluster,
                    integration=integration,
                    settings=env.settings,
                    logger=logger,
                ),
            ),
        )
