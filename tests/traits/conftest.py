import pytest

from gengc._cogs.aiokits.aiotasks import InlineScheduler
from gengc._core.traits.environment import Environment


@pytest.fixture()
def scheduler():
    return InlineScheduler()


@pytest.fixture()
def make_env(cluster, scheduler, settings):
    def make_env_fn(integration, resources=()):
        return Environment(
            integration=integration,
            cluster=cluster,
            scheduler=scheduler,
            settings=settings,
            resources=list(resources),
        )
    return make_env_fn
