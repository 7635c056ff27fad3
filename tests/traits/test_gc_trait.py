import dataclasses
from unittest.mock import AsyncMock

import pytest

from gengc._cogs.aiokits.aiotasks import Scheduler
from gengc._cogs.clients.errors import APIServerError
from gengc._cogs.structs.integrations import IntegrationPhase
from gengc._core.traits.environment import Environment
from gengc._core.traits.gc import GarbageCollectorTrait


def test_trait_identity():
    trait = GarbageCollectorTrait()
    assert trait.id == 'gc'
    assert repr(trait) == '<GarbageCollectorTrait enabled=None>'


@pytest.mark.parametrize('phase, expected', [
    (IntegrationPhase.NONE, False),
    (IntegrationPhase.INITIALIZATION, True),
    (IntegrationPhase.BUILDING_KIT, False),
    (IntegrationPhase.DEPLOYING, True),
    (IntegrationPhase.RUNNING, False),
    (IntegrationPhase.ERROR, False),
])
def test_configuration_by_phase(make_env, integration, phase, expected):
    env = make_env(dataclasses.replace(integration, phase=phase))
    assert GarbageCollectorTrait().configure(env) == expected


@pytest.mark.parametrize('enabled, expected', [(None, True), (True, True), (False, False)])
def test_configuration_by_trait_flag(make_env, integration, enabled, expected):
    env = make_env(integration)
    assert GarbageCollectorTrait(enabled=enabled).configure(env) == expected


def test_configuration_by_settings(make_env, integration, settings):
    settings.collection.enabled = False
    env = make_env(integration)
    assert not GarbageCollectorTrait().configure(env)


def test_initialization_only_labels(make_env, integration):
    env = make_env(dataclasses.replace(integration, phase=IntegrationPhase.INITIALIZATION))
    trait = GarbageCollectorTrait()
    trait.apply(env)
    assert env.post_processors == [trait.label_resources]
    assert env.post_actions == []


def test_deploying_labels_and_collects(make_env, integration):
    env = make_env(integration)
    trait = GarbageCollectorTrait()
    trait.apply(env)
    assert env.post_processors == [trait.label_resources]
    assert env.post_actions == [trait.spawn_collection]


def test_labelling_via_post_processors(make_env, integration):
    resources = [{'kind': 'Deployment', 'metadata': {'name': 'd1'}}, {'kind': 'Service'}]
    env = make_env(integration, resources=resources)
    trait = GarbageCollectorTrait()
    trait.apply(env)
    env.run_post_processors()
    for resource in resources:
        assert resource['metadata']['labels'] == {
            'camel.apache.org/integration': 'order-service',
            'camel.apache.org/generation': '3',
        }


async def test_collection_via_post_actions(make_env, integration, cluster, make_body, deployments):
    cluster.add(deployments, make_body('d2', integration='order-service', generation=2))
    cluster.add(deployments, make_body('d3', integration='order-service', generation=3))
    env = make_env(integration)
    trait = GarbageCollectorTrait()
    trait.apply(env)
    await env.run_post_actions()
    assert cluster.names(deployments) == ['d3']


async def test_collection_is_spawned_with_a_name(cluster, settings, integration):
    scheduler = AsyncMock()
    env = Environment(integration=integration, cluster=cluster, scheduler=scheduler, settings=settings)
    trait = GarbageCollectorTrait()

    await trait.spawn_collection(env)

    assert scheduler.spawn.call_count == 1
    kwargs = scheduler.spawn.call_args.kwargs
    assert kwargs['name'] == 'garbage collection of ns/order-service@3'
    await kwargs['coro']  # otherwise, RuntimeWarning: coroutine was never awaited
    assert cluster.scan_calls == 1


async def test_collection_failures_are_not_reported_to_the_caller(
        make_env, integration, cluster, assert_logs):
    cluster.discovery_error = APIServerError(None, status=500)
    env = make_env(integration)
    trait = GarbageCollectorTrait()
    trait.apply(env)
    await env.run_post_actions()
    assert_logs([r"Cannot collect older generation resources"])


async def test_collection_in_background_does_not_block(
        cluster, settings, integration, make_body, deployments):
    cluster.add(deployments, make_body('d1', integration='order-service', generation=1))
    scheduler = Scheduler()
    try:
        env = Environment(integration=integration, cluster=cluster, scheduler=scheduler,
                          settings=settings)
        trait = GarbageCollectorTrait()
        trait.apply(env)
        await env.run_post_actions()
        assert cluster.names(deployments) == ['d1']  # not yet started

        await scheduler.wait()
        assert cluster.names(deployments) == []
    finally:
        await scheduler.close()


async def test_crashes_in_background_are_logged(
        cluster, settings, integration, assert_logs):
    cluster.discovery_error = ValueError("boo")
    scheduler = Scheduler()
    try:
        env = Environment(integration=integration, cluster=cluster, scheduler=scheduler,
                          settings=settings)
        trait = GarbageCollectorTrait()
        trait.apply(env)
        await env.run_post_actions()
        await scheduler.wait()
    finally:
        await scheduler.close()
    assert_logs([r"Garbage collection of ns/order-service@3 has failed: boo"])
