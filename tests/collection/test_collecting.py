import pytest

from gengc._cogs.clients.errors import APIError, APIForbiddenError, APINotFoundError, \
                                       APIServerError
from gengc._cogs.structs.selectors import SelectorError
from gengc._core.collection.collecting import build_selector, collect_stale_objects


def test_selector_of_older_generations():
    selector = build_selector('order-service', 3)
    assert str(selector) == 'camel.apache.org/integration=order-service,camel.apache.org/generation<3'


def test_selector_with_malformed_name():
    with pytest.raises(SelectorError):
        build_selector('bad name!', 3)


async def collect(cluster, settings, logger, *, name='order-service', generation=3, namespace='ns'):
    objs = await collect_stale_objects(
        cluster=cluster,
        namespace=namespace,
        name=name,
        generation=generation,
        settings=settings,
        logger=logger,
    )
    return sorted(obj.name for obj in objs)


async def test_older_generations_are_collected(cluster, settings, logger, make_body, deployments):
    cluster.add(deployments, make_body('d1', integration='order-service', generation=1))
    cluster.add(deployments, make_body('d2', integration='order-service', generation=2))
    assert await collect(cluster, settings, logger) == ['d1', 'd2']


async def test_current_and_newer_generations_are_kept(cluster, settings, logger, make_body, deployments):
    cluster.add(deployments, make_body('d3', integration='order-service', generation=3))
    cluster.add(deployments, make_body('d4', integration='order-service', generation=4))
    assert await collect(cluster, settings, logger) == []


async def test_other_integrations_are_kept(cluster, settings, logger, make_body, deployments):
    cluster.add(deployments, make_body('d1', integration='billing', generation=1))
    assert await collect(cluster, settings, logger) == []


async def test_unlabelled_objects_are_kept(cluster, settings, logger, make_body, deployments):
    cluster.add(deployments, make_body('d1'))
    cluster.add(deployments, make_body('d2', integration='order-service'))
    cluster.add(deployments, make_body('d3', generation=1))
    assert await collect(cluster, settings, logger) == []


async def test_objects_of_other_namespaces_are_kept(cluster, settings, logger, make_body, deployments):
    cluster.add(deployments, make_body('d1', integration='order-service', generation=1, ns='other'))
    assert await collect(cluster, settings, logger) == []


async def test_non_integer_generations_are_kept(cluster, settings, logger, make_body, deployments):
    cluster.add(deployments, make_body('d1', integration='order-service', generation='abc'))
    assert await collect(cluster, settings, logger) == []


async def test_generation_zero_collects_nothing(cluster, settings, logger, make_body, deployments):
    cluster.add(deployments, make_body('d0', integration='order-service', generation=0))
    assert await collect(cluster, settings, logger, generation=0) == []


async def test_all_kinds_are_queried_with_the_selector(
        cluster, settings, logger, configmaps, services, deployments, routes):
    await collect(cluster, settings, logger)
    assert {call.resource for call in cluster.list_calls} == {configmaps, services, deployments, routes}
    assert {call.namespace for call in cluster.list_calls} == {'ns'}
    assert {str(call.selector) for call in cluster.list_calls} == {
        'camel.apache.org/integration=order-service,camel.apache.org/generation<3',
    }


async def test_objects_carry_their_resources(
        cluster, settings, logger, make_body, configmaps, routes):
    cluster.add(configmaps, make_body('c1', integration='order-service', generation=1))
    cluster.add(routes, make_body('r1', integration='order-service', generation=1))
    objs = await collect_stale_objects(
        cluster=cluster, namespace='ns', name='order-service', generation=3,
        settings=settings, logger=logger,
    )
    assert {(obj.resource, obj.name) for obj in objs} == {(configmaps, 'c1'), (routes, 'r1')}
    assert {obj.kind for obj in objs} == {'ConfigMap', 'Route'}


async def test_selectors_are_rechecked_locally(cluster, settings, logger, make_body, routes):
    cluster.ignore_selectors.add(routes)
    cluster.add(routes, make_body('r1', integration='order-service', generation=1))
    cluster.add(routes, make_body('r2', integration='order-service', generation=3))
    cluster.add(routes, make_body('r3', integration='billing', generation=1))
    assert await collect(cluster, settings, logger) == ['r1']


@pytest.mark.parametrize('exc', [
    APIForbiddenError(None, status=403),
    APINotFoundError(None, status=404),
])
async def test_forbidden_and_absent_kinds_are_skipped(
        cluster, settings, logger, make_body, assert_logs, routes, deployments, exc):
    cluster.add(deployments, make_body('d1', integration='order-service', generation=1))
    cluster.add(routes, make_body('r1', integration='order-service', generation=1))
    cluster.list_errors[routes] = exc
    assert await collect(cluster, settings, logger) == ['d1']
    assert_logs([rf"Skipping routes.v1.route.openshift.io from collection: {exc.status}"])


async def test_skipped_statuses_are_configurable(
        cluster, settings, logger, make_body, routes):
    settings.collection.skipped_statuses = frozenset({404})
    cluster.list_errors[routes] = APIForbiddenError(None, status=403)
    with pytest.raises(APIForbiddenError):
        await collect(cluster, settings, logger)


@pytest.mark.parametrize('exc', [
    APIError(None, status=400),
    APIServerError(None, status=500),
    TimeoutError(),
])
async def test_other_listing_errors_abort_the_collection(
        cluster, settings, logger, make_body, routes, deployments, exc):
    cluster.add(deployments, make_body('d1', integration='order-service', generation=1))
    cluster.list_errors[routes] = exc
    with pytest.raises(type(exc)):
        await collect(cluster, settings, logger)


async def test_malformed_selector_makes_no_api_calls(cluster, settings, logger):
    with pytest.raises(SelectorError):
        await collect(cluster, settings, logger, name='bad name!')
    assert cluster.scan_calls == 0
    assert cluster.list_calls == []
