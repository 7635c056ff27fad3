import asyncio
import json
import logging
import re
from unittest.mock import AsyncMock, MagicMock

import pytest

from gengc._cogs.clients.auth import APIContext
from gengc._cogs.configs.configuration import CollectorSettings
from gengc._cogs.structs.credentials import ConnectionInfo
from gengc._cogs.structs.integrations import Integration, IntegrationPhase
from gengc._cogs.structs.references import NamespaceName, Resource
from gengc.testing import FakeCluster


# Make all tests in this directory and below asyncio-compatible by default.
# Due to how pytest-async checks for these markers, they should be added as early as possible.
@pytest.hookimpl(hookwrapper=True)
def pytest_pycollect_makeitem(collector, name, obj):
    if collector.funcnamefilter(name) and asyncio.iscoroutinefunction(obj):
        pytest.mark.asyncio(obj)
    yield


@pytest.fixture()
def settings():
    return CollectorSettings()


@pytest.fixture()
def logger():
    return logging.getLogger('gengc.tests')


@pytest.fixture()
def namespace():
    return NamespaceName('ns')


@pytest.fixture()
def integration(namespace):
    return Integration(
        namespace=namespace,
        name='order-service',
        generation=3,
        phase=IntegrationPhase.DEPLOYING,
    )


#
# Typical resource kinds of a cluster: built-in, grouped, custom, and the odd ones.
#

@pytest.fixture()
def configmaps():
    return Resource('', 'v1', 'configmaps', kind='ConfigMap', namespaced=True,
                    verbs=frozenset({'create', 'delete', 'get', 'list', 'patch', 'update', 'watch'}))


@pytest.fixture()
def services():
    return Resource('', 'v1', 'services', kind='Service', namespaced=True,
                    verbs=frozenset({'create', 'delete', 'get', 'list', 'patch', 'update', 'watch'}))


@pytest.fixture()
def deployments():
    return Resource('apps', 'v1', 'deployments', kind='Deployment', namespaced=True,
                    verbs=frozenset({'create', 'delete', 'get', 'list', 'patch', 'update', 'watch'}))


@pytest.fixture()
def routes():
    return Resource('route.openshift.io', 'v1', 'routes', kind='Route', namespaced=True,
                    verbs=frozenset({'create', 'delete', 'get', 'list', 'patch', 'update', 'watch'}))


@pytest.fixture()
def nodes():
    return Resource('', 'v1', 'nodes', kind='Node', namespaced=False,
                    verbs=frozenset({'create', 'delete', 'get', 'list', 'patch', 'update', 'watch'}))


@pytest.fixture()
def podmetrics():
    """ A namespaced kind that can be listed, but not created (an aggregated API). """
    return Resource('metrics.k8s.io', 'v1beta1', 'pods', kind='PodMetrics', namespaced=True,
                    verbs=frozenset({'get', 'list'}))


@pytest.fixture()
def cluster(configmaps, services, deployments, routes, nodes, podmetrics):
    return FakeCluster([configmaps, services, deployments, routes, nodes, podmetrics])


@pytest.fixture()
def make_body(namespace):
    """ A factory of the objects' bodies with the garbage collector's labels. """
    def make_body_fn(name, *, integration=None, generation=None, labels=None, ns=namespace):
        all_labels = dict(labels or {})
        if integration is not None:
            all_labels['camel.apache.org/integration'] = integration
        if generation is not None:
            all_labels['camel.apache.org/generation'] = str(generation)
        return {'metadata': {'name': name, 'namespace': ns, 'labels': all_labels}}
    return make_body_fn


#
# Mocks for Kubernetes API clients. Reasons:
# 1. We do not test the clients, we test the layers on top of them,
#    so everything low-level should be mocked and assumed to be functional.
# 2. No external calls must be made under any circumstances.
#    The unit-tests must be fully isolated from the environment.
#

@pytest.fixture()
def hostname():
    """ A fake hostname to be used in all aiohttp/aresponses tests. """
    return 'fake-host'


@pytest.fixture()
def connection_info(hostname):
    return ConnectionInfo(server=f'https://{hostname}')


@pytest.fixture()
async def context(connection_info):
    """
    The API context with a real session, closed at the end of every test.

    The requests of this session are intercepted by `aresponses`,
    so no requests reach any real servers.
    """
    context = APIContext(connection_info)
    async with context:
        yield context


@pytest.fixture()
def resp_mocker(context, aresponses):
    """
    A factory of server-side callbacks for `aresponses` with mocking/spying.

    The value of the fixture is a function, which return a coroutine mock.
    That coroutine mock should be passed to `aresponses.add` as a response
    callback function. When called, it calls the mock defined by the function's
    arguments (specifically, return_value or side_effects).

    The difference from passing the responses directly to `aresponses.add`
    is that it is possible to assert on whether the response was handled
    by that callback at all (i.e. HTTP URL & method matched), especially
    if there are multiple responses registered.

    Sample usage::

        def test_me(resp_mocker):
            response = aiohttp.web.json_response({'a': 'b'})
            callback = resp_mocker(return_value=response)
            aresponses.add(hostname, '/path/', 'get', callback)
            do_something()
            assert callback.called
            assert callback.call_count == 1
    """
    def resp_maker(*args, **kwargs):
        actual_response = MagicMock(*args, **kwargs)
        async def resp_mock_effect(request):
            nonlocal actual_response

            # The request's content can be read inside of the handler only. We preserve
            # the data into a conventional field, so that they could be asserted later.
            try:
                request.data = await request.json()
            except json.JSONDecodeError:
                request.data = await request.text()

            # Get a response/error as it was intended (via return_value/side_effect).
            response = actual_response()
            return response

        return AsyncMock(side_effect=resp_mock_effect)
    return resp_maker


#
# Helpers for the logging checks.
#

@pytest.fixture()
def assert_logs(caplog):
    """
    A function to assert the logs are present (by pattern).

    The listed message patterns MUST be present, in the order specified.
    Some other log messages can also be present, but they are ignored.
    """
    def assert_logs_fn(patterns, prohibited=[], strict=False):
        __traceback_hide__ = True
        remaining_patterns = list(patterns)
        for message in caplog.messages:
            # The expected pattern is at position 0.
            # Looking-ahead: if one of the following patterns matches, while the
            # 0th does not, then the log message is missing, and we fail the test.
            for idx, pattern in enumerate(remaining_patterns):
                m = re.search(pattern, message)
                if m:
                    if idx == 0:
                        remaining_patterns[:1] = []
                        break  # out of `remaining_patterns` cycle
                    else:
                        skipped_patterns = remaining_patterns[:idx]
                        raise AssertionError(f"Few patterns were skipped: {skipped_patterns!r}")
                elif strict:
                    raise AssertionError(f"Unexpected log message: {message!r}")

            # Check that the prohibited patterns do not appear in any message.
            for pattern in prohibited:
                m = re.search(pattern, message)
                if m:
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")

        # If all patterns have been matched in order, we are done.
        # if some are left, but the messages are over, then we fail.
        if remaining_patterns:
            raise AssertionError(f"Few patterns were missed: {remaining_patterns!r}")

    return assert_logs_fn


@pytest.fixture(autouse=True)
def _caplog_all_levels(caplog):
    caplog.set_level(0)
