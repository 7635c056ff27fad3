import functools
import logging

import click.testing
import pytest

from gengc._cogs.clients import clusters
from gengc._cogs.structs.credentials import ConnectionInfo
from gengc.cli import main


@pytest.fixture(autouse=True)
def _restore_root_logging():
    logger = logging.getLogger()
    handlers = list(logger.handlers)
    level = logger.level
    try:
        yield
    finally:
        logger.handlers[:] = handlers
        logger.setLevel(level)


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner):
    return functools.partial(runner.invoke, main)


@pytest.fixture()
def login(mocker):
    info = ConnectionInfo(server='https://fake-host')
    return mocker.patch('gengc._core.intents.piggybacking.login', return_value=info)


@pytest.fixture()
def connect(mocker, cluster):
    return mocker.patch.object(clusters.APICluster, 'from_connection_info', return_value=cluster)
