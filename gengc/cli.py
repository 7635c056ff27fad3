import asyncio
import functools
from typing import Any, Callable

import aiohttp
import click

from gengc._cogs.clients import clusters, errors
from gengc._cogs.configs import configuration
from gengc._cogs.structs import credentials, integrations, references, selectors
from gengc._core.actions import loggers
from gengc._core.collection import collecting, deleting, labelling
from gengc._core.intents import piggybacking


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        if isinstance(value, loggers.LogFormat):
            return value
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @click.option('--log-refkey', type=str)
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                log_prefix: bool | None = False,
                log_refkey: str | None = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


@click.version_option(prog_name='gengc')
@click.group(name='gengc', context_settings=dict(
    auto_envvar_prefix='GENGC',
))
def main() -> None:
    pass


@main.command()
@logging_options
@click.option('-n', '--namespace', type=str, required=True)
@click.option('-i', '--integration', 'name', type=str, required=True)
@click.option('-g', '--generation', type=click.IntRange(min=0), required=True)
@click.option('--delete/--dry-run', 'delete', default=False)
@click.option('--propagation-policy', type=click.Choice(['Background', 'Foreground', 'Orphan']),
              default='Background')
def collect(
        namespace: str,
        name: str,
        generation: int,
        delete: bool,
        propagation_policy: str,
) -> None:
    """ Find (and optionally delete) the integration's resources of older generations. """
    settings = configuration.CollectorSettings()
    settings.collection.propagation_policy = propagation_policy
    integration = integrations.Integration(
        namespace=references.NamespaceName(namespace),
        name=name,
        generation=generation,
        phase=integrations.IntegrationPhase.DEPLOYING,
    )
    try:
        asyncio.run(_collect(integration=integration, settings=settings, delete=delete))
    except (credentials.LoginError, selectors.SelectorError) as e:
        raise click.ClickException(str(e)) from e
    except (errors.APIError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise click.ClickException(f"Cannot collect older generation resources: {e!r}") from e


async def _collect(
        *,
        integration: integrations.Integration,
        settings: configuration.CollectorSettings,
        delete: bool,
) -> None:
    logger = loggers.IntegrationLogger(integration=integration)
    info = piggybacking.login(logger=logger)
    async with clusters.APICluster.from_connection_info(info, settings=settings) as cluster:
        objs = await collecting.collect_stale_objects(
            cluster=cluster,
            namespace=integration.namespace,
            name=integration.name,
            generation=integration.generation,
            settings=settings,
            logger=logger,
        )
        for obj in objs:
            generation = obj.labels.get(labelling.GENERATION_LABEL, '?')
            click.echo(f"{obj.kind}/{obj.name} ({obj.api_version}, generation {generation})")
        if delete:
            await deleting.delete_objects(cluster=cluster, objs=objs, settings=settings, logger=logger)
        elif objs:
            click.echo(f"{len(objs)} resource(s) would be deleted; use --delete to delete them.")
