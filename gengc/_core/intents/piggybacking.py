"""
Rudimentary authentication from the standard locations of the credentials.

The garbage collector is not a client library, and avoids bringing too much
logic for proper authentication, especially all the complex auth-providers.
Only the service account (in-cluster) and the kubeconfig files are supported,
with the static credentials in them.
"""
import os
from typing import Any

import yaml

from gengc._cogs.helpers import typedefs
from gengc._cogs.structs import credentials

# Keep as constants to make them patchable. Higher priority is more preferred.
PRIORITY_OF_KUBECONFIG: int = 10
PRIORITY_OF_SERVICE_ACCOUNT: int = 20

# As per https://kubernetes.io/docs/tasks/run-application/access-api-from-pod/
SERVICE_ACCOUNT_DIR = '/var/run/secrets/kubernetes.io/serviceaccount'


def login(*, logger: typedefs.Logger) -> credentials.ConnectionInfo:
    """
    Get the credentials from any available source; prefer the in-cluster ones.
    """
    infos = [
        info
        for info in [
            login_with_service_account(),
            login_with_kubeconfig(),
        ]
        if info is not None
    ]
    if not infos:
        raise credentials.LoginError("Cannot authenticate neither in-cluster, nor via kubeconfig.")
    info = max(infos, key=lambda info: info.priority)
    logger.debug(f"Authenticated to {info.server}.")
    return info


def login_with_service_account(**_: Any) -> credentials.ConnectionInfo | None:
    """
    A minimalistic login handler that can get raw data from a service account.

    No parsing or sophisticated multi-step token retrieval is performed.
    """
    token_path = os.path.join(SERVICE_ACCOUNT_DIR, 'token')
    ns_path = os.path.join(SERVICE_ACCOUNT_DIR, 'namespace')
    ca_path = os.path.join(SERVICE_ACCOUNT_DIR, 'ca.crt')

    if os.path.exists(token_path):
        with open(token_path, encoding='utf-8') as f:
            token = f.read().strip()

        namespace: str | None = None
        if os.path.exists(ns_path):
            with open(ns_path, encoding='utf-8') as f:
                namespace = f.read().strip()

        return credentials.ConnectionInfo(
            server='https://kubernetes.default.svc',
            ca_path=ca_path if os.path.exists(ca_path) else None,
            token=token or None,
            default_namespace=namespace or None,
            priority=PRIORITY_OF_SERVICE_ACCOUNT,
        )
    else:
        return None


def login_with_kubeconfig(**_: Any) -> credentials.ConnectionInfo | None:
    """
    A minimalistic login handler that can get raw data from a kubeconfig file.

    Only the static credentials are supported (tokens, certificates, passwords).
    The auth-providers' tokens are used as is, without refreshing.
    """

    # As per https://kubernetes.io/docs/concepts/configuration/organize-cluster-access-kubeconfig/
    kubeconfig = os.environ.get('KUBECONFIG')
    if not kubeconfig and os.path.exists(os.path.expanduser('~/.kube/config')):
        kubeconfig = '~/.kube/config'
    if not kubeconfig:
        return None

    paths = [path.strip() for path in kubeconfig.split(os.pathsep)]
    paths = [os.path.expanduser(path) for path in paths if path]

    # As prescribed: if the file is absent or non-deserialisable, then fail. The first value wins.
    current_context: str | None = None
    contexts: dict[Any, Any] = {}
    clusters: dict[Any, Any] = {}
    users: dict[Any, Any] = {}
    for path in paths:

        with open(path, encoding='utf-8') as f:
            config = yaml.safe_load(f.read()) or {}

        if current_context is None:
            current_context = config.get('current-context')
        for item in config.get('contexts') or []:
            if item['name'] not in contexts:
                contexts[item['name']] = item.get('context') or {}
        for item in config.get('clusters') or []:
            if item['name'] not in clusters:
                clusters[item['name']] = item.get('cluster') or {}
        for item in config.get('users') or []:
            if item['name'] not in users:
                users[item['name']] = item.get('user') or {}

    # Once fully parsed, use the current context only.
    if current_context is None:
        raise credentials.LoginError('Current context is not set in kubeconfigs.')
    try:
        context = contexts[current_context]
        cluster = clusters[context['cluster']]
        user = users.get(context.get('user'), {})
    except KeyError as e:
        raise credentials.LoginError(f"Broken kubeconfig: context {current_context!r}") from e

    provider_token = (user.get('auth-provider') or {}).get('config', {}).get('access-token')
    return credentials.ConnectionInfo(
        server=cluster.get('server'),
        ca_path=cluster.get('certificate-authority'),
        ca_data=cluster.get('certificate-authority-data'),
        insecure=cluster.get('insecure-skip-tls-verify'),
        certificate_path=user.get('client-certificate'),
        certificate_data=user.get('client-certificate-data'),
        private_key_path=user.get('client-key'),
        private_key_data=user.get('client-key-data'),
        username=user.get('username'),
        password=user.get('password'),
        token=user.get('token') or provider_token,
        default_namespace=context.get('namespace'),
        priority=PRIORITY_OF_KUBECONFIG,
    )
