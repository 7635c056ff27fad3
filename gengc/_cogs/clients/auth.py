import base64
import contextlib
import os
import ssl
import tempfile

import aiohttp

from gengc._cogs.helpers import versions
from gengc._cogs.structs import credentials


class APIContext:
    """
    A container for an aiohttp session and the connection's environment info.

    The container is constructed once per connection and then re-used
    by all the API calls of a collection run (and by the subsequent runs).
    The session must be closed when the context is not needed anymore.
    """

    # The main contained object used by the API methods.
    session: aiohttp.ClientSession

    # Contextual information for URL building.
    server: str
    default_namespace: str | None

    def __init__(
            self,
            info: credentials.ConnectionInfo,
    ) -> None:
        super().__init__()
        self.session = self.make_aiohttp_session(info)

        # It is a good practice to self-identify a bit.
        self.session.headers['User-Agent'] = f'gengc/{versions.version or "unknown"}'

        self.server = info.server
        self.default_namespace = info.default_namespace

    async def __aenter__(self) -> "APIContext":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    def make_aiohttp_session(self, info: credentials.ConnectionInfo) -> aiohttp.ClientSession:

        # Some SSL data are not accepted directly, so we have to use temp files.
        # Do not even create temporary files if there is no need. It can be a readonly filesystem.
        with contextlib.ExitStack() as stack:

            cert_path: str | os.PathLike[str] | None
            if info.certificate_path:
                cert_path = info.certificate_path
            elif info.certificate_data:
                cert_file = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
                cert_file.write(decode_to_pem(info.certificate_data).encode('ascii'))
                cert_path = cert_file.name
            else:
                cert_path = None

            pkey_path: str | os.PathLike[str] | None
            if info.private_key_path:
                pkey_path = info.private_key_path
            elif info.private_key_data:
                pkey_file = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
                pkey_file.write(decode_to_pem(info.private_key_data).encode('ascii'))
                pkey_path = pkey_file.name
            else:
                pkey_path = None

            # The SSL part (both client certificate auth and CA verification).
            context: ssl.SSLContext
            if cert_path and pkey_path:
                context = ssl.create_default_context(
                    purpose=ssl.Purpose.SERVER_AUTH,
                    cafile=info.ca_path,
                    cadata=decode_to_pem(info.ca_data) if info.ca_data is not None else None,
                )
                context.load_cert_chain(certfile=cert_path, keyfile=pkey_path)
            else:
                context = ssl.create_default_context(
                    cafile=info.ca_path,
                    cadata=decode_to_pem(info.ca_data) if info.ca_data is not None else None,
                )

        if info.insecure:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE

        # The token auth part.
        headers: dict[str, str] = {}
        if info.scheme and info.token:
            headers['Authorization'] = f'{info.scheme} {info.token}'
        elif info.scheme:
            headers['Authorization'] = f'{info.scheme}'
        elif info.token:
            headers['Authorization'] = f'Bearer {info.token}'

        # The basic auth part.
        auth: aiohttp.BasicAuth | None
        if info.username and info.password:
            auth = aiohttp.BasicAuth(info.username, info.password)
        else:
            auth = None

        return aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(
                limit=0,
                ssl=context,
            ),
            headers=headers,
            auth=auth,
        )

    async def close(self) -> None:
        await self.session.close()


def decode_to_pem(data: str | bytes) -> str:
    match data:
        case str() if data.startswith('-----BEGIN '):
            return data
        case bytes() if data.startswith(b'-----BEGIN '):
            return data.decode('ascii')
        case _:
            return base64.b64decode(data).decode('ascii')
