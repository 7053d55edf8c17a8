"""Connection handle for the Weaviate service."""

from types import TracebackType

import weaviate
from weaviate import WeaviateAsyncClient
from weaviate.classes.init import AdditionalConfig, Auth, Timeout

from seedquery.config import Scheme, WeaviateSettings, get_settings
from seedquery.exceptions import ConfigurationError, ServiceConnectionError
from seedquery.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PORTS = {
    Scheme.HTTP: 80,
    Scheme.HTTPS: 443,
}


def parse_host(host: str, scheme: Scheme) -> tuple[str, int]:
    """Split a ``host[:port]`` address.

    Args:
        host: Address such as ``localhost:8080``.
        scheme: Scheme used to pick the default port.

    Returns:
        Tuple of hostname and port.

    Raises:
        ConfigurationError: If the address is empty or the port is invalid.
    """
    address = host.strip()
    if "://" in address:
        raise ConfigurationError(
            f"Host must not include a scheme: {host}",
            details={"host": host},
        )
    if not address:
        raise ConfigurationError("Host must not be empty", details={"host": host})

    hostname, sep, port_text = address.rpartition(":")
    if not sep:
        return address, DEFAULT_PORTS[scheme]

    if not hostname or not port_text.isdigit():
        raise ConfigurationError(
            f"Invalid host address: {host}",
            details={"host": host},
        )

    port = int(port_text)
    if not 0 < port < 65536:
        raise ConfigurationError(
            f"Port out of range: {port}",
            details={"host": host, "port": port},
        )
    return hostname, port


class ConnectionManager:
    """Owns the client handle shared by the seeder and the query runner.

    The client is constructed lazily and without network I/O; ``connect``
    opens it. A connection failure is not retried.
    """

    def __init__(
        self,
        settings: WeaviateSettings | None = None,
        client: WeaviateAsyncClient | None = None,
    ) -> None:
        """Initialize the connection manager.

        Args:
            settings: Weaviate configuration.
            client: Existing client (for testing).
        """
        self._settings = settings or get_settings().weaviate
        self._client = client
        self._owns_client = client is None

    @property
    def settings(self) -> WeaviateSettings:
        """Get the connection settings."""
        return self._settings

    @property
    def client(self) -> WeaviateAsyncClient:
        """Get or construct the client handle.

        Raises:
            ConfigurationError: If host or scheme are unusable.
        """
        if self._client is None:
            self._client = self._build_client()
        return self._client

    def _build_client(self) -> WeaviateAsyncClient:
        scheme = self._settings.scheme
        hostname, port = parse_host(self._settings.host, scheme)
        secure = scheme == Scheme.HTTPS

        auth = None
        if self._settings.api_key:
            auth = Auth.api_key(self._settings.api_key.get_secret_value())

        try:
            client = weaviate.use_async_with_custom(
                http_host=hostname,
                http_port=port,
                http_secure=secure,
                grpc_host=hostname,
                grpc_port=self._settings.grpc_port,
                grpc_secure=secure,
                auth_credentials=auth,
                additional_config=AdditionalConfig(
                    timeout=Timeout(
                        init=self._settings.init_timeout,
                        query=self._settings.request_timeout,
                        insert=self._settings.request_timeout,
                    )
                ),
                skip_init_checks=self._settings.skip_init_checks,
            )
        except Exception as e:
            raise ConfigurationError(
                f"Failed to construct client: {e}",
                details={"host": self._settings.host, "error": str(e)},
            ) from e

        logger.debug(
            f"Client constructed for {scheme.value}://{hostname}:{port}",
            extra={"grpc_port": self._settings.grpc_port},
        )
        return client

    async def connect(self) -> WeaviateAsyncClient:
        """Open the client handle.

        Returns:
            The connected client.

        Raises:
            ConfigurationError: If the client cannot be constructed.
            ServiceConnectionError: If the service cannot be reached.
        """
        client = self.client

        try:
            await client.connect()
        except Exception as e:
            # A failed startup check can leave transports open.
            await self._discard_client()
            raise ServiceConnectionError(
                f"Failed to connect to {self._settings.host}: {e}",
                details={
                    "host": self._settings.host,
                    "scheme": self._settings.scheme.value,
                    "error": str(e),
                },
            ) from e

        logger.info(f"Connected to {self._settings.scheme.value}://{self._settings.host}")
        return client

    async def _discard_client(self) -> None:
        """Close an owned client after a failed connect, keeping the original error."""
        try:
            await self.close()
        except Exception as e:
            logger.warning(f"Failed to close client after connect error: {e}")
            self._client = None

    async def close(self) -> None:
        """Close the client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None

    async def __aenter__(self) -> WeaviateAsyncClient:
        return await self.connect()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
