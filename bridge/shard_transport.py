"""HTTP transport pulling shard bytes from farmers."""

from typing import Callable, Optional

import httpx

from common.constants import FARMER_TIMEOUT_SECONDS, STREAM_PIECE_SIZE_BYTES
from common.exceptions import BridgeRequestError
from common.logging_config import get_logger
from common.types import Pointer

logger = get_logger(__name__)


class ShardTransport:
    """
    Streams shards from farmers over HTTP.

    Each fetch runs inside its own response context, so cancelling the
    awaiting task closes the farmer connection.
    """

    def __init__(
        self,
        protocol: str,
        timeout: float = FARMER_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize shard transport.

        Args:
            protocol: URL scheme used to reach farmers (http or https)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.protocol = protocol
        self.session = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def fetch_shard(
        self,
        pointer: Pointer,
        on_piece: Optional[Callable[[int], None]] = None
    ) -> bytes:
        """
        Download one shard.

        Args:
            pointer: Pointer describing the shard and its farmer
            on_piece: Called with the size of every received piece

        Returns:
            Shard bytes

        Raises:
            BridgeRequestError: If the farmer is unreachable, refuses the
                request, or serves a shard of the wrong size
        """
        url = pointer.shard_url(self.protocol)
        received = bytearray()

        logger.debug(f"Fetching shard {pointer.hash} from {pointer.farmer.node_id} [size={pointer.size}]")

        try:
            async with self.session.stream('GET', url, params={'token': pointer.token}) as response:
                if response.status_code != 200:
                    await response.aread()
                    raise BridgeRequestError(
                        f"Farmer {pointer.farmer.node_id} refused shard {pointer.hash} "
                        f"(status={response.status_code})",
                        status_code=response.status_code
                    )

                async for piece in response.aiter_bytes(STREAM_PIECE_SIZE_BYTES):
                    received.extend(piece)
                    if on_piece is not None:
                        on_piece(len(piece))

        except httpx.TimeoutException as e:
            raise BridgeRequestError(
                f"Timed out fetching shard {pointer.hash} from {pointer.farmer.address}:{pointer.farmer.port}"
            ) from e
        except httpx.TransportError as e:
            raise BridgeRequestError(
                f"Cannot reach farmer {pointer.farmer.address}:{pointer.farmer.port}: {e}"
            ) from e

        if len(received) != pointer.size:
            raise BridgeRequestError(
                f"Shard {pointer.hash} size mismatch: expected {pointer.size} bytes, got {len(received)}",
                code='SIZE_MISMATCH'
            )

        return bytes(received)

    async def close(self) -> None:
        """Close the farmer HTTP session."""
        await self.session.aclose()
