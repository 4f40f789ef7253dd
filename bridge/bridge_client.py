"""Async HTTP client for the bridge directory service."""

import asyncio
import uuid
from typing import Callable, List, Optional, Sequence, Union
from urllib.parse import quote

import httpx

from bridge.schemas import ErrorResponse, PointerResponse, TokenResponse
from bridge.shard_transport import ShardTransport
from common.bucket_id import calculate_bucket_id, hash_password
from common.config import ClientConfig
from common.exceptions import BridgeRequestError
from common.logging_config import get_logger
from common.types import AccessToken, Pointer
from storage.base import ChunkStore

logger = get_logger(__name__)


class BridgeClient:
    """Bridge API client with retry logic, plus shard reconstruction from pointers."""

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize bridge client.

        Args:
            config: Client configuration (bridge URL, shard protocol, retries)
            transport: Optional httpx transport shared by bridge and farmer
                requests (tests inject a MockTransport)
        """
        self.config = config
        auth = None
        if config.bridge_user is not None:
            auth = httpx.BasicAuth(config.bridge_user, hash_password(config.bridge_password))

        self.session = httpx.AsyncClient(
            base_url=config.bridge,
            timeout=config.timeout,
            auth=auth,
            transport=transport
        )
        self.shards = ShardTransport(config.protocol, transport=transport)
        logger.info(f"Initialized BridgeClient [bridge={config.bridge}, protocol={config.protocol}]")

    @staticmethod
    def calculate_bucket_id(user: str, bucket_name: str) -> str:
        """Derive the bucket id for a user's named bucket."""
        return calculate_bucket_id(user, bucket_name)

    async def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic on 5xx errors and network failures.

        Args:
            method: HTTP method (GET, POST, ...)
            endpoint: API endpoint path
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object (4xx responses are returned, not retried)

        Raises:
            BridgeRequestError: If max retries exceeded on network failures
        """
        max_retries = self.config.max_retries
        backoff = self.config.retry_backoff_multiplier

        request_id = str(uuid.uuid4())
        headers = dict(kwargs.pop('headers', None) or {})
        headers['X-Request-ID'] = request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={request_id}]")

        last_exception = None
        for attempt in range(max_retries + 1):
            try:
                response = await self.session.request(method, endpoint, headers=headers, **kwargs)

                logger.debug(
                    f"Response received: {method} {endpoint} status={response.status_code} "
                    f"[request_id={request_id}]"
                )

                if 400 <= response.status_code < 500:
                    logger.warning(
                        f"Client error: {method} {endpoint} status={response.status_code} "
                        f"[request_id={request_id}]"
                    )
                    return response

                if response.status_code >= 500 and attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} status={response.status_code}, retrying in {delay}s "
                        f"[request_id={request_id}]"
                    )
                    await asyncio.sleep(delay)
                    continue

                return response

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s "
                        f"[request_id={request_id}]"
                    )
                    await asyncio.sleep(delay)
                    continue
                logger.error(
                    f"Network error (max retries exceeded): {method} {endpoint} error={e} "
                    f"[request_id={request_id}]"
                )

        if isinstance(last_exception, httpx.TimeoutException):
            raise BridgeRequestError("Bridge request timed out. Bridge may be overloaded.") from last_exception
        raise BridgeRequestError(
            f"Cannot connect to bridge at {self.config.bridge}"
        ) from last_exception

    def _error_from_response(self, response: httpx.Response, action: str) -> BridgeRequestError:
        """
        Map an HTTP error response to a BridgeRequestError.

        Args:
            response: HTTP response object
            action: What was being attempted, for the message

        Returns:
            BridgeRequestError carrying status and bridge error code
        """
        try:
            body = ErrorResponse.model_validate(response.json())
            detail, code = body.message, body.code
        except ValueError:
            detail = response.text or 'Unknown error'
            code = 'UNKNOWN'

        status_messages = {
            400: 'Bad request',
            401: 'Not authenticated',
            403: 'Access forbidden',
            404: 'Not found',
            429: 'Rate limited',
            500: 'Bridge error',
            503: 'Bridge unavailable',
        }
        summary = status_messages.get(response.status_code, f"HTTP {response.status_code}")
        return BridgeRequestError(
            f"Failed to {action}: {summary}: {detail}",
            status_code=response.status_code,
            code=code
        )

    async def create_token(self, bucket_id: str, file_name: str) -> AccessToken:
        """
        Request a PULL token for one file.

        Args:
            bucket_id: Bucket holding the file
            file_name: File to authorize

        Returns:
            AccessToken scoped to the bucket

        Raises:
            BridgeRequestError: If the bridge refuses or returns a malformed body
        """
        logger.info(f"Requesting token [bucket={bucket_id}, file={file_name}]")
        response = await self._request_with_retry(
            'POST',
            f'/buckets/{quote(bucket_id, safe="")}/tokens',
            json={'operation': 'PULL', 'file': file_name}
        )

        if response.status_code not in (200, 201):
            raise self._error_from_response(response, f"create token for {file_name}")

        try:
            return TokenResponse.model_validate(response.json()).to_access_token()
        except ValueError as e:
            raise BridgeRequestError(
                f"Malformed token response from bridge: {e}",
                status_code=response.status_code,
                code='MALFORMED_RESPONSE'
            ) from e

    async def get_file_pointers(
        self,
        bucket_id: str,
        file_name: str,
        token: Union[AccessToken, str]
    ) -> List[Pointer]:
        """
        Retrieve the ordered pointer list for a file, page by page.

        Args:
            bucket_id: Bucket holding the file
            file_name: File whose shards are wanted
            token: Token issued by create_token

        Returns:
            Pointers in the order the bridge serves them

        Raises:
            BridgeRequestError: If any page fails or is malformed
        """
        token_value = token.token if isinstance(token, AccessToken) else token
        endpoint = f'/buckets/{quote(bucket_id, safe="")}/files/{quote(file_name, safe="")}'
        limit = self.config.pointer_page_size

        pointers: List[Pointer] = []
        skip = 0
        while True:
            response = await self._request_with_retry(
                'GET',
                endpoint,
                params={'skip': skip, 'limit': limit},
                headers={'x-token': token_value}
            )

            if response.status_code != 200:
                raise self._error_from_response(response, f"get pointers for {file_name}")

            try:
                body = response.json()
                if not isinstance(body, list):
                    raise ValueError("expected a JSON list of pointers")
                page = [PointerResponse.model_validate(item).to_pointer() for item in body]
            except ValueError as e:
                raise BridgeRequestError(
                    f"Malformed pointer response from bridge: {e}",
                    status_code=response.status_code,
                    code='MALFORMED_RESPONSE'
                ) from e

            pointers.extend(page)
            if len(page) < limit:
                break
            skip += len(page)

        logger.info(f"Resolved {len(pointers)} pointer(s) [bucket={bucket_id}, file={file_name}]")
        return pointers

    async def resolve_file_from_pointers(
        self,
        pointers: Sequence[Pointer],
        store: ChunkStore,
        on_chunk: Optional[Callable[[int], None]] = None
    ) -> int:
        """
        Fetch every shard in pointer order and put it into the store.

        Shard n of the list is stored at index n.

        Args:
            pointers: Ordered pointer list
            store: Destination chunk store
            on_chunk: Called with the size of every received piece

        Returns:
            Total number of bytes stored

        Raises:
            BridgeRequestError: If a farmer fails
            OSError: If the store cannot persist a shard
        """
        total = 0
        for position, pointer in enumerate(pointers):
            logger.debug(f"Streaming shard {position + 1}/{len(pointers)} [hash={pointer.hash}]")
            data = await self.shards.fetch_shard(pointer, on_piece=on_chunk)
            store.put(position, data)
            total += len(data)
        return total

    async def close(self) -> None:
        """Close bridge and farmer HTTP sessions."""
        await self.session.aclose()
        await self.shards.close()
