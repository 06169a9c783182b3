import itertools
import logging

import httpx
from pydantic import ValidationError

from config import CONFIG
from dtos.transaction import Transaction
from services.errors import NodeRpcError
from utils.deserializers import (
    deserialize_block,
    deserialize_genesis_chunk,
    deserialize_validators,
)

logger = logging.getLogger(__name__)


class NodeRpcClient:
    """Thin async client over the CometBFT JSON-RPC endpoint and the Cosmos REST API."""

    def __init__(self, rpc_url=None, api_url=None, transport=None):
        self.url = rpc_url or CONFIG.rpc_url
        self.api_url = (api_url or CONFIG.api_url).rstrip("/")
        self.client = httpx.AsyncClient(
            timeout=CONFIG.rpc_timeout,
            limits=httpx.Limits(max_connections=CONFIG.max_connections),
            transport=transport,
        )
        self._ids = itertools.count(1)

    async def close(self):
        await self.client.aclose()

    async def call(self, method: str, params: dict):
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        try:
            response = await self.client.post(self.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise NodeRpcError(f"{method} request failed: {e}") from e

        error = body.get("error")
        if error:
            message = error.get("message", "")
            if error.get("data"):
                message = f"{message}: {error['data']}"
            raise NodeRpcError(f"{method} returned error {error.get('code')}: {message}")
        if "result" not in body:
            raise NodeRpcError(f"{method} returned no result")
        return body["result"]

    async def get_genesis(self) -> dict:
        result = await self.call("genesis", {})
        return self._deserialize(lambda r: r["genesis"], result, "genesis")

    async def get_genesis_chunk(self, index: int):
        # cometbft expects integer params as strings
        result = await self.call("genesis_chunked", {"chunk": str(index)})
        return self._deserialize(deserialize_genesis_chunk, result, "genesis_chunked")

    async def get_validators(self, height: int, page: int, per_page: int):
        result = await self.call(
            "validators",
            {"height": str(height), "page": str(page), "per_page": str(per_page)},
        )
        return self._deserialize(deserialize_validators, result, "validators")

    async def get_block(self, height: int):
        result = await self.call("block", {"height": str(height)})
        return self._deserialize(deserialize_block, result, "block")

    async def get_tx(self, hash: str) -> Transaction:
        try:
            response = await self.client.get(
                f"{self.api_url}/cosmos/tx/v1beta1/txs/{hash}"
            )
        except httpx.HTTPError as e:
            raise NodeRpcError(f"tx {hash} request failed: {e}") from e

        if response.status_code != httpx.codes.OK:
            raise NodeRpcError(
                f"request failed with status code: {response.status_code}"
            )

        try:
            return Transaction.model_validate_json(response.content)
        except ValidationError as e:
            raise NodeRpcError(f"error converting transaction: {e}") from e

    @staticmethod
    def _deserialize(deserializer, result, method):
        try:
            return deserializer(result)
        except (KeyError, TypeError, ValidationError) as e:
            logger.debug("unexpected %s result: %r", method, result)
            raise NodeRpcError(f"unexpected {method} result: {e}") from e
