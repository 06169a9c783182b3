import enum
import hashlib
import json
import logging

from config import CONFIG
from dtos.transaction import BlockTransactions, FailedTransaction
from services.errors import NodeError, NodeRpcError, ParseError
from services.genesis import GenesisChunkReconstructor
from services.presentation import PresentationTxSynthesizer
from services.validators import ValidatorSetCollector

logger = logging.getLogger(__name__)

CHUNKED_GENESIS_HINT = "use the genesis_chunked API instead"


class TxKind(enum.Enum):
    STANDARD = "standard"
    PRESENTATION = "presentation"


def classify_transaction(position: int, raw: bytes, presentation_index: int = 0) -> TxKind:
    """Decide how a raw block transaction is decoded.

    DChain always places the verifiable presentation at a fixed position in
    the block, the content itself is not inspected.
    """
    if position == presentation_index:
        return TxKind.PRESENTATION
    return TxKind.STANDARD


def tx_hash(raw: bytes) -> str:
    return hashlib.sha256(raw).hexdigest().upper()


class Node:
    """Reconstructs genesis, validator sets and block transactions from a DChain node."""

    def __init__(
        self,
        client,
        synthesizer=None,
        per_page=None,
        genesis_concurrency=None,
        presentation_index=None,
        strict=None,
    ):
        self.client = client
        self.synthesizer = synthesizer or PresentationTxSynthesizer(
            type_url=CONFIG.vp_type_url,
            memo=CONFIG.vp_memo,
            valoper_prefix=CONFIG.valoper_prefix,
        )
        self.reconstructor = GenesisChunkReconstructor(
            client,
            concurrency=(
                CONFIG.genesis_fetch_concurrency
                if genesis_concurrency is None
                else genesis_concurrency
            ),
        )
        self.collector = ValidatorSetCollector(
            client,
            per_page=CONFIG.validators_per_page if per_page is None else per_page,
        )
        self.presentation_index = (
            CONFIG.presentation_tx_index
            if presentation_index is None
            else presentation_index
        )
        self.strict = CONFIG.strict_presentations if strict is None else strict

    async def close(self):
        await self.client.close()

    async def genesis(self) -> dict:
        try:
            return await self.client.get_genesis()
        except NodeRpcError as e:
            if CHUNKED_GENESIS_HINT not in str(e):
                raise
            logger.info("genesis too large for a single response, switching to chunks")

        bz = await self.reconstruct_genesis()
        try:
            return json.loads(bz)
        except ValueError as e:
            raise ParseError(f"malformed genesis document: {e}") from e

    async def reconstruct_genesis(self) -> bytes:
        return await self.reconstructor.fetch_and_assemble(0)

    async def collect_validators(self, height: int):
        return await self.collector.collect(height)

    async def block(self, height: int):
        return await self.client.get_block(height)

    async def decode_block_transactions(self, block) -> BlockTransactions:
        result = BlockTransactions(height=block.header.height)
        for i, raw in enumerate(block.txs):
            kind = classify_transaction(i, raw, self.presentation_index)
            if kind is TxKind.STANDARD:
                result.transactions.append(await self.client.get_tx(tx_hash(raw)))
                continue

            try:
                result.transactions.append(self.synthesizer.synthesize(raw, block))
            except NodeError as e:
                if self.strict:
                    raise
                logger.warning(
                    "failed to synthesize presentation tx %d at height %d: %s",
                    i,
                    block.header.height,
                    e,
                )
                result.transactions.append(
                    FailedTransaction(position=i, hash=tx_hash(raw), error=str(e))
                )
        return result
