"""Shared fixtures: an in-memory node client and presentation builders."""
import base64
import json

import pytest

from dtos.block import Block, BlockHeader
from dtos.genesis import GenesisChunk
from dtos.transaction import Transaction, Tx, TxBody, TxResponse
from dtos.validator import Validator, ValidatorPage
from services.errors import NodeRpcError

PROPOSER = "3A6F1C2B4D5E6F708192A3B4C5D6E7F801234567"


def encode_disclosure(salt, name, value):
    raw = json.dumps([salt, name, value]).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def make_presentation(*claims, jwt="eyJhbGciOiJFUzI1NiJ9.eyJpc3MiOiJkY2hhaW4ifQ.c2ln"):
    disclosures = [encode_disclosure(f"salt{i}", n, v) for i, (n, v) in enumerate(claims)]
    return "~".join([jwt, *disclosures, ""])


def make_block(height, txs, proposer=PROPOSER):
    return Block(
        header=BlockHeader(
            chain_id="dchain-1",
            height=height,
            time="2026-01-01T00:00:00Z",
            proposer_address=proposer,
        ),
        txs=txs,
    )


def split_genesis(document: bytes, size: int):
    pieces = [document[i : i + size] for i in range(0, len(document), size)] or [b""]
    return [base64.b64encode(p).decode() for p in pieces]


class FakeNodeClient:
    """Serves canned node responses and records every request."""

    def __init__(self, chunks=None, validators=None, genesis=None, txs=None):
        self.chunks = chunks or []
        self.validators = validators or []
        self.genesis_doc = genesis
        self.txs = txs or {}
        self.blocks = {}
        self.calls = []
        self.failures = {}
        self.totals = {}
        self.closed = False

    def fail(self, key, message="boom"):
        self.failures[key] = message

    def _check(self, key):
        self.calls.append(key)
        if key in self.failures:
            raise NodeRpcError(self.failures[key])

    async def close(self):
        self.closed = True

    async def get_genesis(self):
        self._check(("genesis",))
        return self.genesis_doc

    async def get_genesis_chunk(self, index):
        self._check(("chunk", index))
        if index >= len(self.chunks):
            raise NodeRpcError(f"there are {len(self.chunks)} chunks, {index} is invalid")
        return GenesisChunk(index=index, total_chunks=len(self.chunks), data=self.chunks[index])

    async def get_validators(self, height, page, per_page):
        self._check(("validators", height, page))
        start = (page - 1) * per_page
        vals = self.validators[start : start + per_page]
        return ValidatorPage(
            block_height=height,
            validators=vals,
            count=len(vals),
            total=self.totals.get(page, len(self.validators)),
        )

    async def get_block(self, height):
        self._check(("block", height))
        return self.blocks[height]

    async def get_tx(self, hash):
        self._check(("tx", hash))
        if hash not in self.txs:
            raise NodeRpcError("request failed with status code: 404")
        return self.txs[hash]


def make_validators(n):
    return [Validator(address=f"{i:040X}", voting_power=10) for i in range(n)]


def make_tx(height, txhash):
    return Transaction(
        tx=Tx(body=TxBody(messages=[{"@type": "/cosmos.bank.v1beta1.MsgSend"}])),
        tx_response=TxResponse(height=height, txhash=txhash),
    )


@pytest.fixture
def client():
    return FakeNodeClient()
