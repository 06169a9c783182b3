import base64
import binascii

from dtos.block import Block, BlockHeader
from dtos.genesis import GenesisChunk
from dtos.validator import Validator, ValidatorPage
from services.errors import NodeRpcError


def deserialize_genesis_chunk(result):
    return GenesisChunk(
        index=result["chunk"],
        total_chunks=result["total"],
        data=result["data"],
    )


def deserialize_validators(result):
    validators = []
    for val in result.get("validators") or []:
        validators.append(
            Validator(
                address=val["address"],
                pub_key=val.get("pub_key"),
                voting_power=val.get("voting_power", 0),
                proposer_priority=val.get("proposer_priority", 0),
            )
        )
    return ValidatorPage(
        block_height=result["block_height"],
        validators=validators,
        count=result["count"],
        total=result["total"],
    )


def deserialize_block(result):
    block = result["block"]
    header = block["header"]
    txs = []
    for i, encoded in enumerate((block.get("data") or {}).get("txs") or []):
        try:
            txs.append(base64.b64decode(encoded, validate=True))
        except binascii.Error as e:
            raise NodeRpcError(f"invalid encoding for tx {i} in block: {e}") from e
    return Block(
        header=BlockHeader(
            chain_id=header.get("chain_id", ""),
            height=header["height"],
            time=header.get("time"),
            proposer_address=header.get("proposer_address", ""),
        ),
        txs=txs,
    )
