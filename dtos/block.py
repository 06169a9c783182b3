from pydantic import BaseModel, ConfigDict


class BlockHeader(BaseModel):
    chain_id: str = ""
    height: int
    time: str | None = None
    # hex encoded consensus address of the proposer
    proposer_address: str


class Block(BaseModel):
    model_config = ConfigDict(ser_json_bytes="base64")

    header: BlockHeader
    txs: list[bytes] = []
