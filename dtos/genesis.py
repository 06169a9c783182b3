from pydantic import BaseModel


class GenesisChunk(BaseModel):
    index: int
    total_chunks: int
    # base64 encoded slice of the genesis document
    data: str
