from fastapi import APIRouter, Request, HTTPException, Path

from dtos.transaction import BlockTransactions
from services.errors import NodeError

router = APIRouter(
    prefix="/v1/blocks",
    tags=["Blocks"],
    responses={502: {"description": "Node error"}},
)


@router.get("/{height}/txs", response_model=BlockTransactions)
async def get_block_txs(request: Request, height: int = Path(gt=0)):
    node = request.app.node
    try:
        block = await node.block(height)
        return await node.decode_block_transactions(block)
    except NodeError as e:
        raise HTTPException(status_code=502, detail=str(e))
