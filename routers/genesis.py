from fastapi import APIRouter, Request, HTTPException

from services.errors import NodeError

router = APIRouter(
    prefix="/v1/genesis",
    tags=["Genesis"],
    responses={502: {"description": "Node error"}},
)


@router.get("")
async def get_genesis(request: Request):
    try:
        return await request.app.node.genesis()
    except NodeError as e:
        raise HTTPException(status_code=502, detail=str(e))
