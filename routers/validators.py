from fastapi import APIRouter, Request, HTTPException, Path

from dtos.validator import ValidatorPage
from services.errors import NodeError

router = APIRouter(
    prefix="/v1/validators",
    tags=["Validators"],
    responses={502: {"description": "Node error"}},
)


@router.get("/{height}", response_model=ValidatorPage)
async def get_validators(request: Request, height: int = Path(gt=0)):
    try:
        return await request.app.node.collect_validators(height)
    except NodeError as e:
        raise HTTPException(status_code=502, detail=str(e))
