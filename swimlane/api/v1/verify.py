from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from swimlane.db import QueryProxy, get_query_proxy
from swimlane.services.verify_service import VerifyService
from swimlane.schemas.verify import VerifyResponse

router = APIRouter(
    prefix="/verify",
    tags=["verify"],
)


@router.get("", response_model=VerifyResponse)
async def verify_api(db: QueryProxy = Depends(get_query_proxy)):
    """Check that the persistence backend can be reached, read and written"""
    result = await VerifyService.verify(db=db)
    if result["status"] != "success":
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=VerifyResponse(**result).model_dump()
        )
    return result
