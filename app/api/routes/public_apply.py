from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.uploads import read_intake_form
from app.schemas.response import ApplyOut
from app.services.intake import run_intake

router = APIRouter(prefix="/apply", tags=["apply"])


def _request_base_url(request: Request) -> str:
    host = request.headers.get("host") or request.url.netloc
    return f"{request.url.scheme}://{host}"


@router.post("", response_model=ApplyOut)
async def apply(request: Request, session: AsyncSession = Depends(deps.get_db_session)):
    fields, resume = await read_intake_form(request)
    result = await run_intake(
        session,
        fields=fields,
        resume=resume,
        query=request.query_params,
        base_url=_request_base_url(request),
    )
    payload = ApplyOut(resume_link=result.resume_link).model_dump(by_alias=True)
    return JSONResponse(content=payload, status_code=status.HTTP_200_OK)
