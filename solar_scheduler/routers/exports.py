from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from solar_scheduler.deps.auth import get_request_context
from solar_scheduler.services import export_service
from solar_scheduler.services.context import RequestContext
from solar_scheduler.services.export_service import ExportResult

router = APIRouter(prefix="/exports", tags=["Exports"])


def _download(result: ExportResult) -> StreamingResponse:
    return StreamingResponse(
        iter([result.content]),
        media_type=result.media_type,
        headers={"Content-Disposition": f"attachment; filename={result.filename}"},
    )


@router.get("/jobs")
def export_jobs(
    format: str = "csv",
    include_details: bool = True,
    ctx: RequestContext = Depends(get_request_context),
):
    return _download(export_service.export_jobs(ctx, format, include_details=include_details))


@router.get("/customers")
def export_customers(
    format: str = "csv",
    include_job_history: bool = True,
    ctx: RequestContext = Depends(get_request_context),
):
    return _download(export_service.export_customers(ctx, format, include_job_history=include_job_history))


@router.get("/equipment")
def export_equipment(format: str = "csv", ctx: RequestContext = Depends(get_request_context)):
    return _download(export_service.export_equipment(ctx, format))


@router.get("/business_report")
def export_business_report(format: str = "csv", ctx: RequestContext = Depends(get_request_context)):
    return _download(export_service.export_business_report(ctx, format))
