import logging
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from starlette.concurrency import run_in_threadpool

from receiptbot.exceptions import InsufficientInputError
from receiptbot.models.schema import RawImage
from receiptbot.pipeline.receipt_pipeline import PipelineResult, ReceiptPipeline
from receiptbot.services.diagnostics import ProviderCheck, ProviderDiagnostics

logger = logging.getLogger(__name__)

router = APIRouter()

GENERIC_FAILURE_DETAIL = "could not process receipt"


def get_pipeline(request: Request) -> ReceiptPipeline:
    return request.app.state.pipeline


@router.post("/receipts/analyze", response_model=PipelineResult)
async def analyze_receipt(
    file: UploadFile = File(...),
    pipeline: ReceiptPipeline = Depends(get_pipeline),
):
    """Interpret an uploaded receipt photo into an expense draft."""
    file_content = await file.read()
    if not file_content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    image = RawImage(data=file_content, media_type=file.content_type or "application/octet-stream")
    logger.info(f"Receipt upload: {file.filename} ({len(file_content)} bytes)")

    try:
        return await run_in_threadpool(pipeline.process, image)
    except InsufficientInputError as exc:
        logger.info(f"Receipt rejected: {exc}")
        raise HTTPException(status_code=422, detail=GENERIC_FAILURE_DETAIL) from exc
    except Exception as exc:
        logger.exception(f"Receipt processing failed unexpectedly: {exc}")
        raise HTTPException(status_code=500, detail=GENERIC_FAILURE_DETAIL) from exc


@router.get("/diagnostics/providers", response_model=List[ProviderCheck])
async def provider_diagnostics(pipeline: ReceiptPipeline = Depends(get_pipeline)):
    """Smoke-test every configured OCR and analysis provider."""
    diagnostics = ProviderDiagnostics(pipeline.ocr_chain, pipeline.analysis_chain)
    return await run_in_threadpool(diagnostics.run)
