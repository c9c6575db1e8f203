import mimetypes

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_ai, get_kv, get_orchestrator, get_storage
from config import settings
from models.requests import SuggestionRequest
from models.responses import AnalyzeResponse, ReviewResponse, SuggestionsResponse
from models.schemas.suggestion import SuggestionOutcome
from services import resume_review, suggestion_manager
from services.gateways.base import AIGateway, KeyValueGateway, SourceFile, StorageGateway
from services.pipeline.errors import (
    ConversionFailure,
    ExtractionFailure,
    PersistenceFailure,
    StageFailure,
    TransportFailure,
)
from services.pipeline.orchestrator import AnalysisOrchestrator
from services.pipeline.stages import STATUS_TEXT, Stage

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)

FAILURE_STATUS_CODES = {
    TransportFailure: 502,
    ConversionFailure: 422,
    ExtractionFailure: 502,
    PersistenceFailure: 500,
}

MAX_FAILURE_DETAIL_CHARS = 2000


def _outcome_key(category: str, index: int) -> str:
    return f"{category}:{index}"


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "gemini_configured": bool(settings.gemini_api_key),
    }


@router.post("/analyze", response_model=AnalyzeResponse)
@limiter.limit("10/minute")
async def analyze(
    request: Request,
    resume_file: UploadFile = File(...),
    company_name: str = Form(""),
    job_title: str = Form(""),
    job_description: str = Form(""),
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    # Validate file type
    if not resume_file.filename or not resume_file.filename.lower().endswith(".pdf"):
        raise HTTPException(status_code=400, detail="Only PDF files are accepted")

    # Read and validate size
    content = await resume_file.read()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size: {settings.max_upload_size_mb}MB",
        )
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    if len(job_description) > settings.max_job_description_chars:
        raise HTTPException(
            status_code=400,
            detail=f"Job description too long (max {settings.max_job_description_chars} chars)",
        )

    source = SourceFile(
        name=resume_file.filename,
        data=content,
        content_type=resume_file.content_type or "application/pdf",
    )
    try:
        record_id = await orchestrator.run(source, company_name, job_title, job_description)
    except StageFailure as failure:
        raise HTTPException(
            status_code=FAILURE_STATUS_CODES.get(type(failure), 500),
            detail={
                "stage": failure.stage.value,
                "status": failure.reason,
                "detail": (failure.detail or "")[:MAX_FAILURE_DETAIL_CHARS] or None,
            },
        )

    return AnalyzeResponse(id=record_id, status=STATUS_TEXT[Stage.COMPLETE])


async def _review_or_404(
    record_id: str, kv: KeyValueGateway, storage: StorageGateway
) -> resume_review.ResumeReview:
    review = await resume_review.load_review(record_id, kv, storage)
    if review is None:
        raise HTTPException(status_code=404, detail="Resume not found")
    return review


@router.get("/resume/{record_id}", response_model=ReviewResponse)
async def get_review(
    record_id: str,
    kv: KeyValueGateway = Depends(get_kv),
    storage: StorageGateway = Depends(get_storage),
):
    review = await _review_or_404(record_id, kv, storage)
    record = review.record
    return ReviewResponse(
        id=record.id,
        company_name=record.company_name,
        job_title=record.job_title,
        job_description=record.job_description,
        feedback=review.feedback,
        has_preview=review.has_preview,
    )


async def _artifact(record_id: str, kind: str, kv: KeyValueGateway, storage: StorageGateway) -> Response:
    record = await resume_review.load_record(record_id, kv)
    if record is None:
        raise HTTPException(status_code=404, detail="Resume not found")
    ref = record.resume_path if kind == "file" else record.image_path
    data = await storage.read(ref)
    if data is None:
        raise HTTPException(status_code=404, detail=f"Stored {kind} not found")
    media_type, _ = mimetypes.guess_type(ref)
    return Response(content=data, media_type=media_type or "application/octet-stream")


@router.get("/resume/{record_id}/file")
async def get_resume_file(
    record_id: str,
    kv: KeyValueGateway = Depends(get_kv),
    storage: StorageGateway = Depends(get_storage),
):
    return await _artifact(record_id, "file", kv, storage)


@router.get("/resume/{record_id}/image")
async def get_resume_image(
    record_id: str,
    kv: KeyValueGateway = Depends(get_kv),
    storage: StorageGateway = Depends(get_storage),
):
    return await _artifact(record_id, "image", kv, storage)


@router.post("/resume/{record_id}/suggestions", response_model=SuggestionOutcome)
async def request_suggestion(
    record_id: str,
    body: SuggestionRequest,
    kv: KeyValueGateway = Depends(get_kv),
    ai: AIGateway | None = Depends(get_ai),
):
    record = await resume_review.load_record(record_id, kv)
    if record is None:
        raise HTTPException(status_code=404, detail="Resume not found")
    if not record.feedback:
        raise HTTPException(status_code=404, detail="Resume has not been analyzed yet")

    category = record.feedback.category(body.category)
    if category is None or body.index >= len(category.tips):
        raise HTTPException(status_code=404, detail="Tip not found")
    tip = category.tips[body.index]
    if tip.type != "improve":
        raise HTTPException(status_code=400, detail="Suggestions are only available for improve tips")

    manager = suggestion_manager.get_manager(record_id, ai, record.resume_path)
    key = _outcome_key(body.category, body.index)
    if not await manager.request(key, tip):
        raise HTTPException(status_code=409, detail="Another suggestion is being generated")
    return manager.outcome(key)


@router.get("/resume/{record_id}/suggestions", response_model=SuggestionsResponse)
async def list_suggestions(
    record_id: str,
    kv: KeyValueGateway = Depends(get_kv),
):
    record = await resume_review.load_record(record_id, kv)
    if record is None:
        raise HTTPException(status_code=404, detail="Resume not found")
    manager = suggestion_manager.peek(record_id)
    if manager is None:
        return SuggestionsResponse()
    return SuggestionsResponse(pending=manager.pending_key, outcomes=manager.outcomes)
