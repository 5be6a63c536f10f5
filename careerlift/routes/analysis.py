"""
Resume Analysis Routes

Endpoints for:
- Analyzing resume text against a career goal
- Uploading a resume file for text extraction (and optional analysis)
- Reading a user's stored analyses
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from careerlift.config import get_settings
from careerlift.dependencies import get_analysis_service, get_analysis_store, get_gemini_client
from careerlift.errors import CareerLiftError, InvalidRequest, describe
from careerlift.middleware.auth import get_optional_user_id, get_user_id
from careerlift.schemas.analysis import AnalyzeRequest, UploadResumeResponse
from careerlift.services.analysis_service import AnalysisService
from careerlift.services.analysis_store import AnalysisStore
from careerlift.services.gemini_client import GeminiClient
from careerlift.utils.file_handler import read_upload
from careerlift.utils.logger import get_logger

router = APIRouter()
logger = get_logger("routes.analysis")
limiter = Limiter(key_func=get_remote_address)


@router.post("/analyze")
async def analyze_resume(
    body: AnalyzeRequest,
    user_id: Optional[str] = Depends(get_optional_user_id),
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    Score resume text against a career goal.
    Returns the AnalysisResult with server timestamp and careerGoal.
    """
    run = await service.analyze(body.resume_text, body.career_goal, user_id=user_id)
    return run.result.to_response()


@router.post("/upload-resume")
@limiter.limit("10/minute")
async def upload_resume(
    request: Request,
    file: Optional[UploadFile] = File(None),
    career_goal: Optional[str] = Form(None, alias="careerGoal"),
    user_id: Optional[str] = Depends(get_optional_user_id),
    gemini: GeminiClient = Depends(get_gemini_client),
    service: AnalysisService = Depends(get_analysis_service),
):
    """Extract resume text from an uploaded file; analyze it too when careerGoal is given.

    Rate limited to 10 uploads per minute per IP address.
    """
    data, mime_type = await read_upload(file, get_settings().max_upload_bytes)
    logger.info(f"[upload-resume] file={file.filename} size={len(data)} careerGoal=\"{career_goal or ''}\"")

    try:
        text = await gemini.extract_text_from_file(data, mime_type)

        analysis = None
        if career_goal:
            logger.info(f"[upload-resume] running analysis for careerGoal=\"{career_goal}\"")
            run = await service.analyze(text, career_goal, user_id=user_id)
            analysis = run.result
    except InvalidRequest:
        raise
    except CareerLiftError as e:
        logger.error(f"[upload-resume] error: {e}", extra={"error_type": type(e).__name__})
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process uploaded resume.", "details": jsonable_encoder(describe(e))},
        )

    logger.info(f"[upload-resume] success file={file.filename} chars={len(text)}")
    return UploadResumeResponse(extracted_text=text, character_count=len(text), analysis=analysis).model_dump(by_alias=True)


@router.get("/analyses")
async def list_analyses(
    limit: int = 20,
    user_id: str = Depends(get_user_id),
    store: AnalysisStore = Depends(get_analysis_store),
):
    """User's analyses, newest first"""
    limit = max(1, min(limit, 100))
    return {"analyses": await store.list_for_user(user_id, limit=limit)}


@router.get("/analyses/latest")
async def latest_analysis(
    user_id: str = Depends(get_user_id),
    store: AnalysisStore = Depends(get_analysis_store),
):
    latest = await store.latest_for_user(user_id)
    if latest is None:
        raise HTTPException(status_code=404, detail="No analysis found")
    return latest
