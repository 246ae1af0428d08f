from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, Response, UploadFile
import logging

from verifyai.dependencies.auth import verify_token
from verifyai.exceptions import (
    ExtractionError,
    InvalidStateError,
    SessionBusyError,
    SessionError,
    SessionNotFoundError,
)
from verifyai.schemas.session_schemas import (
    AnalyzeRequest,
    ApplySuggestionRequest,
    SelectSegmentRequest,
    SessionState,
)
from verifyai.services.analysis_session import AnalysisSession
from verifyai.services.session_store import SessionStore, get_session_store
from verifyai.utils.file_utils import extract_text_from_file
from verifyai.utils.gemini_client import get_gemini_client
from verifyai.utils.report_utils import build_integrity_report

router = APIRouter(prefix="/sessions", tags=["analysis-sessions"])

logger = logging.getLogger("analysis_router")


def get_store() -> SessionStore:
    return get_session_store()


def get_analysis_service():
    return get_gemini_client()


def _http_error(e: SessionError) -> HTTPException:
    if isinstance(e, SessionNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, (SessionBusyError, InvalidStateError)):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


def _load(store: SessionStore, session_id: str) -> AnalysisSession:
    try:
        return store.get(session_id)
    except SessionNotFoundError as e:
        raise _http_error(e)


@router.post("", response_model=SessionState, status_code=201)
async def create_session(
    store: SessionStore = Depends(get_store),
    service=Depends(get_analysis_service),
    current_user=Depends(verify_token),
):
    session = store.create(service=service)
    return session.snapshot()


@router.get("/{session_id}", response_model=SessionState)
async def get_session(
    session_id: str,
    store: SessionStore = Depends(get_store),
    current_user=Depends(verify_token),
):
    return _load(store, session_id).snapshot()


@router.delete("/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    store: SessionStore = Depends(get_store),
    current_user=Depends(verify_token),
):
    try:
        store.delete(session_id)
    except SessionNotFoundError as e:
        raise _http_error(e)
    return Response(status_code=204)


@router.post("/{session_id}/analysis", response_model=SessionState)
async def start_analysis(
    session_id: str,
    body: AnalyzeRequest,
    background_tasks: BackgroundTasks,
    response: Response,
    store: SessionStore = Depends(get_store),
    current_user=Depends(verify_token),
):
    session = _load(store, session_id)
    try:
        request = session.begin_analysis(body.text)
    except SessionError as e:
        raise _http_error(e)

    if body.wait:
        await session.complete_analysis(request)
        return session.snapshot()

    background_tasks.add_task(session.complete_analysis, request)
    response.status_code = 202
    return session.snapshot()


@router.post("/{session_id}/upload", response_model=SessionState)
async def upload_document(
    session_id: str,
    file: UploadFile = File(...),
    store: SessionStore = Depends(get_store),
    current_user=Depends(verify_token),
):
    session = _load(store, session_id)
    raw = await file.read()
    try:
        text = extract_text_from_file(raw, file.filename or "")
        session.set_input(text)
    except ExtractionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SessionError as e:
        raise _http_error(e)
    return session.snapshot()


@router.post("/{session_id}/selection", response_model=SessionState)
async def select_segment(
    session_id: str,
    body: SelectSegmentRequest,
    store: SessionStore = Depends(get_store),
    current_user=Depends(verify_token),
):
    session = _load(store, session_id)
    try:
        session.select_segment(body.segmentIndex)
    except SessionError as e:
        raise _http_error(e)
    return session.snapshot()


@router.delete("/{session_id}/selection", response_model=SessionState)
async def clear_selection(
    session_id: str,
    store: SessionStore = Depends(get_store),
    current_user=Depends(verify_token),
):
    session = _load(store, session_id)
    try:
        session.clear_selection()
    except SessionError as e:
        raise _http_error(e)
    return session.snapshot()


@router.post("/{session_id}/segments/{segment_index}/apply", response_model=SessionState)
async def apply_suggestion(
    session_id: str,
    segment_index: int,
    body: ApplySuggestionRequest,
    store: SessionStore = Depends(get_store),
    current_user=Depends(verify_token),
):
    session = _load(store, session_id)
    try:
        session.apply_suggestion(segment_index, body.choiceIndex)
    except SessionError as e:
        raise _http_error(e)
    return session.snapshot()


@router.post("/{session_id}/apply-all", response_model=SessionState)
async def apply_all_suggestions(
    session_id: str,
    store: SessionStore = Depends(get_store),
    current_user=Depends(verify_token),
):
    session = _load(store, session_id)
    try:
        changed = session.apply_all_suggestions()
    except SessionError as e:
        raise _http_error(e)
    logger.info(f"Session {session_id}: bulk-applied {changed} suggestion(s)")
    return session.snapshot()


@router.post("/{session_id}/reset", response_model=SessionState)
async def reset_session(
    session_id: str,
    store: SessionStore = Depends(get_store),
    current_user=Depends(verify_token),
):
    session = _load(store, session_id)
    session.reset()
    return session.snapshot()


@router.get("/{session_id}/report")
async def export_report(
    session_id: str,
    store: SessionStore = Depends(get_store),
    current_user=Depends(verify_token),
):
    session = _load(store, session_id)
    if session.result is None:
        raise HTTPException(status_code=409, detail="No analysis result to export")

    pdf = build_integrity_report(session.result)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="VerifyAI_Report.pdf"'},
    )
