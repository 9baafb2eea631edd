import structlog
from fastapi import APIRouter, Depends, HTTPException

from ....application.use_cases.ask_tutor import AskTutor
from ....infrastructure.metrics import tutor_requests_total
from ....infrastructure.tutor_client import GeminiTutorClient, TutorServiceError
from ..schemas import AskReq, AskResp

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["tutor"])

async def get_tutor_client():
    client = GeminiTutorClient()
    try:
        yield client
    finally:
        await client.aclose()

@router.post("/ask", response_model=AskResp)
async def ask(payload: AskReq, client: GeminiTutorClient = Depends(get_tutor_client)):
    try:
        reply = await AskTutor(client).execute(payload.prompt or "")
    except ValueError as e:
        tutor_requests_total.labels(outcome="rejected").inc()
        raise HTTPException(status_code=400, detail=str(e))
    except TutorServiceError as e:
        tutor_requests_total.labels(outcome="failed").inc()
        logger.error("tutor_call_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to get response from AI")
    tutor_requests_total.labels(outcome="ok").inc()
    return AskResp(reply=reply)
