from fastapi import APIRouter

from app.core.responses import ApiResponse, ok

router = APIRouter(prefix="/healthcheck", tags=["healthcheck"])


@router.get("", summary="État du service", response_model=ApiResponse[dict])
def healthcheck():
    return ok({"status": "OK"}, "Service is healthy")
