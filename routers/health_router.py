from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from dependencies.race_dependencies import get_readiness
from service.readiness import ReadinessFlag

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz(readiness: ReadinessFlag = Depends(get_readiness)) -> JSONResponse:
    """Readiness check: 200 once the server is listening, 503 before."""
    if readiness.is_ready():
        return JSONResponse(status_code=200, content={"status": "OK"})
    return JSONResponse(status_code=503, content={"status": "Unavailable"})
