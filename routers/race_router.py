from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from models.exceptions import RaceNotFound, StoreUnavailable
from models.race import CapturedCheckpoint, Race
from dependencies.race_dependencies import get_race_service
from routers.responses import PrettyJSONResponse
from service.race_service import RaceService

router = APIRouter(prefix="/races", tags=["races"])

RACE_NOT_FOUND = "Race not found"
DATABASE_ERROR = "Database error"
INCORRECT_BODY = "Incorrect body"


@router.get("/{race_id}", response_model=Race, response_class=PrettyJSONResponse)
def get_race(race_id: str, service: RaceService = Depends(get_race_service)) -> Race:
    """
    Get the checkpoints captured on a race.

    An unknown race id returns an empty race; nothing is created by reading.
    """
    try:
        return service.get_or_placeholder(race_id)
    except StoreUnavailable:
        raise HTTPException(status_code=500, detail=DATABASE_ERROR)


@router.post("/{race_id}", response_model=Race, response_class=PrettyJSONResponse)
def create_race(race_id: str, response: Response, service: RaceService = Depends(get_race_service)) -> Race:
    """
    Register a race so checkpoints can be recorded on it.

    PUT never creates a race, so this is the only way a race comes to exist.
    Returns 201 when the race was created, 200 with the stored race when it already existed.
    """
    try:
        race, created = service.create_race(race_id)
    except RaceNotFound:
        raise HTTPException(status_code=404, detail=RACE_NOT_FOUND)
    except StoreUnavailable:
        raise HTTPException(status_code=500, detail=DATABASE_ERROR)

    response.status_code = 201 if created else 200
    return race


@router.put("/{race_id}", response_model=Race, response_class=PrettyJSONResponse)
async def record_checkpoint(
    race_id: str,
    request: Request,
    service: RaceService = Depends(get_race_service),
) -> Race:
    """
    Record a captured checkpoint on a race.

    The body is decoded as JSON whatever its Content-Type header says.
    Reporting the same checkpoint again returns the race unchanged.
    """
    try:
        captured = CapturedCheckpoint.model_validate_json(await request.body())
    except ValidationError:
        raise HTTPException(status_code=400, detail=INCORRECT_BODY)

    try:
        return await run_in_threadpool(service.record_checkpoint, race_id, captured.capturedcheckpoint)
    except RaceNotFound:
        raise HTTPException(status_code=404, detail=RACE_NOT_FOUND)
    except StoreUnavailable:
        raise HTTPException(status_code=500, detail=DATABASE_ERROR)


@router.delete("/{race_id}", status_code=204, response_class=Response)
def delete_race(race_id: str, service: RaceService = Depends(get_race_service)):
    """Delete a race and every checkpoint captured on it."""
    try:
        service.delete_race(race_id)
    except RaceNotFound:
        raise HTTPException(status_code=404, detail=RACE_NOT_FOUND)
    except StoreUnavailable:
        raise HTTPException(status_code=500, detail=DATABASE_ERROR)
    return Response(status_code=204)
