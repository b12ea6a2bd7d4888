from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from strava_stats.models.strava import (
    ActivityRecord,
    ActivitySummary,
    Athlete,
    ChartData,
    Metric,
    SessionStatus,
    SportYearlyStats,
    SyncResult,
)
from strava_stats.services.errors import StravaAPIError
from strava_stats.services.strava_session import StravaSession

router = APIRouter()


def get_session(request: Request) -> StravaSession:
    """The application's Strava session."""
    return request.app.state.strava_session


def _http_error(e: StravaAPIError) -> HTTPException:
    return HTTPException(status_code=e.http_status, detail=str(e))


class CredentialsForm(BaseModel):
    client_id: str
    client_secret: str


@router.get("/", summary="Health check")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "message": "Strava Stats API is running"}


@router.get("/status", response_model=SessionStatus, summary="Connection status")
async def get_status(session: StravaSession = Depends(get_session)):
    return session.status()


@router.put("/credentials", summary="Store Strava client credentials")
async def put_credentials(form: CredentialsForm, session: StravaSession = Depends(get_session)):
    """Save the Client ID and Client Secret of the operator's Strava application."""
    try:
        credentials = session.save_client_credentials(form.client_id, form.client_secret)
    except StravaAPIError as e:
        raise _http_error(e)
    return {"status": "saved", "client_id": credentials.client_id}


@router.delete("/credentials", summary="Forget Strava client credentials")
async def delete_credentials(session: StravaSession = Depends(get_session)):
    session.forget_client_credentials()
    return {"status": "deleted"}


@router.get("/auth/url", summary="Get the Strava authorization URL")
async def get_authorization_url(
    redirect_uri: Optional[str] = Query(None, description="Override the configured redirect URI"),
    session: StravaSession = Depends(get_session)
):
    try:
        return {"authorization_url": session.authorization_url(redirect_uri)}
    except StravaAPIError as e:
        raise _http_error(e)


@router.get("/auth/connect", summary="Redirect to Strava for authorization")
async def connect(session: StravaSession = Depends(get_session)):
    try:
        return RedirectResponse(session.authorization_url(), status_code=302)
    except StravaAPIError as e:
        raise _http_error(e)


@router.get("/auth/callback", response_model=SyncResult, summary="OAuth redirect target")
async def auth_callback(
    code: Optional[str] = Query(None, description="Authorization code"),
    error: Optional[str] = Query(None, description="Set by Strava when the user declines"),
    session: StravaSession = Depends(get_session)
):
    """Exchange the authorization code and load the activities.

    A failed first sync still reports the connection, with the failure in
    ``sync_error``.
    """
    try:
        return await session.handle_callback(code=code, error=error)
    except StravaAPIError as e:
        raise _http_error(e)


@router.post("/activities/sync", response_model=SyncResult, summary="Reload all activities from Strava")
async def sync_activities(session: StravaSession = Depends(get_session)):
    try:
        activities = await session.sync_activities()
    except StravaAPIError as e:
        raise _http_error(e)
    return SyncResult(status="synced", activities=len(activities))


@router.get("/activities", response_model=List[ActivityRecord], summary="Activities of the last sync")
async def get_activities(session: StravaSession = Depends(get_session)):
    return session.activities


@router.get("/athlete", response_model=Athlete, summary="Get athlete information")
async def get_athlete(session: StravaSession = Depends(get_session)):
    """Get the authenticated athlete's information."""
    try:
        return await session.get_athlete()
    except StravaAPIError as e:
        raise _http_error(e)


@router.get("/stats/yearly", response_model=List[SportYearlyStats], summary="Per-sport yearly totals")
async def get_yearly_stats(session: StravaSession = Depends(get_session)):
    """Distance (meters) and moving time (seconds) per sport and year."""
    return session.sport_stats()


@router.get("/stats/chart", response_model=ChartData, summary="Chart series")
async def get_chart_data(
    metric: Metric = Query(Metric.DISTANCE, description="distance (km) or time (hours)"),
    sports: Optional[List[str]] = Query(None, description="Sports to include, all when omitted"),
    session: StravaSession = Depends(get_session)
):
    return session.chart_data(metric, sports)


@router.get("/stats/summary", response_model=ActivitySummary, summary="Get activity statistics")
async def get_activity_stats(session: StravaSession = Depends(get_session)):
    return session.summary()


@router.post("/disconnect", summary="Disconnect from Strava")
async def disconnect(
    forget_credentials: bool = Query(False, description="Also forget the client credentials"),
    session: StravaSession = Depends(get_session)
):
    session.disconnect(forget_client_credentials=forget_credentials)
    return {"status": "disconnected"}
