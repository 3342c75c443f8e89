from zoneinfo import ZoneInfo
from fastapi import Header, HTTPException, status
from app.settings import get_settings
from app.utils.days import resolve_timezone

def get_viewer_timezone(x_timezone: str | None = Header(default=None)) -> ZoneInfo:
    """Local days (volume records, history) are the viewer's, sent as an IANA name."""
    try:
        return resolve_timezone(x_timezone, get_settings().DEFAULT_TIMEZONE)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
