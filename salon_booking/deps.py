# salon_booking/deps.py

from fastapi import Depends, HTTPException
from sqlmodel import Session

from .booking import BookingError
from .db import get_session
from .store import SchedulingStore


def get_store(session: Session = Depends(get_session)) -> SchedulingStore:
    return SchedulingStore(session)


def http_error(exc: BookingError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.detail)
