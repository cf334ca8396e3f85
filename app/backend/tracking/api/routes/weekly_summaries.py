"""Weekly summary endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from tracking.db.session import get_db_session
from tracking.services.weekly_summary_service import (
    WeeklySummaryCreateData,
    WeeklySummaryService,
    WeeklySummaryUpdateData,
)

router = APIRouter(prefix="/weekly-summaries", tags=["weekly-summaries"])


class WeeklySummaryCreatePayload(BaseModel):
    week_start_date: date
    week_end_date: date
    summary_text: str | None = Field(default=None, max_length=4000)
    project_ids: list[int | str] = Field(default_factory=list)


class WeeklySummaryUpdatePayload(BaseModel):
    week_start_date: date | None = None
    week_end_date: date | None = None
    summary_text: str | None = Field(default=None, max_length=4000)
    project_ids: list[int | str] | None = None


def _summary_service(db: Session) -> WeeklySummaryService:
    return WeeklySummaryService(db)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_weekly_summary(
    payload: WeeklySummaryCreatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _summary_service(db)
    summary = service.create_summary(
        WeeklySummaryCreateData(
            week_start_date=payload.week_start_date,
            week_end_date=payload.week_end_date,
            summary_text=payload.summary_text,
            project_ids=payload.project_ids,
        )
    )
    return service.serialize_summary(summary)


@router.get("")
def list_weekly_summaries(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _summary_service(db)
    return {"items": [service.serialize_summary(summary) for summary in service.list_summaries()]}


@router.get("/{summary_id}")
def get_weekly_summary(summary_id: str, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _summary_service(db)
    return service.serialize_summary(service.get_summary(summary_id))


@router.put("/{summary_id}")
def update_weekly_summary(
    summary_id: str,
    payload: WeeklySummaryUpdatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _summary_service(db)
    summary = service.update_summary(
        summary_id,
        WeeklySummaryUpdateData(
            week_start_date=payload.week_start_date,
            week_end_date=payload.week_end_date,
            summary_text=payload.summary_text,
            project_ids=payload.project_ids,
        ),
    )
    return service.serialize_summary(summary)


@router.delete("/{summary_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_weekly_summary(summary_id: str, db: Session = Depends(get_db_session)) -> Response:
    _summary_service(db).delete_summary(summary_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
