"""Weekly summaries and the projects they report on."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.orm import Session

from tracking.core.errors import DomainRuleError
from tracking.core.identifiers import NO_PREFIXES, PROJECT_PREFIXES, Identifier, decode
from tracking.db.session import unit_of_work
from tracking.models.entities import Project, WeeklySummary
from tracking.repositories.entity_store import ProjectStore, WeeklySummaryStore
from tracking.services.integrity import require_all, require_existing

logger = logging.getLogger(__name__)

WEEKLY_SUMMARY = "WeeklySummary"
PROJECT = "Project"


@dataclass(slots=True)
class WeeklySummaryCreateData:
    week_start_date: date
    week_end_date: date
    summary_text: str | None = None
    project_ids: list[Identifier] = field(default_factory=list)


@dataclass(slots=True)
class WeeklySummaryUpdateData:
    week_start_date: date | None = None
    week_end_date: date | None = None
    summary_text: str | None = None
    project_ids: list[Identifier] | None = None


def _clean_text(text: str | None) -> str | None:
    if text is None:
        return None
    return text.strip() or None


def _ensure_week_range(start: date, end: date) -> None:
    if end < start:
        raise DomainRuleError("week_end_date must be on or after week_start_date.")


class WeeklySummaryService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.summaries = WeeklySummaryStore(db)
        self.projects = ProjectStore(db)

    @staticmethod
    def serialize_summary(summary: WeeklySummary) -> dict[str, object]:
        return {
            "id": summary.id,
            "week_start_date": summary.week_start_date.isoformat(),
            "week_end_date": summary.week_end_date.isoformat(),
            "summary_text": summary.summary_text,
            "project_ids": [project.id for project in summary.projects],
            "project_names": [project.name for project in summary.projects],
        }

    def _load(self, summary_id: Identifier) -> WeeklySummary:
        return require_existing(decode(summary_id, NO_PREFIXES), self.summaries.find_by_id, WEEKLY_SUMMARY)

    def _resolve_projects(self, project_ids: list[Identifier]) -> list[Project]:
        ids = [decode(project_id, PROJECT_PREFIXES) for project_id in project_ids]
        return require_all(ids, self.projects.find_by_ids, PROJECT)

    def list_summaries(self) -> list[WeeklySummary]:
        return self.summaries.find_all()

    def get_summary(self, summary_id: Identifier) -> WeeklySummary:
        return self._load(summary_id)

    def create_summary(self, data: WeeklySummaryCreateData) -> WeeklySummary:
        _ensure_week_range(data.week_start_date, data.week_end_date)
        with unit_of_work(self.db):
            summary = WeeklySummary(
                week_start_date=data.week_start_date,
                week_end_date=data.week_end_date,
                summary_text=_clean_text(data.summary_text),
                projects=self._resolve_projects(data.project_ids),
            )
            self.summaries.save(summary)

        self.db.refresh(summary)
        return summary

    def update_summary(self, summary_id: Identifier, data: WeeklySummaryUpdateData) -> WeeklySummary:
        with unit_of_work(self.db):
            summary = self._load(summary_id)
            start = data.week_start_date or summary.week_start_date
            end = data.week_end_date or summary.week_end_date
            _ensure_week_range(start, end)

            summary.week_start_date = start
            summary.week_end_date = end
            if data.summary_text is not None:
                summary.summary_text = _clean_text(data.summary_text)
            if data.project_ids is not None:
                summary.projects = self._resolve_projects(data.project_ids)
            self.summaries.save(summary)

        self.db.refresh(summary)
        return summary

    def delete_summary(self, summary_id: Identifier) -> None:
        with unit_of_work(self.db):
            summary = self._load(summary_id)
            self.summaries.delete(summary)
        logger.info("Deleted weekly summary %s", summary_id)
