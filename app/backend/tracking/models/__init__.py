"""ORM model package."""

from tracking.models.entities import (
    Account,
    Person,
    Project,
    Role,
    TechStack,
    WeeklySummary,
    person_projects,
    weekly_summary_projects,
)

__all__ = [
    "Account",
    "Person",
    "Project",
    "Role",
    "TechStack",
    "WeeklySummary",
    "person_projects",
    "weekly_summary_projects",
]
