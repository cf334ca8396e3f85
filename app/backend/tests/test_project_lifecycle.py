from __future__ import annotations

import logging
from datetime import date, datetime

import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session

from tracking.core.actor import ActorContext
from tracking.core.errors import (
    ConflictError,
    DomainRuleError,
    DuplicateNameError,
    InvalidIdentifierFormat,
    NotFoundError,
)
from tracking.models.entities import Account, Person, Project, Role, WeeklySummary
from tracking.repositories.entity_store import PersonStore
from tracking.services.lifecycle import (
    ProjectCreateData,
    ProjectLifecycleManager,
    ProjectPatchData,
    ProjectUpdateData,
    format_project_id,
)

CREATOR = ActorContext(display_name="Creator User")
EDITOR = ActorContext(display_name="Editor User")


def _create_account(db: Session, *, name: str = "Acme") -> Account:
    now = datetime.utcnow()
    row = Account(
        name=name,
        soft_delete=False,
        created_at=now,
        created_by="seed",
        updated_at=now,
        updated_by="seed",
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _create_person(db: Session, *, email: str, projects: list[Project]) -> Person:
    row = Person(first_name="Test", last_name=email.split("@")[0], email=email, role=Role.EMPLOYEE, projects=projects)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _create_summary(db: Session, *, projects: list[Project]) -> WeeklySummary:
    row = WeeklySummary(week_start_date=date(2026, 10, 12), week_end_date=date(2026, 10, 16), projects=projects)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _create_project(manager: ProjectLifecycleManager, account: Account, name: str = "Apollo") -> Project:
    return manager.create(ProjectCreateData(name=name, account_id=account.id), CREATOR)


def test_create_stamps_audit_fields_and_starts_at_version_one(db_session: Session) -> None:
    account = _create_account(db_session)
    manager = ProjectLifecycleManager(db_session)

    project = _create_project(manager, account, name="  Apollo ")

    assert project.name == "Apollo"
    assert project.account_id == account.id
    assert project.soft_delete is False
    assert project.version == 1
    assert project.created_by == "Creator User"
    assert project.updated_by == "Creator User"
    assert format_project_id(project.id) == "PJT001"


def test_create_rejects_duplicate_name_in_any_case(db_session: Session) -> None:
    account = _create_account(db_session)
    manager = ProjectLifecycleManager(db_session)
    _create_project(manager, account, name="Alpha")

    with pytest.raises(DuplicateNameError):
        _create_project(manager, account, name="ALPHA")

    assert len(manager.list_all()) == 1


def test_name_can_be_reused_after_hard_or_soft_delete(db_session: Session) -> None:
    account = _create_account(db_session)
    manager = ProjectLifecycleManager(db_session)

    first = _create_project(manager, account, name="Alpha")
    manager.hard_delete(first.id)
    second = _create_project(manager, account, name="alpha")

    manager.soft_delete(second.id, EDITOR)
    third = _create_project(manager, account, name="Alpha")

    assert third.soft_delete is False
    assert {project.name for project in manager.search("ALPHA")} == {"alpha", "Alpha"}


def test_restoring_soft_deleted_project_rechecks_name_uniqueness(db_session: Session) -> None:
    account = _create_account(db_session)
    manager = ProjectLifecycleManager(db_session)
    retired = _create_project(manager, account, name="Alpha")
    manager.soft_delete(retired.id, EDITOR)
    _create_project(manager, account, name="Alpha")

    with pytest.raises(DuplicateNameError):
        manager.update(retired.id, ProjectUpdateData(soft_delete=False), EDITOR)

    assert manager.get(retired.id).soft_delete is True


def test_create_requires_existing_account(db_session: Session) -> None:
    manager = ProjectLifecycleManager(db_session)

    with pytest.raises(NotFoundError) as exc_info:
        manager.create(ProjectCreateData(name="Gamma", account_id=9999), CREATOR)

    assert exc_info.value.kind == "Account"
    assert exc_info.value.entity_id == 9999
    assert manager.list_all() == []


def test_get_accepts_code_or_number_and_reports_missing(db_session: Session) -> None:
    account = _create_account(db_session)
    manager = ProjectLifecycleManager(db_session)
    project = _create_project(manager, account)

    assert manager.get("PJT001").id == project.id
    assert manager.get(project.id).id == project.id
    assert manager.get(str(project.id)).id == project.id

    with pytest.raises(NotFoundError) as exc_info:
        manager.get("PJT404")
    assert exc_info.value.kind == "Project"

    with pytest.raises(InvalidIdentifierFormat):
        manager.get("XYZ9")
    with pytest.raises(InvalidIdentifierFormat):
        manager.get("")


def test_partial_update_changes_only_supplied_fields(db_session: Session) -> None:
    account = _create_account(db_session)
    manager = ProjectLifecycleManager(db_session)
    project = _create_project(manager, account)

    updated = manager.partial_update(project.id, ProjectPatchData(name="Beta"), EDITOR)

    assert updated.name == "Beta"
    assert updated.account_id == account.id
    assert updated.soft_delete is False
    assert updated.created_by == "Creator User"
    assert updated.updated_by == "Editor User"


def test_partial_update_ignores_client_audit_fields(db_session: Session, caplog: pytest.LogCaptureFixture) -> None:
    account = _create_account(db_session)
    manager = ProjectLifecycleManager(db_session)
    project = _create_project(manager, account)
    created_at = project.created_at

    with caplog.at_level(logging.WARNING, logger="tracking.services.lifecycle"):
        updated = manager.partial_update(
            project.id,
            ProjectPatchData(
                soft_delete=True,
                created_by="mallory",
                created_at=datetime(2000, 1, 1),
                updated_by="mallory",
            ),
            EDITOR,
        )

    assert updated.soft_delete is True
    assert updated.created_by == "Creator User"
    assert updated.created_at == created_at
    assert updated.updated_by == "Editor User"
    assert "Ignoring client-supplied audit fields" in caplog.text


def test_full_update_keeps_account_unless_supplied_and_always_restamps(db_session: Session) -> None:
    account = _create_account(db_session)
    other = _create_account(db_session, name="Globex")
    manager = ProjectLifecycleManager(db_session)
    project = _create_project(manager, account)
    first_stamp = project.updated_at

    renamed = manager.update("PJT001", ProjectUpdateData(name="Beta"), ActorContext())
    assert renamed.name == "Beta"
    assert renamed.account_id == account.id
    assert renamed.updated_by == "System"
    assert renamed.updated_at >= first_stamp

    moved = manager.update(project.id, ProjectUpdateData(account_id=other.id), EDITOR)
    assert moved.account_id == other.id
    assert moved.account.name == "Globex"
    assert moved.updated_by == "Editor User"


def test_full_update_rejects_missing_account_and_duplicate_rename(db_session: Session) -> None:
    account = _create_account(db_session)
    manager = ProjectLifecycleManager(db_session)
    project = _create_project(manager, account, name="Apollo")
    _create_project(manager, account, name="Zeus")

    with pytest.raises(NotFoundError) as exc_info:
        manager.update(project.id, ProjectUpdateData(account_id=4242), EDITOR)
    assert exc_info.value.kind == "Account"

    with pytest.raises(DuplicateNameError):
        manager.update(project.id, ProjectUpdateData(name="zeus"), EDITOR)

    reloaded = manager.get(project.id)
    assert reloaded.name == "Apollo"
    assert reloaded.account_id == account.id


def test_stale_version_is_rejected(db_session: Session) -> None:
    account = _create_account(db_session)
    manager = ProjectLifecycleManager(db_session)
    project = _create_project(manager, account)

    updated = manager.update(project.id, ProjectUpdateData(name="Beta", version=1), EDITOR)
    assert updated.version == 2

    with pytest.raises(ConflictError):
        manager.update(project.id, ProjectUpdateData(name="Gamma", version=1), EDITOR)
    with pytest.raises(ConflictError):
        manager.soft_delete(project.id, EDITOR, version=1)

    assert manager.get(project.id).name == "Beta"


def test_soft_delete_keeps_project_and_relationships(db_session: Session) -> None:
    account = _create_account(db_session)
    manager = ProjectLifecycleManager(db_session)
    project = _create_project(manager, account)
    person = _create_person(db_session, email="ann@test.local", projects=[project])
    summary = _create_summary(db_session, projects=[project])

    flagged = manager.soft_delete("PJT001", EDITOR)

    assert flagged.soft_delete is True
    assert flagged.updated_by == "Editor User"
    assert manager.get(project.id).soft_delete is True
    db_session.expire_all()
    assert [row.id for row in db_session.get(Person, person.id).projects] == [project.id]
    assert [row.id for row in db_session.get(WeeklySummary, summary.id).projects] == [project.id]


def test_hard_delete_detaches_project_from_every_owner(db_session: Session) -> None:
    account = _create_account(db_session)
    manager = ProjectLifecycleManager(db_session)
    target = _create_project(manager, account, name="Apollo")
    kept = _create_project(manager, account, name="Hermes")
    person_a = _create_person(db_session, email="a@test.local", projects=[target, kept])
    person_b = _create_person(db_session, email="b@test.local", projects=[target])
    summary = _create_summary(db_session, projects=[target, kept])
    target_id, kept_id = target.id, kept.id

    manager.hard_delete(format_project_id(target_id))

    db_session.expire_all()
    assert [row.id for row in db_session.get(Person, person_a.id).projects] == [kept_id]
    assert db_session.get(Person, person_b.id).projects == []
    assert [row.id for row in db_session.get(WeeklySummary, summary.id).projects] == [kept_id]
    with pytest.raises(NotFoundError):
        manager.get(target_id)


def test_hard_delete_of_missing_project_fails(db_session: Session) -> None:
    manager = ProjectLifecycleManager(db_session)

    with pytest.raises(NotFoundError):
        manager.hard_delete("PJT007")


def test_hard_delete_rolls_back_cascade_when_an_owner_write_fails(
    db_session: Session,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    account = _create_account(db_session)
    manager = ProjectLifecycleManager(db_session)
    project = _create_project(manager, account)
    person_a = _create_person(db_session, email="a@test.local", projects=[project])
    person_b = _create_person(db_session, email="b@test.local", projects=[project])
    summary = _create_summary(db_session, projects=[project])
    project_id, person_a_id, person_b_id = project.id, person_a.id, person_b.id

    base_save = PersonStore.save

    def failing_save_all(self: PersonStore, entities: list[Person]) -> list[Person]:
        for entity in entities:
            if entity.id == person_b_id:
                raise RuntimeError("write failed")
            base_save(self, entity)
        return list(entities)

    monkeypatch.setattr(PersonStore, "save_all", failing_save_all)

    with pytest.raises(RuntimeError):
        manager.hard_delete(project_id)

    db_session.expire_all()
    assert [row.id for row in db_session.get(Person, person_a_id).projects] == [project_id]
    assert [row.id for row in db_session.get(Person, person_b_id).projects] == [project_id]
    assert [row.id for row in db_session.get(WeeklySummary, summary.id).projects] == [project_id]
    assert db_session.get(Project, project_id) is not None


def test_concurrent_write_detected_at_flush_is_a_conflict(db_session: Session) -> None:
    account = _create_account(db_session)
    manager = ProjectLifecycleManager(db_session)
    project = _create_project(manager, account)

    # Another writer bumps the row while this session still holds version 1.
    db_session.connection().execute(
        text("UPDATE projects SET version = version + 1 WHERE id = :id"),
        {"id": project.id},
    )

    with pytest.raises(ConflictError):
        manager.update(project.id, ProjectUpdateData(name="Beta"), EDITOR)

    assert manager.get(project.id).name == "Apollo"


def test_blank_names_are_rejected_before_any_write(db_session: Session) -> None:
    account = _create_account(db_session)
    manager = ProjectLifecycleManager(db_session)
    project = _create_project(manager, account)

    with pytest.raises(DomainRuleError):
        manager.create(ProjectCreateData(name="   ", account_id=account.id), CREATOR)
    with pytest.raises(DomainRuleError):
        manager.partial_update(project.id, ProjectPatchData(name=" "), EDITOR)

    assert [row.name for row in manager.list_all()] == ["Apollo"]


def test_ids_outside_the_key_range_are_missing(db_session: Session) -> None:
    account = _create_account(db_session)
    manager = ProjectLifecycleManager(db_session)
    _create_project(manager, account)

    with pytest.raises(NotFoundError):
        manager.get(10**20)
    with pytest.raises(NotFoundError):
        manager.get("PJT0")
    with pytest.raises(NotFoundError) as exc_info:
        manager.create(ProjectCreateData(name="Hermes", account_id=2**31), CREATOR)
    assert exc_info.value.kind == "Account"
