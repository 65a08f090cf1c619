from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from speakerdesk.services.speaker_service import SpeakerService
from speakerdesk.models import Speaker


def _project(projects, name: str, **fields):
    return projects.create_project({"project_name": name, **fields})


def test_create_and_fetch_project(projects, make_deal):
    deal = make_deal(status="won")
    project = _project(projects, "Summit", deal_id=deal.id, speaker_fee=Decimal("8000"), tags=["Keynote"])

    assert projects.get_project(project.id).project_name == "Summit"
    assert projects.get_project_by_deal(deal.id).id == project.id
    assert projects.get_project_by_deal(deal.id + 100) is None
    assert project.status == "invoicing"
    assert project.tags == ["Keynote"]


def test_create_project_with_unknown_deal_returns_none(projects):
    assert _project(projects, "Orphan", deal_id=9999) is None


def test_deleting_deal_detaches_project(projects, deals, make_deal):
    deal = make_deal(status="won")
    project = _project(projects, "Summit", deal_id=deal.id)

    deals.delete_deal(deal.id)

    assert projects.get_project(project.id).deal_id is None


def test_list_projects_filters_by_status(projects):
    _project(projects, "A")
    _project(projects, "B", status="pre_event")

    assert [project.project_name for project in projects.list_projects(status="PRE_EVENT")] == ["B"]
    assert len(projects.list_projects()) == 2
    assert len(projects.list_projects(limit=1)) == 1


def test_active_and_upcoming_projects(projects):
    today = date(2026, 10, 19)
    _project(projects, "Soon", event_date=today + timedelta(days=3))
    _project(projects, "Later", event_date=today + timedelta(days=45))
    _project(projects, "Done", event_date=today + timedelta(days=5), status="completed")
    _project(projects, "Undated")

    active = [project.project_name for project in projects.list_active_projects()]
    upcoming = [project.project_name for project in projects.list_upcoming_projects(days=30, today=today)]

    assert active == ["Soon", "Later", "Undated"]
    assert upcoming == ["Soon"]


def test_update_project_status(projects):
    project = _project(projects, "Summit")

    updated = projects.update_project_status(project.id, " Logistics_Planning ")

    assert updated.status == "logistics_planning"
    assert projects.update_project_status(9999, "completed") is None


def test_delete_project(projects):
    project = _project(projects, "Summit")
    assert projects.delete_project(project.id) is True
    assert projects.delete_project(project.id) is False


def test_speaker_search(session_factory):
    with session_factory() as db:
        db.add_all(
            [
                Speaker(name="Ada Park", title="AI Ethicist", topics=["AI Ethics", "Policy"], ranking=5),
                Speaker(name="Ben Cho", title="Roboticist", location="Boston", featured=True, ranking=1),
                Speaker(name="Cy Dorn", title="AI Futurist", active=False),
            ]
        )
        db.commit()
    speakers = SpeakerService(session_factory)

    assert [speaker.name for speaker in speakers.search()] == ["Ben Cho", "Ada Park"]
    assert [speaker.name for speaker in speakers.search("ethics")] == ["Ada Park"]
    assert [speaker.name for speaker in speakers.search("boston")] == ["Ben Cho"]
    assert speakers.search("futurist") == []
    assert len(speakers.search(limit=1)) == 1
