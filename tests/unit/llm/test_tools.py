from __future__ import annotations

from speakerdesk.llm.tools import TOOLS


def _deal_input(**overrides) -> dict:
    data = {
        "client_name": "Dana Lee",
        "client_email": "dana@acme.test",
        "company": "Acme Corp",
        "event_title": "Acme AI Summit",
        "event_date": "2026-11-20",
        "event_location": "Chicago, IL",
        "event_type": "Keynote",
        "attendee_count": 300,
        "budget_range": "$10k-$20k",
        "deal_value": 10000,
        "status": "lead",
        "priority": "high",
        "source": "Website",
        "last_contact": "2026-10-19",
    }
    data.update(overrides)
    return data


def test_tool_catalogue_names():
    assert [tool["name"] for tool in TOOLS] == [
        "get_deals",
        "update_deal_status",
        "delete_deal",
        "create_deal",
        "get_projects",
        "update_project_status",
        "delete_project",
        "get_speakers",
    ]


def test_unknown_tool(services):
    assert services.toolbox.execute("send_email", {}) == {"error": "Unknown tool: send_email"}


def test_get_deals_clamps_limit(services, make_deal):
    for index in range(3):
        make_deal(event_title=f"Deal {index}")

    result = services.toolbox.execute("get_deals", {"limit": 2.0})

    assert result["count"] == 2
    assert services.toolbox.execute("get_deals", {"limit": "lots"})["count"] == 3


def test_update_deal_status_runs_the_transition(services, make_deal, notifier):
    deal = make_deal(status="negotiation")

    result = services.toolbox.execute("update_deal_status", {"deal_id": float(deal.id), "status": "won"})

    assert result["success"] is True
    assert result["deal"]["status"] == "won"
    assert result["deal"]["projectCreated"] is True
    assert notifier.texts == [f"🎉 Deal Won: {deal.event_title}"]


def test_update_deal_status_errors_are_returned(services):
    assert services.toolbox.execute("update_deal_status", {"deal_id": 1}) == {
        "success": False,
        "error": "status is required",
    }
    missing = services.toolbox.execute("update_deal_status", {"deal_id": 999, "status": "won"})
    assert missing == {"error": "Deal 999 not found"}
    invalid = services.toolbox.execute("update_deal_status", {"deal_id": "abc", "status": "won"})
    assert invalid == {"error": "Invalid deal ID"}


def test_create_deal(services, notifier):
    result = services.toolbox.execute("create_deal", _deal_input())

    assert result["success"] is True
    assert result["deal"]["event_title"] == "Acme AI Summit"
    assert notifier.texts == ["New Deal: Acme AI Summit"]


def test_create_deal_validation_error(services):
    result = services.toolbox.execute("create_deal", _deal_input(client_name="", attendee_count=-1))
    assert result["error"] == "Invalid input: 2 field(s) failed validation"
    assert len(result["details"]) == 2


def test_delete_deal(services, make_deal, deals):
    deal = make_deal()
    assert services.toolbox.execute("delete_deal", {"deal_id": deal.id})["success"] is True
    assert deals.get_deal(deal.id) is None
    assert services.toolbox.execute("delete_deal", {"deal_id": deal.id}) == {"error": f"Deal {deal.id} not found"}


def test_project_tools(services, projects):
    project = projects.create_project({"project_name": "Summit"})
    toolbox = services.toolbox

    assert toolbox.execute("get_projects", {})["count"] == 1
    updated = toolbox.execute("update_project_status", {"project_id": project.id, "status": "pre_event"})
    assert updated["project"]["status"] == "pre_event"
    assert toolbox.execute("update_project_status", {"project_id": "1", "status": "x"})["success"] is False
    assert toolbox.execute("update_project_status", {"project_id": 999, "status": "x"}) == {
        "success": False,
        "error": "Project not found",
    }
    assert toolbox.execute("delete_project", {"project_id": project.id})["success"] is True
    assert toolbox.execute("delete_project", {"project_id": project.id})["error"] == "Project not found"


def test_project_tools_reject_ids_past_the_integer_column(services):
    toolbox = services.toolbox
    huge = int(1e30)

    assert toolbox.execute("delete_project", {"project_id": 1e30}) == {"error": f"Project {huge} not found"}
    assert toolbox.execute("update_project_status", {"project_id": 1e30, "status": "x"}) == {
        "error": f"Project {huge} not found"
    }
    assert toolbox.execute("update_deal_status", {"deal_id": "99999999999999999999", "status": "won"}) == {
        "error": "Deal 99999999999999999999 not found"
    }


def test_get_speakers(services):
    result = services.toolbox.execute("get_speakers", {"query": "nobody"})
    assert result == {"speakers": [], "count": 0}
