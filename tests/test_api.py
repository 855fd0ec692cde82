from datetime import date

import pytest

from bon_backend.services.rules_service import seed_rule_settings

ADMIN = {"X-Actor-Id": "7", "X-Actor-Role": "admin"}
STAFF = {"X-Actor-Id": "8", "X-Actor-Role": "staff"}


@pytest.fixture
def employee_id(client):
    res = client.post("/employees/", json={
        "full_name": "Budi Santoso",
        "basic_salary": 5_000_000,
        "hire_date": "2020-01-01",
    })
    assert res.status_code == 201
    return res.json()["employee_id"]


@pytest.fixture
def pending_bon_id(client, employee_id):
    res = client.post("/bons", json={
        "employee_id": employee_id,
        "requested_amount": 1_200_000,
        "monthly_installment": 500_000,
        "note": "medical",
    })
    assert res.status_code == 201
    return res.json()["data"]["bon_id"]


def approve(client, bon_id, headers=ADMIN):
    return client.put(f"/bons/{bon_id}", json={"kind": "decision", "action": "approve"}, headers=headers)


def test_create_and_fetch_employee(client, employee_id):
    res = client.get(f"/employees/{employee_id}")
    assert res.status_code == 200
    assert res.json()["employment_status"] == "active"

    assert client.get("/employees/999").status_code == 404


def test_submit_bon(client, employee_id):
    res = client.post("/bons", json={
        "employee_id": employee_id,
        "requested_amount": 3_000_000,
        "monthly_installment": 1_000_000,
    })

    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["data"]["status"] == "pending"
    assert body["data"]["remaining_balance"] == 3_000_000
    assert body["warnings"]


def test_invalid_bon_lists_every_error(client, employee_id):
    res = client.post("/bons", json={
        "employee_id": employee_id,
        "requested_amount": 20_000_000,
        "monthly_installment": 10_000_000,
    })

    assert res.status_code == 422
    body = res.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert len(body["errors"]) == 5
    assert client.get("/bons").json()["pagination"]["total"] == 0


def test_submit_for_unknown_employee(client):
    res = client.post("/bons", json={
        "employee_id": 404,
        "requested_amount": 1_000_000,
        "monthly_installment": 500_000,
    })
    assert res.status_code == 404
    assert res.json()["code"] == "NOT_FOUND"


def test_list_bons_paginates_and_searches(client, pending_bon_id):
    res = client.get("/bons", params={"search": "budi", "page_size": 5})

    assert res.status_code == 200
    body = res.json()
    assert [b["bon_id"] for b in body["data"]] == [pending_bon_id]
    assert body["data"][0]["employee"]["full_name"] == "Budi Santoso"
    assert body["pagination"]["from"] == 1
    assert body["pagination"]["last_page"] == 1

    assert client.get("/bons", params={"search": "siti"}).json()["data"] == []


def test_decision_requires_admin(client, pending_bon_id):
    assert approve(client, pending_bon_id, headers={}).status_code == 401
    assert approve(client, pending_bon_id, headers=STAFF).status_code == 403

    res = approve(client, pending_bon_id)
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "approved"
    assert res.json()["data"]["approved_by"] == 7

    again = approve(client, pending_bon_id)
    assert again.status_code == 409
    assert again.json()["status"] == "approved"


def test_unknown_bon(client):
    assert client.get("/bons/999").status_code == 404
    assert approve(client, 999).status_code == 404


def test_field_update(client, pending_bon_id):
    res = client.put(f"/bons/{pending_bon_id}", json={"kind": "update", "note": "hospital bill"})
    assert res.status_code == 200
    assert res.json()["data"]["note"] == "hospital bill"

    bad = client.put(f"/bons/{pending_bon_id}", json={"kind": "update", "monthly_installment": 1_200_000})
    assert bad.status_code == 422


def test_unknown_update_kind_is_rejected(client, pending_bon_id):
    res = client.put(f"/bons/{pending_bon_id}", json={"kind": "status", "status": "completed"})
    assert res.status_code == 422


def test_approved_bon_cannot_be_deleted(client, pending_bon_id):
    approve(client, pending_bon_id)

    res = client.delete(f"/bons/{pending_bon_id}")
    assert res.status_code == 409
    assert res.json()["code"] == "STATE_ERROR"
    assert client.get(f"/bons/{pending_bon_id}").json()["status"] == "approved"


def test_delete_pending_bon(client, pending_bon_id):
    res = client.delete(f"/bons/{pending_bon_id}")
    assert res.status_code == 200
    assert client.get(f"/bons/{pending_bon_id}").status_code == 404


def test_eligibility(client, employee_id):
    res = client.get("/bons/eligibility", params={"employee_id": employee_id, "amount": 3_000_000})

    assert res.status_code == 200
    body = res.json()
    assert body["eligibility"]["is_eligible"] is True
    assert body["eligibility"]["max_amount"] == 4_000_000
    assert body["capacity"]["max_installment_capacity"] == 1_500_000
    assert body["calculation"]["monthly_installment"] == 1_000_000
    assert body["rules"]["min_employment_duration"] == 6


def test_eligibility_for_new_hire(client):
    emp = client.post("/employees/", json={
        "full_name": "Siti Rahma",
        "basic_salary": 5_000_000,
        "hire_date": date.today().isoformat(),
    }).json()

    body = client.get("/bons/eligibility", params={"employee_id": emp["employee_id"]}).json()
    assert body["eligibility"]["is_eligible"] is False
    assert any("at least 6 months" in r for r in body["eligibility"]["reasons"])


def test_process_period_flow(client, pending_bon_id):
    approve(client, pending_bon_id)

    assert client.post("/bon-installments/process", json={"period": "2026-02"}).status_code == 401
    assert client.post("/bon-installments/process", json={"period": "2026-13"}, headers=ADMIN).status_code == 422

    first = client.post("/bon-installments/process", json={"period": "2026-02"}, headers=ADMIN)
    assert first.status_code == 201
    assert [i["amount"] for i in first.json()["data"]] == [500_000]

    second = client.post("/bon-installments/process", json={"period": "2026-02"}, headers=ADMIN)
    assert second.json()["data"] == []
    assert second.json()["skipped"] == 1

    listed = client.get("/bon-installments", params={"period": "2026-02"}).json()
    assert len(listed) == 1
    assert client.get(f"/bons/{pending_bon_id}").json()["remaining_balance"] == 700_000

    statement = client.get(f"/bons/{pending_bon_id}/statement").json()
    assert [r["txn_type"] for r in statement] == ["APPLICATION", "INSTALLMENT"]


def test_cancel_installment(client, pending_bon_id):
    approve(client, pending_bon_id)
    inst = client.post("/bon-installments/process", json={"period": "2026-02"}, headers=ADMIN).json()["data"][0]

    assert client.put(
        f"/bon-installments/{inst['installment_id']}", json={"status": "cancelled"}, headers=STAFF
    ).status_code == 403

    res = client.put(f"/bon-installments/{inst['installment_id']}", json={"status": "cancelled"}, headers=ADMIN)
    assert res.status_code == 200
    assert res.json()["status"] == "cancelled"
    assert client.get(f"/bons/{pending_bon_id}").json()["remaining_balance"] == 1_200_000


def test_stats(client, pending_bon_id):
    approve(client, pending_bon_id)

    body = client.get("/bons/stats").json()
    assert body == {
        "total_active_bons": 1,
        "total_outstanding": 1_200_000,
        "total_monthly_installments": 500_000,
        "total_employees_with_bon": 1,
    }


def test_rule_settings_are_validated(client, db):
    seed_rule_settings(db)

    res = client.patch("/settings", json={"key": "bon.max_bon_percentage", "value": "150"})
    assert res.status_code == 422
    assert res.json()["detail"]["field"] == "max_bon_percentage"

    assert client.patch("/settings", json={"key": "bon.max_bon_percentage", "value": "50"}).status_code == 200
    assert client.get("/settings/bon-rules").json()["max_bon_percentage"] == 50


def test_unknown_rule_key_is_refused(client):
    res = client.post("/settings", json={"key": "bon.max_coffee", "value": "2"})
    assert res.status_code == 422
