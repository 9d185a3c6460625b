def submit(client, headers, hours=2.5, day="2025-03-08"):
    return client.post(
        "/api/overtime/request",
        json={"overtimeDate": day, "requestedHours": hours, "reason": "Stocktake"},
        headers=headers,
    )


def test_submit_and_list(client, employee, employee_headers):
    response = submit(client, employee_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["employeeId"] == employee.id
    assert data["employeeFullName"] == "Jane Doe"

    pending = client.get("/api/overtime/employee/pending", headers=employee_headers)
    assert [r["id"] for r in pending.json()] == [data["id"]]
    assert client.get("/api/overtime/employee/approved", headers=employee_headers).json() == []


def test_submit_non_positive_hours(client, employee, employee_headers):
    response = submit(client, employee_headers, hours=0)
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Requested hours must be greater than zero."


def test_admin_cannot_submit(client, admin_headers):
    assert submit(client, admin_headers).status_code == 403


def test_approve_flow(client, employee, employee_headers, admin_headers):
    request_id = submit(client, employee_headers).json()["id"]

    pending = client.get("/api/overtime/admin/pending", headers=admin_headers)
    assert [r["id"] for r in pending.json()] == [request_id]

    response = client.put(f"/api/overtime/admin/approve/{request_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "APPROVED"

    again = client.put(f"/api/overtime/admin/approve/{request_id}", headers=admin_headers)
    assert again.status_code == 409
    assert again.json()["error"]["message"] == "Only pending requests can be approved."

    approved = client.get("/api/overtime/employee/approved", headers=employee_headers).json()
    assert [r["id"] for r in approved] == [request_id]
    assert client.get("/api/overtime/admin/pending", headers=admin_headers).json() == []


def test_reject_flow(client, employee, employee_headers, admin_headers):
    request_id = submit(client, employee_headers).json()["id"]
    response = client.put(f"/api/overtime/admin/reject/{request_id}", headers=admin_headers)
    assert response.json()["status"] == "REJECTED"

    again = client.put(f"/api/overtime/admin/reject/{request_id}", headers=admin_headers)
    assert again.status_code == 409
    assert again.json()["error"]["message"] == "Only pending requests can be rejected."


def test_decide_unknown_request(client, admin_headers):
    assert client.put("/api/overtime/admin/approve/999", headers=admin_headers).status_code == 404


def test_employee_cannot_approve(client, employee, employee_headers):
    request_id = submit(client, employee_headers).json()["id"]
    response = client.put(f"/api/overtime/admin/approve/{request_id}", headers=employee_headers)
    assert response.status_code == 403


def test_employee_sees_only_own_requests(client, employee, employee_headers, other_headers):
    submit(client, employee_headers)
    assert client.get("/api/overtime/employee/pending", headers=other_headers).json() == []


def test_submit_non_finite_hours_is_a_bad_request(client, employee, employee_headers):
    headers = {**employee_headers, "Content-Type": "application/json"}
    for raw in ("NaN", "Infinity", "-Infinity"):
        response = client.post(
            "/api/overtime/request",
            content='{"overtimeDate": "2025-03-08", "requestedHours": %s}' % raw,
            headers=headers,
        )
        assert response.status_code == 400, raw
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
    assert client.get("/api/overtime/employee/pending", headers=employee_headers).json() == []
