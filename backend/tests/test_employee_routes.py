from punchclock.models.enums import Role
from conftest import PASSWORD, add_account, auth_header, run


NEW_EMPLOYEE = {
    "firstName": "Sam",
    "lastName": "Lee",
    "email": "sam@example.com",
    "department": "Warehouse",
    "position": "Picker",
    "hireDate": "2025-01-06",
}


def test_create_employee_provisions_account(client, store, admin_headers):
    response = client.post("/api/employees", json=NEW_EMPLOYEE, headers=admin_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "sam@example.com"
    assert data["hireDate"] == "2025-01-06"

    credential = run(store.find_credential_by_email("sam@example.com"))
    assert credential.employee_id == data["id"]
    assert credential.role.value == "EMPLOYEE"
    assert credential.reset_token


def test_create_without_account(client, store, admin_headers):
    response = client.post("/api/employees", json={**NEW_EMPLOYEE, "createAccount": False}, headers=admin_headers)
    assert response.status_code == 201
    assert run(store.find_credential_by_email("sam@example.com")) is None


def test_create_duplicate_email(client, employee, admin_headers):
    response = client.post("/api/employees", json={**NEW_EMPLOYEE, "email": employee.email}, headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "EMAIL_TAKEN"


def test_create_with_unknown_role(client, admin_headers):
    response = client.post("/api/employees", json={**NEW_EMPLOYEE, "role": "OWNER"}, headers=admin_headers)
    assert response.status_code == 400


def test_employee_cannot_create(client, employee_headers):
    assert client.post("/api/employees", json=NEW_EMPLOYEE, headers=employee_headers).status_code == 403


def test_list_and_get(client, employee, admin, admin_headers, employee_headers, other_headers):
    listing = client.get("/api/employees/all", headers=admin_headers)
    assert {e["email"] for e in listing.json()} >= {employee.email, admin.email}

    assert client.get(f"/api/employees/{employee.id}", headers=employee_headers).status_code == 200
    assert client.get(f"/api/employees/{employee.id}", headers=other_headers).status_code == 403
    assert client.get("/api/employees/all", headers=employee_headers).status_code == 403
    assert client.get("/api/employees/999", headers=admin_headers).status_code == 404


def test_update_employee(client, employee, admin_headers):
    response = client.put(f"/api/employees/{employee.id}", json={"position": "Team Lead"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["position"] == "Team Lead"
    assert response.json()["firstName"] == "Jane"


def test_delete_employee_removes_login(client, store, employee, admin_headers):
    response = client.delete(f"/api/employees/{employee.id}", headers=admin_headers)
    assert response.status_code == 204
    assert run(store.find_employee(employee.id)) is None
    assert run(store.find_credential_by_email(employee.email)) is None


def test_email_change_moves_login(client, store, employee, admin_headers):
    response = client.put(
        f"/api/employees/{employee.id}", json={"email": "Jane.Doe@Example.com"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["email"] == "jane.doe@example.com"

    login = client.post("/api/auth/login", json={"email": "jane.doe@example.com", "password": PASSWORD})
    assert login.status_code == 200
    assert login.json()["employeeId"] == employee.id
    old_login = client.post("/api/auth/login", json={"email": employee.email, "password": PASSWORD})
    assert old_login.status_code == 401

    initiate = client.post(
        "/api/password-setup/initiate", json={"email": "jane.doe@example.com"}, headers=admin_headers
    )
    assert initiate.status_code == 200

    me = client.get("/api/auth/me", headers=auth_header("jane.doe@example.com", Role.EMPLOYEE))
    assert me.json()["email"] == me.json()["employee"]["email"]


def test_email_change_to_taken_login(client, store, employee, admin_headers):
    run(add_account(store, "taken@example.com", Role.ADMIN))
    response = client.put(
        f"/api/employees/{employee.id}", json={"email": "taken@example.com"}, headers=admin_headers
    )
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "EMAIL_TAKEN"
    assert run(store.find_employee(employee.id)).email == employee.email


def test_update_with_null_name_is_a_bad_request(client, employee, admin_headers):
    response = client.put(f"/api/employees/{employee.id}", json={"firstName": None}, headers=admin_headers)
    assert response.status_code == 400
