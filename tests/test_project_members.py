from conftest import API, auth


def test_invite_accept_and_manage(client, make_user, make_project):
    owner = make_user("owner@example.com")
    dev = make_user("dev@example.com")
    project = make_project(owner)
    base = f"{API}/project-members"

    response = client.post(f"{base}/{project.id}", json={"user_id": dev.id}, headers=auth(owner))
    assert response.status_code == 201
    assert response.json()["member_status"] == "PENDING"
    assert client.post(f"{base}/{project.id}", json={"user_id": dev.id}, headers=auth(owner)).status_code == 409

    # Pending members have no access yet
    assert client.get(f"{API}/projects/{project.id}", headers=auth(dev)).status_code == 403

    response = client.patch(f"{base}/accept/{project.id}", headers=auth(dev))
    assert response.status_code == 200
    assert response.json()["member_status"] == "ACTIVE"
    assert client.get(f"{API}/projects/{project.id}", headers=auth(dev)).status_code == 200

    listed = client.get(f"{base}/{project.id}", headers=auth(dev)).json()
    assert {m["email"] for m in listed} == {"owner@example.com", "dev@example.com"}

    response = client.patch(f"{base}/update-role/{project.id}/{dev.id}", json={"role": "ADMIN"}, headers=auth(owner))
    assert response.json()["role"] == "ADMIN"
    response = client.patch(f"{base}/update-role/{project.id}/{dev.id}", json={"role": "BOSS"}, headers=auth(owner))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid role. Valid roles are: ADMIN, MEMBER"

    response = client.patch(
        f"{base}/update-status/{project.id}/{dev.id}", json={"member_status": "INACTIVE"}, headers=auth(owner)
    )
    assert response.json()["member_status"] == "INACTIVE"

    assert client.delete(f"{base}/{project.id}/{dev.id}", headers=auth(owner)).status_code == 200
    assert client.delete(f"{base}/{project.id}/{dev.id}", headers=auth(owner)).status_code == 404


def test_add_unknown_user_and_owner_row_is_protected(client, make_user, make_project):
    owner = make_user("owner@example.com")
    project = make_project(owner)
    base = f"{API}/project-members"

    assert client.post(f"{base}/{project.id}", json={"user_id": "nobody"}, headers=auth(owner)).status_code == 404
    assert client.delete(f"{base}/{project.id}/{owner.id}", headers=auth(owner)).status_code == 409
