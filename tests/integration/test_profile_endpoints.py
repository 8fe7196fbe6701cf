import pytest

PROFILE = {
    "company": "Acme",
    "website": "https://acme.dev",
    "status": "Developer",
    "githubusername": "octocat",
    "skills": "a, b ,c",
    "twitter": "https://twitter.com/ada",
}

EXPERIENCE = {
    "title": "Backend Engineer",
    "company": "Acme",
    "location": "Lisbon",
    "from": "2020-01-31",
    "current": True,
    "description": "APIs",
}

EDUCATION = {
    "school": "MIT",
    "degree": "BSc",
    "fieldofstudy": "Computer Science",
    "from": "2014-09-01",
    "to": "2018-06-30",
}


@pytest.fixture()
def with_profile(client, auth_header):
    r = client.post("/profile", json=PROFILE, headers=auth_header)
    assert r.status_code == 200, r.text
    return r.json()


def test_own_profile_missing(client, auth_header):
    r = client.get("/profile/me", headers=auth_header)
    assert r.status_code == 400
    assert r.json() == {"msg": "There is no profile for this user"}


def test_create_profile(client, auth_header, with_profile):
    assert with_profile["skills"] == ["a", "b", "c"]
    assert with_profile["status"] == "Developer"
    assert with_profile["githubusername"] == "octocat"
    assert with_profile["social"] == {"twitter": "https://twitter.com/ada"}
    assert with_profile["user"]["name"] == "Ada Lovelace"

    me = client.get("/profile/me", headers=auth_header)
    assert me.status_code == 200
    assert me.json()["id"] == with_profile["id"]


def test_upsert_twice_with_same_input(client, auth_header, with_profile):
    r = client.post("/profile", json=PROFILE, headers=auth_header)
    assert r.status_code == 200
    assert r.json() == with_profile


def test_update_keeps_omitted_fields(client, auth_header, with_profile):
    r = client.post(
        "/profile",
        json={"status": "Lead", "skills": "go", "company": "", "youtube": "https://youtube.com/ada"},
        headers=auth_header,
    )
    body = r.json()
    assert body["status"] == "Lead"
    assert body["skills"] == ["go"]
    assert body["company"] == "Acme"
    assert body["social"] == {"twitter": "https://twitter.com/ada", "youtube": "https://youtube.com/ada"}


def test_upsert_requires_status_and_skills(client, auth_header):
    r = client.post("/profile", json={"company": "Acme"}, headers=auth_header)
    assert r.status_code == 400
    assert [e["msg"] for e in r.json()["errors"]] == ["Status is required", "Skills is required"]


@pytest.mark.parametrize("skills", [" , ,", ",", ["", " "], []])
def test_skills_without_tokens_are_missing(client, auth_header, with_profile, skills):
    r = client.post("/profile", json={"status": "Lead", "skills": skills}, headers=auth_header)
    assert r.status_code == 400
    assert [e["msg"] for e in r.json()["errors"]] == ["Skills is required"]
    assert client.get("/profile/me", headers=auth_header).json()["skills"] == ["a", "b", "c"]


def test_malformed_json_body(client, auth_header):
    r = client.post(
        "/profile",
        content=b"{not json",
        headers={**auth_header, "content-type": "application/json"},
    )
    assert r.status_code == 400
    error = r.json()["errors"][0]
    assert error["location"] == "body"
    assert error["param"] is None


def test_private_routes_reject_missing_token(client):
    calls = [
        ("get", "/profile/me"),
        ("post", "/profile"),
        ("put", "/profile/experience"),
        ("put", "/profile/education"),
        ("delete", "/profile"),
        ("delete", "/profile/experience/x"),
        ("delete", "/profile/education/x"),
    ]
    for method, path in calls:
        r = client.request(method.upper(), path, json={})
        assert r.status_code == 401, path
        assert r.json() == {"msg": "No token, authorization denied"}


def test_invalid_token_is_rejected_before_body_validation(client):
    r = client.post("/profile", json={}, headers={"x-auth-token": "tampered"})
    assert r.status_code == 401
    assert r.json() == {"msg": "Token is not valid"}


@pytest.mark.parametrize(
    ("method", "path"),
    [("POST", "/profile"), ("PUT", "/profile/experience"), ("PUT", "/profile/education")],
)
@pytest.mark.parametrize(
    ("token", "msg"),
    [(None, "No token, authorization denied"), ("tampered", "Token is not valid")],
)
def test_token_is_checked_before_body_is_parsed(client, method, path, token, msg):
    headers = {"content-type": "application/json"}
    if token:
        headers["x-auth-token"] = token
    r = client.request(method, path, content=b"{not json", headers=headers)
    assert r.status_code == 401
    assert r.json() == {"msg": msg}


def test_public_profile_routes_need_no_token(client):
    assert client.get("/profile").status_code == 200
    assert client.get("/profile/user/nobody").json() == {"msg": "Profile not found"}


def test_public_listing_and_lookup(client, auth_header, with_profile, register):
    other = {"x-auth-token": register(email="grace@mail.com", name="Grace Hopper")}
    client.post("/profile", json={"status": "Admiral", "skills": "cobol"}, headers=other)

    r = client.get("/profile")
    assert r.status_code == 200
    assert sorted(p["user"]["name"] for p in r.json()) == ["Ada Lovelace", "Grace Hopper"]

    user_id = with_profile["user"]["id"]
    one = client.get(f"/profile/user/{user_id}")
    assert one.status_code == 200
    assert one.json()["id"] == with_profile["id"]


@pytest.mark.parametrize("user_id", ["5d7a514b5d2c12c7449be042", "not-an-id"])
def test_lookup_unknown_user(client, user_id):
    r = client.get(f"/profile/user/{user_id}")
    assert r.status_code == 400
    assert r.json() == {"msg": "Profile not found"}


def test_experience_add_and_remove(client, auth_header, with_profile):
    r = client.put("/profile/experience", json=EXPERIENCE, headers=auth_header)
    assert r.status_code == 200, r.text
    entry = r.json()["experience"][0]
    assert entry["title"] == "Backend Engineer"
    assert entry["from"] == "2020-01-31"
    assert entry["to"] is None
    assert entry["current"] is True

    r = client.delete(f"/profile/experience/{entry['id']}", headers=auth_header)
    assert r.status_code == 200
    assert r.json()["experience"] == []


def test_experience_validation(client, auth_header, with_profile):
    r = client.put("/profile/experience", json={"location": "Lisbon"}, headers=auth_header)
    assert r.status_code == 400
    assert [e["msg"] for e in r.json()["errors"]] == [
        "Title is required",
        "Company is required",
        "From date is required",
    ]


def test_remove_unknown_experience(client, auth_header, with_profile):
    client.put("/profile/experience", json=EXPERIENCE, headers=auth_header)
    r = client.delete("/profile/experience/does-not-exist", headers=auth_header)
    assert r.status_code == 400
    assert r.json() == {"msg": "Experience not found"}
    assert len(client.get("/profile/me", headers=auth_header).json()["experience"]) == 1


def test_experience_without_profile(client, auth_header):
    r = client.put("/profile/experience", json=EXPERIENCE, headers=auth_header)
    assert r.status_code == 400
    assert r.json() == {"msg": "There is no profile for this user"}


def test_education_add_and_remove(client, auth_header, with_profile):
    r = client.put("/profile/education", json=EDUCATION, headers=auth_header)
    assert r.status_code == 200, r.text
    entry = r.json()["education"][0]
    assert entry["fieldofstudy"] == "Computer Science"
    assert entry["to"] == "2018-06-30"

    missing = client.delete("/profile/education/does-not-exist", headers=auth_header)
    assert missing.status_code == 400
    assert missing.json() == {"msg": "Education not found"}

    r = client.delete(f"/profile/education/{entry['id']}", headers=auth_header)
    assert r.status_code == 200
    assert r.json()["education"] == []


def test_education_validation(client, auth_header, with_profile):
    r = client.put("/profile/education", json={"from": "2014-09-01"}, headers=auth_header)
    assert r.status_code == 400
    assert [e["msg"] for e in r.json()["errors"]] == [
        "School is required",
        "Degree is required",
        "Field of study is required",
    ]


def test_delete_account(client, auth_header, with_profile):
    r = client.delete("/profile", headers=auth_header)
    assert r.status_code == 200
    assert r.json() == {"msg": "User deleted"}

    assert client.get("/profile/me", headers=auth_header).json() == {
        "msg": "There is no profile for this user"
    }
    assert client.get("/auth", headers=auth_header).status_code == 400
    login = client.post("/auth", json={"email": "a@x.com", "password": "secret123"})
    assert login.json() == {"errors": [{"msg": "Invalid Credentials"}]}
