from datetime import timedelta

from myumc.db.models import now_utc
from myumc.utils.role_permissions import ROLE_CHURCH_LEADER


def _sermon(client, headers, **overrides):
    payload = {
        "title": "Faith that Moves",
        "sermon_date": "2026-10-18T09:00:00Z",
        "preacher_name": "Rev. Nyasha",
        "tags": ["faith"],
        **overrides,
    }
    r = client.post("/api/content/sermons", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def test_members_cannot_create_content(client, user_factory, auth_headers):
    member = user_factory()
    r = client.post(
        "/api/content/sermons",
        json={"title": "Nope", "sermon_date": "2026-10-18T09:00:00Z"},
        headers=auth_headers(member),
    )
    assert r.status_code == 403


def test_drafts_hidden_until_published(client, user_factory, auth_headers, org_factory):
    org = org_factory()
    leader = user_factory(role=ROLE_CHURCH_LEADER, organization=org)
    sermon = _sermon(client, auth_headers(leader))
    assert sermon["organization_id"] == str(org.id)
    assert sermon["content_type"] == "sermon"

    assert client.get(f"/api/content/sermons/{sermon['id']}").status_code == 404
    assert client.get(f"/api/content/sermons/{sermon['id']}", headers=auth_headers(leader)).status_code == 200

    r = client.post(f"/api/content/{sermon['id']}/publish", headers=auth_headers(leader))
    assert r.status_code == 200
    assert r.json()["is_published"] is True
    assert r.json()["published_at"] is not None

    r = client.get(f"/api/content/sermons/{sermon['id']}")
    assert r.status_code == 200

    latest = client.get("/api/content/sermons/latest", params={"organization_id": str(org.id)}).json()
    assert [s["id"] for s in latest] == [sermon["id"]]


def test_sermon_interactions(client, user_factory, auth_headers):
    leader = user_factory(role=ROLE_CHURCH_LEADER)
    listener = user_factory()
    sermon = _sermon(client, auth_headers(leader), is_published=True)

    r = client.post(f"/api/content/sermons/{sermon['id']}/ratings", json={"rating": 4}, headers=auth_headers(listener))
    assert r.status_code == 201, r.text
    r = client.post(f"/api/content/sermons/{sermon['id']}/ratings", json={"rating": 9}, headers=auth_headers(listener))
    assert r.status_code == 422

    r = client.post(f"/api/content/sermons/{sermon['id']}/downloads", headers=auth_headers(listener))
    assert r.json()["downloads"] == 1
    assert r.json()["rating"] == 4.0

    r = client.post(f"/api/content/{sermon['id']}/views")
    assert r.status_code == 200
    assert r.json()["views"] == 1


def test_blog_likes_and_comments(client, user_factory, auth_headers):
    leader = user_factory(role=ROLE_CHURCH_LEADER)
    reader = user_factory()
    r = client.post(
        "/api/content/blog-posts",
        json={"title": "Harvest Thanksgiving", "body": "We gathered...", "is_published": True},
        headers=auth_headers(leader),
    )
    assert r.status_code == 201, r.text
    post = r.json()

    assert client.post(f"/api/content/blog-posts/{post['id']}/likes", headers=auth_headers(reader)).status_code == 201
    assert client.post(f"/api/content/blog-posts/{post['id']}/likes", headers=auth_headers(reader)).status_code == 400
    assert client.post(f"/api/content/blog-posts/{post['id']}/likes").status_code == 401

    r = client.post(f"/api/content/{post['id']}/comments", json={"text": "Amen"}, headers=auth_headers(reader))
    assert r.status_code == 201
    parent = r.json()
    r = client.post(
        f"/api/content/{post['id']}/comments",
        json={"text": "Indeed", "parent_comment_id": parent["id"]},
        headers=auth_headers(leader),
    )
    assert r.status_code == 201

    comments = client.get(f"/api/content/{post['id']}/comments").json()
    assert [c["text"] for c in comments] == ["Amen", "Indeed"]

    popular = client.get("/api/content/blog-posts/popular").json()
    assert popular[0]["like_count"] == 1


def test_announcements(client, user_factory, auth_headers):
    leader = user_factory(role=ROLE_CHURCH_LEADER)
    member = user_factory()
    now = now_utc()
    r = client.post(
        "/api/content/announcements",
        json={
            "title": "Choir practice moved",
            "start_date": (now - timedelta(days=1)).isoformat(),
            "end_date": (now + timedelta(days=6)).isoformat(),
            "priority": "High",
            "requires_acknowledgement": True,
            "is_published": True,
        },
        headers=auth_headers(leader),
    )
    assert r.status_code == 201, r.text
    announcement = r.json()

    active = client.get("/api/content/announcements/active").json()
    assert [a["id"] for a in active] == [announcement["id"]]
    assert active[0]["priority"] == "High"

    url = f"/api/content/announcements/{announcement['id']}/acknowledgements"
    assert client.post(url, headers=auth_headers(member)).status_code == 201
    assert client.post(url, headers=auth_headers(member)).status_code == 400


def test_delete_content(client, user_factory, auth_headers):
    leader = user_factory(role=ROLE_CHURCH_LEADER)
    sermon = _sermon(client, auth_headers(leader))
    assert client.delete(f"/api/content/{sermon['id']}", headers=auth_headers(user_factory())).status_code == 403
    assert client.delete(f"/api/content/{sermon['id']}", headers=auth_headers(leader)).status_code == 204
    assert client.get(f"/api/content/sermons/{sermon['id']}", headers=auth_headers(leader)).status_code == 404


def test_latest_and_popular_default_to_five(client, user_factory, auth_headers):
    leader = user_factory(role=ROLE_CHURCH_LEADER)
    headers = auth_headers(leader)
    for day in range(1, 8):
        _sermon(client, headers, title=f"Week {day}", sermon_date=f"2026-09-{day:02d}T09:00:00Z", is_published=True)
        r = client.post(
            "/api/content/blog-posts",
            json={"title": f"Update {day}", "body": "News", "is_published": True},
            headers=headers,
        )
        assert r.status_code == 201, r.text

    latest = client.get("/api/content/sermons/latest").json()
    assert [s["title"] for s in latest] == ["Week 7", "Week 6", "Week 5", "Week 4", "Week 3"]
    assert len(client.get("/api/content/blog-posts/popular").json()) == 5
    assert len(client.get("/api/content/sermons/latest", params={"count": 7}).json()) == 7
