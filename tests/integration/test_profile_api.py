import inspect
import io
from unittest.mock import MagicMock

import pytest
from PIL import Image

from myumc.api.main import app
from myumc.api.profile import MAX_UPLOAD_BYTES, get_image_optimizer, get_profile_storage, upload_profile_picture
from myumc.db.repositories import audits as audit_repo
from myumc.db.repositories import users as user_repo
from myumc.services.profile_storage import StorageError


def _png_bytes(size=(64, 64)):
    out = io.BytesIO()
    Image.new("RGB", size, (90, 90, 200)).save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def storage():
    storage = MagicMock()
    storage.upload_profile_picture.side_effect = lambda data, name: f"https://cdn.example.org/profiles/{name}"
    app.dependency_overrides[get_profile_storage] = lambda: storage
    yield storage
    app.dependency_overrides.pop(get_profile_storage, None)


def test_upload_updates_profile(client, storage, user_factory, auth_headers, db_session):
    user = user_factory()
    r = client.post(
        "/api/profile/upload-picture",
        files={"file": ("me.png", _png_bytes(), "image/png")},
        headers=auth_headers(user),
    )
    assert r.status_code == 200, r.text
    url = r.json()["url"]
    assert url.startswith(f"https://cdn.example.org/profiles/{user.id}-")
    assert url.endswith(".png")

    data, name = storage.upload_profile_picture.call_args.args
    assert Image.open(io.BytesIO(data)).format == "PNG"

    db_session.expire_all()
    assert user_repo.get_user(db_session, user.id).profile_picture_url == url


@pytest.mark.parametrize("files,detail", [
    (None, "No file uploaded."),
    ({"file": ("empty.jpg", b"", "image/jpeg")}, "No file uploaded."),
    ({"file": ("anim.gif", b"GIF89a....", "image/gif")}, "Only .jpg, .jpeg, and .png files are allowed."),
    ({"file": ("huge.jpg", b"0" * (5 * 1024 * 1024 + 1), "image/jpeg")}, "File size must be less than 5MB."),
])
def test_upload_validation(client, storage, user_factory, auth_headers, files, detail):
    user = user_factory()
    r = client.post("/api/profile/upload-picture", files=files, headers=auth_headers(user))
    assert r.status_code == 400
    assert r.json()["detail"] == detail
    storage.upload_profile_picture.assert_not_called()


def test_upload_rejects_non_image_bytes(client, storage, user_factory, auth_headers):
    user = user_factory()
    r = client.post(
        "/api/profile/upload-picture",
        files={"file": ("fake.jpg", b"plain text pretending", "image/jpeg")},
        headers=auth_headers(user),
    )
    assert r.status_code == 400


def test_storage_failure_is_bad_gateway(client, storage, user_factory, auth_headers, db_session):
    storage.upload_profile_picture.side_effect = StorageError("Failed to upload profile picture")
    user = user_factory()
    r = client.post(
        "/api/profile/upload-picture",
        files={"file": ("me.png", _png_bytes(), "image/png")},
        headers=auth_headers(user),
    )
    assert r.status_code == 502

    entries = audit_repo.get_audit_logs(db_session, user_id=user.id, action_type="profile_picture_update")
    assert [e.status for e in entries] == ["failure"]
    assert entries[0].metadata_json["error"] == "Failed to upload profile picture"


def test_upload_requires_authentication(client, storage):
    r = client.post("/api/profile/upload-picture", files={"file": ("me.png", _png_bytes(), "image/png")})
    assert r.status_code == 401


def test_upload_handler_runs_in_threadpool():
    # Pillow, boto3 and the session all block
    assert not inspect.iscoroutinefunction(upload_profile_picture)


def test_upload_at_size_limit_reaches_optimizer(client, storage, user_factory, auth_headers):
    optimizer = MagicMock()
    optimizer.optimize.return_value = b"optimized"
    app.dependency_overrides[get_image_optimizer] = lambda: optimizer
    try:
        user = user_factory()
        r = client.post(
            "/api/profile/upload-picture",
            files={"file": ("big.jpg", b"0" * MAX_UPLOAD_BYTES, "image/jpeg")},
            headers=auth_headers(user),
        )
        assert r.status_code == 200, r.text
        data = optimizer.optimize.call_args.args[0]
        assert len(data) == MAX_UPLOAD_BYTES

        r = client.post(
            "/api/profile/upload-picture",
            files={"file": ("bigger.jpg", b"0" * (MAX_UPLOAD_BYTES + 1), "image/jpeg")},
            headers=auth_headers(user),
        )
        assert r.status_code == 400
        assert optimizer.optimize.call_count == 1
    finally:
        app.dependency_overrides.pop(get_image_optimizer, None)
