import re
import uuid

import pytest

from tubely.api.v1 import dependencies as deps
from tubely.core.config import MediaSettings
from tubely.db.models.videos import Video
from tubely.features.media.probe import ProbeFailure
from tubely.utils.s3 import ObjectStoreError

MP4 = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 1000


def _upload(client, video_id, headers, data=MP4, content_type="video/mp4", field="video"):
    return client.post(
        f"/api/v1/videos/{video_id}/upload",
        headers=headers,
        files={field: ("clip.mp4", data, content_type)},
    )


def _reload(session, video) -> Video:
    session.expire_all()
    return session.get(Video, video.id)


def test_upload_landscape(client, session, draft_video, auth_headers, object_store, prober, staging_dir):
    resp = _upload(client, draft_video.id, auth_headers)

    assert resp.status_code == 200, resp.text
    body = resp.json()
    key = body["video_key"]
    assert re.fullmatch(r"landscape/[0-9a-f]{64}\.mp4", key)
    assert body["video_url"].endswith("/" + key)
    assert body["id"] == str(draft_video.id)

    assert object_store.objects[key] == MP4
    assert object_store.content_types[key] == "video/mp4"
    assert _reload(session, draft_video).video_key == key

    # ffprobe saw a complete file, which is gone afterwards
    [(probed_path, existed)] = prober.calls
    assert existed
    assert probed_path.parent == staging_dir
    assert not probed_path.exists()
    assert list(staging_dir.iterdir()) == []


def test_upload_portrait_goes_to_portrait_folder(client, draft_video, auth_headers, prober):
    prober.width, prober.height = 1080, 1920
    resp = _upload(client, draft_video.id, auth_headers)
    assert resp.json()["video_key"].startswith("portrait/")


def test_upload_square_goes_to_other_folder(client, draft_video, auth_headers, prober):
    prober.width, prober.height = 1080, 1080
    resp = _upload(client, draft_video.id, auth_headers)
    assert resp.json()["video_key"].startswith("other/")


def test_reupload_replaces_reference_with_fresh_key(client, session, draft_video, auth_headers, object_store):
    first = _upload(client, draft_video.id, auth_headers).json()["video_key"]
    second = _upload(client, draft_video.id, auth_headers).json()["video_key"]

    assert first != second
    assert _reload(session, draft_video).video_key == second
    assert len(object_store.puts) == 2


def test_invalid_video_id(client, auth_headers):
    assert _upload(client, "not-a-uuid", auth_headers).status_code == 400


def test_invalid_id_checked_before_auth(client):
    assert _upload(client, "not-a-uuid", {}).status_code == 400


def test_missing_token(client, draft_video):
    resp = _upload(client, draft_video.id, {})
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


def test_bad_token(client, draft_video):
    resp = _upload(client, draft_video.id, {"Authorization": "Bearer not.a.jwt"})
    assert resp.status_code == 401


def test_unknown_video(client, auth_headers):
    assert _upload(client, uuid.uuid4(), auth_headers).status_code == 404


def test_non_owner_is_forbidden_and_writes_nothing(
    client, session, draft_video, other_auth_headers, object_store, prober, staging_dir
):
    resp = _upload(client, draft_video.id, other_auth_headers)

    assert resp.status_code == 403
    assert object_store.puts == []
    assert prober.calls == []
    assert _reload(session, draft_video).video_key is None
    assert list(staging_dir.iterdir()) == []


def test_missing_file_field(client, draft_video, auth_headers):
    resp = _upload(client, draft_video.id, auth_headers, field="thumbnail")
    assert resp.status_code == 400


def test_payload_too_large_never_stages(
    client, draft_video, auth_headers, monkeypatch, object_store, prober, staging_dir
):
    monkeypatch.setattr(deps, "media_settings", MediaSettings(max_upload_bytes=100))

    resp = _upload(client, draft_video.id, auth_headers, data=b"x" * 101)

    assert resp.status_code == 413
    assert list(staging_dir.iterdir()) == []
    assert prober.calls == []
    assert object_store.puts == []


def test_payload_at_limit_is_accepted(client, draft_video, auth_headers, monkeypatch):
    monkeypatch.setattr(deps, "media_settings", MediaSettings(max_upload_bytes=100))
    resp = _upload(client, draft_video.id, auth_headers, data=b"x" * 100)
    assert resp.status_code == 200


@pytest.mark.parametrize("content_type", ["video/quicktime", "image/png", "application/octet-stream"])
def test_unsupported_media_type(client, draft_video, auth_headers, object_store, staging_dir, content_type):
    resp = _upload(client, draft_video.id, auth_headers, content_type=content_type)

    assert resp.status_code == 415
    assert object_store.puts == []
    assert list(staging_dir.iterdir()) == []


def test_probe_failure_is_dependency_failure(
    client, session, draft_video, auth_headers, object_store, prober, staging_dir
):
    prober.error = ProbeFailure("ffprobe exited with 1: moov atom not found")

    resp = _upload(client, draft_video.id, auth_headers)

    assert resp.status_code == 502
    assert "moov" not in resp.text
    assert object_store.puts == []
    assert _reload(session, draft_video).video_key is None
    assert list(staging_dir.iterdir()) == []


def test_store_failure_cleans_up_and_keeps_record(
    client, session, draft_video, auth_headers, object_store, staging_dir, monkeypatch
):
    def broken_put(key, body, content_type):
        raise ObjectStoreError("put_object failed: SlowDown")

    monkeypatch.setattr(object_store, "put", broken_put)

    resp = _upload(client, draft_video.id, auth_headers)

    assert resp.status_code == 502
    assert "SlowDown" not in resp.text
    assert _reload(session, draft_video).video_key is None
    assert list(staging_dir.iterdir()) == []


def test_create_video(client, auth_headers, owner_id):
    resp = client.post("/api/v1/videos", json={"title": "Boots"}, headers=auth_headers)

    assert resp.status_code == 201
    body = resp.json()
    assert body["owner_id"] == str(owner_id)
    assert body["video_key"] is None
    assert body["video_url"] is None


def test_create_video_requires_token(client):
    assert client.post("/api/v1/videos", json={"title": "Boots"}).status_code == 401


def test_create_then_upload(client, auth_headers):
    video_id = client.post("/api/v1/videos", json={"title": "Boots"}, headers=auth_headers).json()["id"]
    resp = _upload(client, video_id, auth_headers)
    assert resp.status_code == 200
    assert resp.json()["video_key"].startswith("landscape/")
