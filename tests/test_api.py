"""
HTTP API Tests
==============

Upload, sampling and export through the FastAPI application.
"""

import asyncio
import base64
import io
import json

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from filmstrip import main
from filmstrip.config import load_config
from filmstrip.main import app
from filmstrip.store import TraceStore


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def uploaded(client, sample_trace_dict):
    response = client.post(
        "/traces",
        params={"name": "profile.json"},
        content=json.dumps(sample_trace_dict),
    )
    assert response.status_code == 201
    return response.json()


class TestServiceEndpoints:
    
    def test_root(self, client):
        body = client.get("/").json()
        
        assert body["status"] == "running"
        assert body["export_formats"] == ["png", "gif"]
    
    def test_health(self, client):
        response = client.get("/health")
        
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestUpload:
    
    def test_upload_returns_summary(self, uploaded):
        assert uploaded["name"] == "profile.json"
        assert uploaded["frame_count"] == 3
        assert uploaded["duration"] == 2_000_000
        assert uploaded["max_gap_ms"] == 1000.0
    
    def test_rejects_non_json_file(self, client):
        response = client.post("/traces", params={"name": "notes.txt"}, content=b"{}")
        
        assert response.status_code == 400
        assert response.json() == {"error": "Only JSON files are accepted", "file_name": "notes.txt"}
    
    def test_rejects_invalid_json(self, client):
        response = client.post("/traces", params={"name": "bad.json"}, content=b"{oops")
        
        assert response.status_code == 400
        assert "Invalid JSON" in response.json()["error"]
    
    def test_rejects_bad_trace_shape(self, client):
        response = client.post("/traces", params={"name": "list.json"}, content=b"[1, 2]")
        
        assert response.status_code == 400
    
    def test_upload_parses_in_worker_thread(self, client, monkeypatch, sample_trace_dict):
        loops = []
        original_add_file = TraceStore.add_file
        
        def recording_add_file(store, name, content):
            try:
                asyncio.get_running_loop()
                loops.append("event-loop")
            except RuntimeError:
                loops.append("worker")
            return original_add_file(store, name, content)
        
        monkeypatch.setattr(TraceStore, "add_file", recording_add_file)
        response = client.post(
            "/traces", params={"name": "profile.json"}, content=json.dumps(sample_trace_dict)
        )
        
        assert response.status_code == 201
        assert loops == ["worker"]
    
    def test_list_get_delete(self, client, uploaded):
        file_id = uploaded["id"]
        
        listing = client.get("/traces").json()
        assert file_id in [t["id"] for t in listing["traces"]]
        
        assert client.get(f"/traces/{file_id}").json()["id"] == file_id
        assert client.delete(f"/traces/{file_id}").status_code == 200
        assert client.get(f"/traces/{file_id}").status_code == 404
        assert client.delete(f"/traces/{file_id}").status_code == 404
    
    def test_clear(self, client, uploaded):
        assert client.delete("/traces").json()["removed"] >= 1
        assert client.get("/traces").json()["count"] == 0


class TestFrames:
    
    def test_default_policy(self, client, uploaded):
        body = client.post(f"/traces/{uploaded['id']}/frames", json={}).json()
        
        assert body["total_count"] == 3
        assert body["displayed_count"] == 3
        assert body["interval_label"] == "100ms"
        assert [f["relative_time"] for f in body["frames"]] == ["0ms", "1.00s", "2.00s"]
        assert "data_uri" not in body["frames"][0]
    
    def test_interval_policy_with_images(self, client, uploaded):
        body = client.post(
            f"/traces/{uploaded['id']}/frames",
            params={"include_images": "true"},
            json={"use_interval_filtering": True, "interval_ms": 750},
        ).json()
        
        # Ticks at 0, 750, 1500 ms plus a trailing tick for the 2s capture
        assert body["displayed_count"] == 4
        assert body["interval_label"] == "750ms"
        assert body["frames"][-1]["timestamp"] == 3_000_000
        assert body["frames"][-1]["display_timestamp"] == 1_000_000 + 2_250_000
        assert body["frames"][-1]["data_uri"].startswith("data:image/png;base64,")
    
    def test_unset_range_end_covers_whole_trace(self, client, uploaded):
        body = client.post(
            f"/traces/{uploaded['id']}/frames",
            json={"use_time_range_filter": True, "range_start_ms": 500},
        ).json()
        
        assert body["displayed_count"] == 3
    
    def test_invalid_policy(self, client, uploaded):
        response = client.post(f"/traces/{uploaded['id']}/frames", json={"interval_ms": 0})
        assert response.status_code == 422
    
    def test_unknown_trace(self, client):
        assert client.post("/traces/missing/frames", json={}).status_code == 404


class TestExport:
    
    def test_png_download(self, client, uploaded):
        response = client.post(
            f"/traces/{uploaded['id']}/export",
            json={"format": "png", "settings": {"frame_height_px": 40, "padding_px": 4}},
        )
        
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.headers["x-frame-count"] == "3"
        assert ".png" in response.headers["content-disposition"]
        assert response.content.startswith(b"\x89PNG")
    
    def test_gif_download(self, client, uploaded):
        response = client.post(
            f"/traces/{uploaded['id']}/export",
            json={
                "format": "gif",
                "policy": {"use_interval_filtering": True, "interval_ms": 1000},
                "settings": {"frame_height_px": 20, "show_timestamps": False},
            },
        )
        
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/gif"
        assert response.content[:6] == b"GIF89a"
    
    def test_export_failure_suggests_other_format(self, client, jpeg_b64):
        trace = {
            "traceEvents": [
                {
                    "name": "Screenshot",
                    "cat": "disabled-by-default-devtools.screenshot",
                    "ts": 1,
                    "args": {"snapshot": jpeg_b64},
                },
                {
                    "name": "Screenshot",
                    "cat": "disabled-by-default-devtools.screenshot",
                    "ts": 2,
                    "args": {"snapshot": base64.b64encode(b"junk").decode()},
                },
            ]
        }
        file_id = client.post(
            "/traces", params={"name": "broken.json"}, content=json.dumps(trace)
        ).json()["id"]
        
        response = client.post(f"/traces/{file_id}/export", json={"format": "gif"})
        
        assert response.status_code == 422
        assert "Frame 1" in response.json()["error"]
        assert response.json()["hint"] == "Try exporting as PNG instead"
    
    def test_empty_trace_export_fails(self, client):
        file_id = client.post(
            "/traces", params={"name": "empty.json"}, content=b'{"traceEvents": []}'
        ).json()["id"]
        
        response = client.post(f"/traces/{file_id}/export", json={})
        
        assert response.status_code == 422
        assert response.json()["hint"] == "Try exporting as GIF instead"


class TestConfiguredDefaults:
    """Request fields left out fall back to the loaded configuration."""
    
    @pytest.fixture
    def configured_client(self, tmp_path, monkeypatch, sample_trace_dict):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("sampling:\n  use_interval_filtering: true\n  interval_ms: 750\n")
        monkeypatch.setenv("FILMSTRIP_EXPORT_HEIGHT", "64")
        monkeypatch.setattr(main, "settings", load_config(str(config_path)))
        
        with TestClient(app) as test_client:
            file_id = test_client.post(
                "/traces",
                params={"name": "profile.json"},
                content=json.dumps(sample_trace_dict),
            ).json()["id"]
            yield test_client, file_id
    
    def test_export_height_from_environment(self, configured_client):
        client, file_id = configured_client
        
        response = client.post(f"/traces/{file_id}/export", json={"format": "png"})
        
        assert response.status_code == 200
        with Image.open(io.BytesIO(response.content)) as image:
            # 64px frames + 30px label band + 2 * 10px padding
            assert image.height == 114
    
    def test_partial_settings_keep_configured_height(self, configured_client):
        client, file_id = configured_client
        
        response = client.post(
            f"/traces/{file_id}/export",
            json={"format": "png", "settings": {"padding_px": 0}},
        )
        
        with Image.open(io.BytesIO(response.content)) as image:
            assert image.height == 64 + 30
    
    def test_sampling_policy_from_config(self, configured_client):
        client, file_id = configured_client
        
        body = client.post(f"/traces/{file_id}/frames", json={}).json()
        
        assert body["interval_label"] == "750ms"
        assert body["displayed_count"] == 4
    
    def test_request_fields_override_config(self, configured_client):
        client, file_id = configured_client
        
        body = client.post(
            f"/traces/{file_id}/frames", json={"use_interval_filtering": False}
        ).json()
        
        assert body["displayed_count"] == 3
