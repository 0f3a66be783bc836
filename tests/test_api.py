"""
Tests for the REST and WebSocket API.
"""

from conftest import build_dribble, frame_payload


# =============================================================================
# REST
# =============================================================================

def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["websocket"] == "/ws/session"


def test_health_check(client):
    """Test health check endpoint"""
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["templates_loaded"] == 7


class TestTemplates:

    def test_list(self, client):
        response = client.get("/api/templates")
        assert response.status_code == 200
        ids = [t["template_id"] for t in response.json()]
        assert len(ids) == 7
        assert "dribble_front_onehand_v" in ids

    def test_filter_by_mode(self, client):
        response = client.get("/api/templates", params={"mode": "shooting"})
        assert response.status_code == 200
        templates = response.json()
        assert len(templates) == 2
        assert all(t["mode"] == "shooting" for t in templates)

    def test_invalid_mode(self, client):
        response = client.get("/api/templates", params={"mode": "passing"})
        assert response.status_code == 422

    def test_detail(self, client):
        response = client.get("/api/templates/dribble_front_onehand_oneside_height")
        assert response.status_code == 200
        body = response.json()
        assert body["camera"] == "front"
        assert body["weights"] == {"posture": 0.4, "execution": 0.4, "consistency": 0.2}

        receive_zone = next(m for m in body["metrics"] if m["metric_id"] == "receive_zone")
        assert receive_zone["type"] == "rangeByOption"
        assert receive_zone["params"]["option_key"] == "handedness"

    def test_unknown(self, client):
        response = client.get("/api/templates/nope")
        assert response.status_code == 404


class TestScore:

    def test_score_features(self, client):
        response = client.post("/api/analysis/score", json={
            "template_id": "shoot_side_form_close",
            "features": [{"name": "forearmVerticalDeg", "value": 6.5}],
            "options": {"ageGroup": "14-15"},
        })
        assert response.status_code == 200
        body = response.json()
        assert body["overall"] == 100.0
        assert [f["id"] for f in body["findings"]] == ["forearm_vertical"]
        assert body["findings"][0]["is_positive"] is True

    def test_feature_names_are_normalized(self, client):
        response = client.post("/api/analysis/score", json={
            "template_id": "shoot_side_form_close",
            "features": [{"name": "forearm_vertical_deg", "value": 6.5}],
        })
        assert response.status_code == 200
        assert response.json()["overall"] == 100.0

    def test_auto_handedness_scores_zero_for_hand_specific_range(self, client):
        response = client.post("/api/analysis/score", json={
            "template_id": "dribble_front_onehand_oneside_height",
            "features": [{"name": "receiveZoneQuarterNorm", "value": 0.0}],
        })
        assert response.status_code == 200
        body = response.json()
        assert body["overall"] == 0.0
        assert body["findings"][0]["id"] == "receive_zone"
        assert body["findings"][0]["is_positive"] is False

    def test_unknown_template(self, client):
        response = client.post("/api/analysis/score", json={
            "template_id": "nope",
            "features": [],
        })
        assert response.status_code == 404


class TestAnalyzeFrames:

    def test_dribble_session(self, client):
        frames = [frame_payload(f) for f in build_dribble()]
        response = client.post("/api/analysis/frames", json={
            "template_id": "dribble_front_onehand_v",
            "frames": frames,
            "age_group": "11-13",
        })
        assert response.status_code == 200
        body = response.json()
        assert body["frame_count"] == 120
        assert body["hand_used"] == "right"
        assert body["age_group"] == "11-13"
        assert body["is_side_view"] is False
        assert len(body["cycles"]) == 8
        assert len(body["contacts"]) == 8
        assert "crossMidlineRate" in body["computed_values"]

    def test_shooting_has_no_cycles(self, client):
        frames = [frame_payload(f) for f in build_dribble()[:10]]
        response = client.post("/api/analysis/frames", json={
            "template_id": "shoot_front_form_close",
            "frames": frames,
        })
        assert response.status_code == 200
        body = response.json()
        assert body["cycles"] == []
        assert body["is_side_view"] is None

    def test_empty_frames_rejected(self, client):
        response = client.post("/api/analysis/frames", json={
            "template_id": "dribble_front_onehand_v",
            "frames": [],
        })
        assert response.status_code == 422

    def test_unknown_template(self, client):
        frames = [frame_payload(f) for f in build_dribble()[:5]]
        response = client.post("/api/analysis/frames", json={
            "template_id": "nope",
            "frames": frames,
        })
        assert response.status_code == 404


# =============================================================================
# WebSocket
# =============================================================================

class TestWebSocket:

    def test_full_session(self, client):
        frames = build_dribble()
        with client.websocket_connect("/ws/session") as ws:
            ws.send_json({"type": "start_session", "data": {"template_id": "dribble_front_onehand_v"}})
            started = ws.receive_json()
            assert started["type"] == "session_started"
            assert started["data"]["mode"] == "dribbling"

            for frame in frames:
                ws.send_json({"type": "frame", "data": frame_payload(frame)})
                ack = ws.receive_json()
                assert ack["type"] == "frame_ack"

            assert ack["data"]["frame_count"] == len(frames)
            assert "kneeAngleDeg" in ack["data"]["metrics"]

            ws.send_json({"type": "end_session"})
            result = ws.receive_json()
            assert result["type"] == "analysis_result"
            assert result["data"]["frame_count"] == len(frames)
            assert len(result["data"]["cycles"]) == 8

    def test_frame_before_start(self, client):
        frame = build_dribble()[0]
        with client.websocket_connect("/ws/session") as ws:
            ws.send_json({"type": "frame", "data": frame_payload(frame)})
            message = ws.receive_json()
            assert message["type"] == "error"
            assert message["data"]["error"] == "Session not started"

    def test_unknown_template(self, client):
        with client.websocket_connect("/ws/session") as ws:
            ws.send_json({"type": "start_session", "data": {"template_id": "nope"}})
            message = ws.receive_json()
            assert message["type"] == "error"
            assert "Unknown template" in message["data"]["error"]

    def test_unknown_message_type(self, client):
        with client.websocket_connect("/ws/session") as ws:
            ws.send_json({"type": "ping"})
            message = ws.receive_json()
            assert message["type"] == "error"

    def test_invalid_json(self, client):
        with client.websocket_connect("/ws/session") as ws:
            ws.send_text("{not json")
            message = ws.receive_json()
            assert message["data"]["error"] == "Invalid JSON"

    def test_reset(self, client):
        frames = build_dribble()[:3]
        with client.websocket_connect("/ws/session") as ws:
            ws.send_json({"type": "start_session", "data": {"template_id": "dribble_front_onehand_v"}})
            ws.receive_json()
            for frame in frames:
                ws.send_json({"type": "frame", "data": frame_payload(frame)})
                ws.receive_json()

            ws.send_json({"type": "reset"})
            assert ws.receive_json()["type"] == "session_reset"

            ws.send_json({"type": "frame", "data": frame_payload(frames[0])})
            assert ws.receive_json()["data"]["frame_count"] == 1

    def test_end_without_frames(self, client):
        with client.websocket_connect("/ws/session") as ws:
            ws.send_json({"type": "start_session", "data": {"template_id": "dribble_front_onehand_v"}})
            ws.receive_json()
            ws.send_json({"type": "end_session"})
            message = ws.receive_json()
            assert message["type"] == "error"
            assert message["data"]["error"] == "No frames to analyze"
