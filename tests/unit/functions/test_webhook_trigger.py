"""Unit tests for functions/webhook_trigger.py: webhook request/response contract."""

import json
from typing import Any
from unittest.mock import MagicMock, patch

import azure.functions as func
import pytest

from monday_provisioner.functions.webhook_trigger import handle_webhook, sanitize_item_name

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _request(body: Any = None, method: str = "POST", raw: bytes | None = None) -> func.HttpRequest:
    data = raw if raw is not None else json.dumps(body).encode()
    return func.HttpRequest(method=method, url="/", body=data)


def _event(**event: Any) -> dict[str, Any]:
    return {"event": {"type": "create_pulse", "boardId": 1, **event}}


def _run_with_pipeline(req: func.HttpRequest) -> tuple[func.HttpResponse, MagicMock]:
    mock_pipeline = MagicMock()
    with (
        patch("monday_provisioner.functions.webhook_trigger.load_config") as mock_load,
        patch(
            "monday_provisioner.functions.webhook_trigger.provisioning_pipeline_from_config",
            return_value=mock_pipeline,
        ) as mock_factory,
    ):
        response = handle_webhook(req)
    if mock_factory.called:
        mock_factory.assert_called_once_with(mock_load.return_value)
    return response, mock_pipeline


# ---------------------------------------------------------------------------
# Method handling
# ---------------------------------------------------------------------------


class TestMethod:
    @pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE", "OPTIONS"])
    def test_non_post_returns_405(self, method: str) -> None:
        response, mock_pipeline = _run_with_pipeline(_request(raw=b"", method=method))

        assert response.status_code == 405
        assert response.get_body() == b"Method Not Allowed\n"
        mock_pipeline.provision_item.assert_not_called()


# ---------------------------------------------------------------------------
# Body parsing
# ---------------------------------------------------------------------------


class TestBodyParsing:
    @pytest.mark.parametrize("raw", [b"", b"{not json", b"\xff\xfe"])
    def test_invalid_json_returns_400(self, raw: bytes) -> None:
        response, _ = _run_with_pipeline(_request(raw=raw))

        assert response.status_code == 400
        assert response.mimetype == "application/json"
        assert json.loads(response.get_body()) == {"error": "Invalid JSON"}

    def test_non_object_json_returns_400(self) -> None:
        response, _ = _run_with_pipeline(_request([1, 2, 3]))

        assert response.status_code == 400
        assert json.loads(response.get_body()) == {"error": "Invalid JSON"}


# ---------------------------------------------------------------------------
# Challenge handshake
# ---------------------------------------------------------------------------


class TestChallenge:
    def test_echoes_challenge(self) -> None:
        response, mock_pipeline = _run_with_pipeline(_request({"challenge": "3eZbrw1aB"}))

        assert response.status_code == 200
        assert response.mimetype == "application/json"
        assert json.loads(response.get_body()) == {"challenge": "3eZbrw1aB"}
        mock_pipeline.provision_item.assert_not_called()

    def test_echoes_challenge_regardless_of_other_fields(self) -> None:
        body = {"challenge": "tok", **_event(pulseName="Launch", pulseId=42)}

        response, mock_pipeline = _run_with_pipeline(_request(body))

        assert json.loads(response.get_body()) == {"challenge": "tok"}
        mock_pipeline.provision_item.assert_not_called()


# ---------------------------------------------------------------------------
# Event validation
# ---------------------------------------------------------------------------


class TestEventValidation:
    @pytest.mark.parametrize(
        "body",
        [
            _event(pulseId=42),
            _event(pulseName="Launch"),
            _event(pulseName="", pulseId=42),
            _event(pulseName="Launch", pulseId=None),
            {"event": None},
            {"something": "else"},
        ],
    )
    def test_missing_fields_return_400(self, body: dict[str, Any]) -> None:
        response, mock_pipeline = _run_with_pipeline(_request(body))

        assert response.status_code == 400
        assert json.loads(response.get_body()) == {"error": "pulseName is required"}
        mock_pipeline.provision_item.assert_not_called()


# ---------------------------------------------------------------------------
# Provisioning
# ---------------------------------------------------------------------------


class TestProvisioning:
    def test_success_returns_confirmation(self) -> None:
        response, mock_pipeline = _run_with_pipeline(
            _request(_event(pulseName="Launch", pulseId=42))
        )

        assert response.status_code == 200
        assert response.mimetype == "text/plain"
        assert response.get_body() == b"Directory structure created.\n"
        mock_pipeline.provision_item.assert_called_once_with(42, "Launch")

    def test_string_pulse_id_is_passed_through(self) -> None:
        _, mock_pipeline = _run_with_pipeline(_request(_event(pulseName="Launch", pulseId="42")))
        mock_pipeline.provision_item.assert_called_once_with("42", "Launch")

    def test_pulse_name_is_sanitized(self) -> None:
        _, mock_pipeline = _run_with_pipeline(
            _request(_event(pulseName="Q3/Launch: Café & Co!", pulseId=42))
        )
        mock_pipeline.provision_item.assert_called_once_with(42, "Q3Launch Caf  Co")

    def test_pipeline_failure_returns_500(self) -> None:
        mock_pipeline = MagicMock()
        mock_pipeline.provision_item.side_effect = FileNotFoundError("template missing")

        with (
            patch("monday_provisioner.functions.webhook_trigger.load_config"),
            patch(
                "monday_provisioner.functions.webhook_trigger.provisioning_pipeline_from_config",
                return_value=mock_pipeline,
            ),
        ):
            response = handle_webhook(_request(_event(pulseName="Launch", pulseId=42)))

        assert response.status_code == 500
        assert response.get_body() == b"Internal Server Error\n"

    def test_config_failure_returns_500(self) -> None:
        with patch(
            "monday_provisioner.functions.webhook_trigger.load_config",
            side_effect=KeyError("MONDAY_API_TOKEN"),
        ):
            response = handle_webhook(_request(_event(pulseName="Launch", pulseId=42)))

        assert response.status_code == 500


class TestSanitizeItemName:
    def test_keeps_letters_digits_and_spaces(self) -> None:
        assert sanitize_item_name("Project 42 Alpha") == "Project 42 Alpha"

    def test_strips_everything_else(self) -> None:
        assert sanitize_item_name("a_b-c.d/é") == "abcd"
