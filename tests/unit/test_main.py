"""Unit tests for __main__.py: local Functions host launcher."""

import os
from unittest.mock import patch

from monday_provisioner.__main__ import APP_ROOT, build_command, main

_ENV = {
    "MONDAY_API_TOKEN": "tok",
    "SOURCE_FOLDER_PATH": "/src",
    "DESTINATION_FOLDER_PATH": "/dst",
}


class TestBuildCommand:
    def test_passes_port(self) -> None:
        assert build_command(8080) == ["func", "start", "--port", "8080"]


class TestMain:
    def test_starts_host_on_configured_port(self) -> None:
        env = {**_ENV, "PORT": "7071"}
        with (
            patch.dict(os.environ, env, clear=True),
            patch("monday_provisioner.__main__.subprocess.call", return_value=0) as mock_call,
        ):
            assert main() == 0

        mock_call.assert_called_once_with(["func", "start", "--port", "7071"], cwd=APP_ROOT)

    def test_defaults_to_port_80(self) -> None:
        with (
            patch.dict(os.environ, _ENV, clear=True),
            patch("monday_provisioner.__main__.subprocess.call", return_value=0) as mock_call,
        ):
            main()

        assert mock_call.call_args[0][0][-1] == "80"

    def test_returns_1_when_core_tools_missing(self) -> None:
        with (
            patch.dict(os.environ, _ENV, clear=True),
            patch(
                "monday_provisioner.__main__.subprocess.call", side_effect=FileNotFoundError("func")
            ),
        ):
            assert main() == 1
