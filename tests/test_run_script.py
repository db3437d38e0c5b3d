"""
Tests for the run.py launcher script.

Validates each step of the launcher without actually starting services.
"""
import sys
import urllib.error
from unittest.mock import patch, MagicMock, Mock

import pytest

# Import functions from run.py at project root
sys.path.insert(0, str(__import__("pathlib").Path(__file__).resolve().parent.parent))
import run


class TestCheckPythonDeps:
    """Test Python dependency checking."""

    def test_all_deps_present(self):
        """All required packages are installed in the test environment."""
        assert run.check_python_deps() is True

    @patch("builtins.__import__", side_effect=ImportError("no module"))
    def test_missing_dep_returns_false(self, mock_import):
        assert run.check_python_deps() is False


class TestPrepareDataRoot:
    """Test data directory creation."""

    def test_creates_directory(self, tmp_path):
        target = tmp_path / "data" / "nested"
        with patch("run.DATA_ROOT", str(target)):
            assert run.prepare_data_root() is True
        assert target.is_dir()

    def test_existing_directory(self, tmp_path):
        with patch("run.DATA_ROOT", str(tmp_path)):
            assert run.prepare_data_root() is True

    @patch("os.makedirs", side_effect=PermissionError("denied"))
    def test_unwritable_returns_false(self, mock_makedirs, tmp_path):
        with patch("run.DATA_ROOT", str(tmp_path / "x")):
            assert run.prepare_data_root() is False


class TestOpenBrowser:
    """Test waiting for the server before opening the browser."""

    @patch("webbrowser.open")
    @patch("urllib.request.urlopen")
    def test_opens_when_ready(self, mock_urlopen, mock_open):
        mock_resp = MagicMock()
        mock_resp.__enter__ = Mock(return_value=Mock(status=200))
        mock_resp.__exit__ = Mock(return_value=False)
        mock_urlopen.return_value = mock_resp

        run.open_browser()
        mock_open.assert_called_once_with(run.APP_URL)

    @patch("time.sleep")
    @patch("webbrowser.open")
    @patch("urllib.request.urlopen")
    def test_opens_after_retries(self, mock_urlopen, mock_open, mock_sleep):
        mock_resp = MagicMock()
        mock_resp.__enter__ = Mock(return_value=Mock(status=200))
        mock_resp.__exit__ = Mock(return_value=False)
        mock_urlopen.side_effect = [
            urllib.error.URLError("refused"),
            urllib.error.URLError("refused"),
            mock_resp,
        ]

        run.open_browser()
        assert mock_urlopen.call_count == 3
        mock_open.assert_called_once()

    @patch("time.sleep")
    @patch("webbrowser.open")
    @patch("urllib.request.urlopen", side_effect=urllib.error.URLError("refused"))
    def test_opens_anyway_after_timeout(self, mock_urlopen, mock_open, mock_sleep):
        run.open_browser()
        assert mock_urlopen.call_count == 30
        mock_open.assert_called_once_with(run.APP_URL)


class TestMainFlow:
    """Test the main() orchestration flow."""

    @patch("run.launch_app")
    @patch("run.prepare_data_root", return_value=True)
    @patch("run.check_python_deps", return_value=True)
    def test_full_success_flow(self, mock_deps, mock_prepare, mock_launch):
        result = run.main()
        assert result == 0
        mock_deps.assert_called_once()
        mock_prepare.assert_called_once()
        mock_launch.assert_called_once()

    @patch("run.launch_app")
    @patch("run.check_python_deps", return_value=False)
    def test_missing_deps_exits(self, mock_deps, mock_launch):
        result = run.main()
        assert result == 1
        mock_launch.assert_not_called()

    @patch("run.launch_app")
    @patch("run.prepare_data_root", return_value=False)
    @patch("run.check_python_deps", return_value=True)
    def test_data_root_failure_exits(self, mock_deps, mock_prepare, mock_launch):
        assert run.main() == 1
        mock_launch.assert_not_called()


class TestLaunchApp:
    """Test the app launcher function."""

    @patch("threading.Thread")
    @patch("subprocess.run")
    def test_launch_calls_python_m_src(self, mock_run, mock_thread):
        mock_t = Mock()
        mock_thread.return_value = mock_t
        run.launch_app()
        mock_run.assert_called_once()
        args = mock_run.call_args[0][0]
        assert args[0] == sys.executable
        assert args[1:] == ["-m", "src"]

    @patch("threading.Thread")
    @patch("subprocess.run")
    def test_launch_passes_data_root(self, mock_run, mock_thread):
        mock_thread.return_value = Mock()
        run.launch_app()
        assert mock_run.call_args[1]["env"]["INVOICE_DATA_ROOT"] == run.DATA_ROOT

    @patch("threading.Thread")
    @patch("subprocess.run")
    def test_launch_starts_browser_thread(self, mock_run, mock_thread):
        mock_t = Mock()
        mock_thread.return_value = mock_t
        run.launch_app()
        mock_thread.assert_called_once()
        mock_t.start.assert_called_once()
        assert mock_thread.call_args[1]["daemon"] is True
