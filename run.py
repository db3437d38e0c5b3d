"""
Launch script for the invoice printer.

Checks dependencies, prepares the data directory and opens the web
application in the browser.

Usage:
    python run.py
"""
import os
import subprocess
import sys
import threading
import time
import urllib.error
import urllib.request
import webbrowser

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
DATA_ROOT = os.environ.get("INVOICE_DATA_ROOT", os.path.join(PROJECT_ROOT, "data"))
APP_URL = f"http://localhost:{os.environ.get('INVOICE_PORT', '8000')}"


def _print(msg: str) -> None:
    print(f"[run] {msg}")


def check_python_deps() -> bool:
    """Check that required Python packages are installed."""
    missing = []
    for pkg in ["fastapi", "uvicorn", "jinja2", "itsdangerous", "multipart", "reportlab"]:
        try:
            __import__(pkg)
        except ImportError:
            missing.append(pkg)

    if missing:
        _print(f"Missing Python packages: {', '.join(missing)}")
        _print("Install with: pip install -e .[dev]")
        return False
    return True


def prepare_data_root() -> bool:
    """Create the data directory holding the history database and PDFs."""
    try:
        os.makedirs(DATA_ROOT, exist_ok=True)
    except OSError as e:
        _print(f"ERROR: cannot create data directory {DATA_ROOT}: {e}")
        return False
    _print(f"Data directory: {DATA_ROOT}")
    return True


def open_browser() -> None:
    """Wait for the web server to be ready, then open the browser."""
    for _ in range(30):
        try:
            req = urllib.request.Request(APP_URL, method="GET")
            with urllib.request.urlopen(req, timeout=2) as resp:
                if resp.status in (200, 307):
                    _print(f"Opening browser at {APP_URL}")
                    webbrowser.open(APP_URL)
                    return
        except (urllib.error.URLError, ConnectionError, OSError):
            pass
        time.sleep(1)
    _print("WARNING: Could not verify server is running. Open manually: " + APP_URL)
    webbrowser.open(APP_URL)


def launch_app() -> None:
    """Launch the FastAPI web application via uvicorn."""
    _print(f"Launching invoice printer at {APP_URL} ...")

    threading.Thread(target=open_browser, daemon=True).start()

    env = dict(os.environ, INVOICE_DATA_ROOT=DATA_ROOT)
    subprocess.run(
        [sys.executable, "-m", "src"],
        cwd=PROJECT_ROOT,
        env=env,
    )


def main() -> int:
    _print("=" * 50)
    _print("Invoice printer - Launcher")
    _print("=" * 50)

    _print("Checking Python dependencies...")
    if not check_python_deps():
        return 1
    _print("Python dependencies OK.")

    if not prepare_data_root():
        return 1

    launch_app()
    return 0


if __name__ == "__main__":
    sys.exit(main())
