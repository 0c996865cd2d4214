import pytest


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep tests away from the user's catalog, credentials and log files."""
    for name in (
        "GALLERYSYNC_CATALOG",
        "GALLERYSYNC_EDIT_URL",
        "GALLERYSYNC_EDIT_USER",
        "GALLERYSYNC_EDIT_PASS",
        "GALLERYSYNC_EDIT_TIMEOUT",
        "GALLERYSYNC_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GALLERYSYNC_CREDENTIALS_FILE", str(tmp_path / "no-credentials.env"))
    monkeypatch.setenv("GALLERYSYNC_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("GALLERYSYNC_LOG_DISABLED", "1")
