"""
Runtime configuration.

Values come from, in order: explicit arguments (CLI options), environment
variables, a KEY=VALUE credentials file, then built-in defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

# === DEFAULTS ===
DEFAULT_CATALOG_PATH = Path.home() / ".gallerysync" / "public.db"
DEFAULT_EDIT_URL = "http://localhost:8080/cms/resources"
DEFAULT_CREDENTIALS_FILE = Path.home() / ".gallerysync" / "credentials.env"


@dataclass
class Settings:
    catalog_path: Path
    edit_url: str
    edit_user: Optional[str] = None
    edit_pass: Optional[str] = None
    edit_timeout: Optional[float] = None


def parse_env_file(path: Path) -> Dict[str, str]:
    """Read KEY=VALUE lines, ignoring blanks and # comments."""
    data = {}
    try:
        text = path.read_text()
    except OSError:
        return {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        data[key.strip()] = value.strip().strip('"').strip("'")
    return data


def _find_credentials_file() -> Optional[Path]:
    env_path = os.getenv("GALLERYSYNC_CREDENTIALS_FILE")
    if env_path:
        return Path(env_path)
    if DEFAULT_CREDENTIALS_FILE.exists():
        return DEFAULT_CREDENTIALS_FILE
    return None


def load_settings(catalog_path=None, edit_url: Optional[str] = None,
                  edit_user: Optional[str] = None, edit_pass: Optional[str] = None,
                  edit_timeout: Optional[float] = None) -> Settings:
    creds_file = _find_credentials_file()
    file_values = parse_env_file(creds_file) if creds_file else {}

    def _lookup(name: str) -> Optional[str]:
        return os.getenv(name) or file_values.get(name)

    catalog = catalog_path or _lookup("GALLERYSYNC_CATALOG") or DEFAULT_CATALOG_PATH
    url = edit_url or _lookup("GALLERYSYNC_EDIT_URL") or DEFAULT_EDIT_URL
    if "://" not in url:
        url = f"http://{url}"

    if edit_timeout is None:
        raw_timeout = _lookup("GALLERYSYNC_EDIT_TIMEOUT")
        if raw_timeout:
            try:
                edit_timeout = float(raw_timeout)
            except ValueError:
                raise ValueError(f"GALLERYSYNC_EDIT_TIMEOUT is not a number: {raw_timeout!r}")

    return Settings(
        catalog_path=Path(os.path.expanduser(str(catalog))),
        edit_url=url.rstrip("/"),
        edit_user=edit_user or _lookup("GALLERYSYNC_EDIT_USER"),
        edit_pass=edit_pass or _lookup("GALLERYSYNC_EDIT_PASS"),
        edit_timeout=edit_timeout,
    )
