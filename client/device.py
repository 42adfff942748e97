"""Device fingerprint sent with every request in the x-device-info header."""
from __future__ import annotations

import json
import logging
import os
import platform
import re
import uuid
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_DEVICE_FILE = Path.home() / ".notes-client" / "device.json"

_mobile_re = re.compile(r"Mobile|Android|iPhone")
_version_re = re.compile(r"(Firefox|Chrome|Edg|Safari)/([\d.]+)")


def get_device_id(path: str | os.PathLike | None = None) -> str:
    """Return the persisted device id, generating and saving it on first use."""
    path = Path(path or os.getenv("NOTES_DEVICE_FILE") or DEFAULT_DEVICE_FILE)
    try:
        device_id = json.loads(path.read_text()).get("deviceId")
    except (OSError, ValueError, AttributeError):
        device_id = None
    if device_id:
        return device_id

    device_id = str(uuid.uuid4())
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"deviceId": device_id}))
    logger.info("Generated new device id %s at %s", device_id, path)
    return device_id


def get_browser_name(user_agent: str) -> str:
    # Order matters: Edge and Chrome both claim Safari
    if "Firefox" in user_agent:
        return "Firefox"
    if "Edg" in user_agent:
        return "Edge"
    if "Chrome" in user_agent:
        return "Chrome"
    if "Safari" in user_agent:
        return "Safari"
    return "Unknown"


def get_browser_version(user_agent: str) -> str:
    match = _version_re.search(user_agent)
    return match.group(2) if match else "Unknown"


def get_device_info(user_agent: str, device_file: str | os.PathLike | None = None) -> dict[str, Any]:
    return {
        "deviceId": get_device_id(device_file),
        "deviceName": platform.node() or user_agent,
        "deviceType": "Mobile" if _mobile_re.search(user_agent) else "Desktop",
        "platform": f"{platform.system()} {platform.machine()}".strip(),
        "userAgent": user_agent,
        "browser": get_browser_name(user_agent),
        "browserVersion": get_browser_version(user_agent),
    }
