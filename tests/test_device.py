"""Tests for the client device fingerprint."""

import json

import pytest

from client.device import get_browser_name, get_browser_version, get_device_id, get_device_info

CHROME = ("Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
          "Chrome/120.0.6099.71 Safari/537.36")
EDGE = CHROME + " Edg/120.0.2210.61"
FIREFOX = "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0"
IPHONE = ("Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 "
          "(KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1")


def test_device_id_generated_once(tmp_path):
    path = tmp_path / "nested" / "device.json"
    first = get_device_id(path)
    assert get_device_id(path) == first
    assert json.loads(path.read_text()) == {"deviceId": first}


def test_corrupt_device_file_is_replaced(tmp_path):
    path = tmp_path / "device.json"
    path.write_text("not json")
    device_id = get_device_id(path)
    assert device_id
    assert get_device_id(path) == device_id


@pytest.mark.parametrize(
    "user_agent, name",
    [(CHROME, "Chrome"), (EDGE, "Edge"), (FIREFOX, "Firefox"), (IPHONE, "Safari"), ("curl/8.0", "Unknown")],
)
def test_browser_name(user_agent, name):
    assert get_browser_name(user_agent) == name


def test_browser_version():
    assert get_browser_version(FIREFOX) == "121.0"
    assert get_browser_version("curl/8.0") == "Unknown"


def test_device_info(tmp_path):
    info = get_device_info(IPHONE, tmp_path / "device.json")
    assert info["deviceType"] == "Mobile"
    assert info["browser"] == "Safari"
    assert info["userAgent"] == IPHONE
    assert set(info) == {
        "deviceId", "deviceName", "deviceType", "platform", "userAgent", "browser", "browserVersion",
    }
    assert get_device_info(CHROME, tmp_path / "device.json")["deviceId"] == info["deviceId"]
