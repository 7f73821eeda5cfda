import pytest

from nebo.env import AppEnv, load_env

ALL_KEYS = [
    "NEBO_APP_DIR",
    "NEBO_APP_SOCK",
    "NEBO_APP_ID",
    "NEBO_APP_NAME",
    "NEBO_APP_VERSION",
    "NEBO_APP_DATA",
]


def test_load_env(monkeypatch):
    monkeypatch.setenv("NEBO_APP_DIR", "/apps/test")
    monkeypatch.setenv("NEBO_APP_SOCK", "/tmp/test.sock")
    monkeypatch.setenv("NEBO_APP_ID", "com.example.test")
    monkeypatch.setenv("NEBO_APP_NAME", "Test App")
    monkeypatch.setenv("NEBO_APP_VERSION", "1.2.3")
    monkeypatch.setenv("NEBO_APP_DATA", "/apps/test/data")

    env = load_env()

    assert env.dir == "/apps/test"
    assert env.sock_path == "/tmp/test.sock"
    assert env.id == "com.example.test"
    assert env.name == "Test App"
    assert env.version == "1.2.3"
    assert env.data_dir == "/apps/test/data"


def test_load_env_missing(monkeypatch):
    for key in ALL_KEYS:
        monkeypatch.delenv(key, raising=False)

    env = load_env()

    assert env.sock_path == ""
    assert env.name == ""
    assert env == AppEnv()


def test_load_env_from_mapping():
    env = load_env({"NEBO_APP_SOCK": "/tmp/test.sock", "NEBO_APP_NAME": "Test App"})
    assert env.sock_path == "/tmp/test.sock"
    assert env.name == "Test App"
    assert env.dir == ""


def test_app_env_is_frozen():
    env = load_env({"NEBO_APP_NAME": "Test App"})
    with pytest.raises(AttributeError):
        env.name = "changed"
    assert env.name == "Test App"