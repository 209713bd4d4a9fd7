import pytest


@pytest.fixture(autouse=True)
def isolate_user_config(tmp_path, monkeypatch):
    """Point the global config directory at an empty temporary directory.

    Keeps a developer's ``~/.config/commitbot/config.json`` and any
    ``COMMITBOT_*`` or ``OPENAI_API_KEY`` variables out of the tests.
    """
    config_dir = tmp_path / "user-config"
    config_dir.mkdir()
    monkeypatch.setattr("commitbot.config.loader._get_config_directory", lambda: config_dir)
    for variable in ("COMMITBOT_MODEL", "COMMITBOT_PROVIDER", "OPENAI_API_KEY"):
        monkeypatch.delenv(variable, raising=False)
    yield config_dir
