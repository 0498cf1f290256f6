from pathlib import Path

import pytest

from notifyhub.settings import Settings

_CONFIG_PATH = Path(__file__).parent.parent / "config.test.toml"


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings from config.test.toml with the recycle-bin root moved into tmp_path."""
    settings = Settings(config_path=str(_CONFIG_PATH))
    return settings.model_copy(update={"RECYCLEBIN_ROOT": str(tmp_path / "recyclebin")})
