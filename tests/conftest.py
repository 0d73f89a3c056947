"""Pytest configuration and shared fixtures.

Usage Guide:
- For schema tests: use the dict factories in tests.factories
- For reconciliation tests: use the mock collaborators (make_bot,
  make_repository, make_server) and the fixtures below
"""

from collections.abc import Iterator

import pytest

from xbot_sync.config import get_settings
from xbot_sync.schemas import BotConfigTemplate
from tests.factories import make_template



@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    """Settings are cached; reset so monkeypatched env vars take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def template() -> BotConfigTemplate:
    """Shared bot configuration template."""
    return make_template()


@pytest.fixture
def template_file(tmp_path, template):
    """Template written as JSON, using the camelCase keys users write."""
    path = tmp_path / "bot_template.json"
    path.write_text(template.model_dump_json(by_alias=True))
    return path
