from __future__ import annotations

from pathlib import Path
import pytest

from callisto.config_store import ConfigStore
from callisto.models import CallistoConfig
from callisto.notifier import ChangeNotifier


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    """
    path to a config file that does not exist yet.
    tests call initialize_or_load or write the file themselves.
    """
    return tmp_path / "data" / ".callisto.json"


@pytest.fixture()
def events() -> list[tuple[str, CallistoConfig]]:
    return []


@pytest.fixture()
def store(events: list[tuple[str, CallistoConfig]]) -> ConfigStore:
    notifier = ChangeNotifier()
    notifier.subscribe(lambda event, cfg: events.append((event, cfg)))
    return ConfigStore(notifier)


@pytest.fixture()
def initialized(store: ConfigStore, config_path: Path) -> Path:
    config_path.parent.mkdir(parents=True)
    store.initialize_or_load(config_path)
    return config_path
