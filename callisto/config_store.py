"""
config_store.py

read-modify-write engine for the callisto config file.

every mutation reads the whole file fresh, changes it in memory, writes it back
whole and then notifies observers. nothing is cached between calls.

lookup rules:
- walking down to a parent (workspace, collection) fails loudly with a NotFoundError
- the entity being deleted may be absent; delete is idempotent

concurrent mutations on the same path race (last writer wins, lost updates are
possible) unless serialize_writes=True, which holds a per-path lock across the
whole read-modify-write cycle.
"""

from __future__ import annotations

import contextlib
import logging
import os
import threading
from pathlib import Path
from typing import Callable, Iterable, Iterator

from .codec import decode, encode
from .errors import (
    CollectionNotFound,
    ConfigNotFound,
    DecodeError,
    EnvironmentNotFound,
    RequestNotFound,
    StoreIOError,
    WorkspaceNotFound,
)
from .ids import new_id
from .models import CallistoConfig, Collection, Environment, Request, Variable, Workspace
from .notifier import ChangeNotifier
from .settings import CONFIG_EVENT

logger = logging.getLogger(__name__)


class ConfigStore:
    def __init__(
        self,
        notifier: ChangeNotifier | None = None,
        id_factory: Callable[[], str] = new_id,
        *,
        serialize_writes: bool = False,
    ):
        self.notifier = notifier
        self._new_id = id_factory
        self._serialize_writes = serialize_writes
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # -------------------------
    # File access
    # -------------------------

    def _read(self, path: Path) -> CallistoConfig:
        try:
            raw = Path(path).read_bytes()
        except FileNotFoundError as e:
            raise ConfigNotFound() from e
        except OSError as e:
            raise StoreIOError(f"Failed to read config file: {e}") from e

        try:
            return decode(raw)
        except DecodeError:
            logger.error("Config file %s could not be decoded", path)
            raise

    def _write(self, path: Path, config: CallistoConfig) -> None:
        path = Path(path)
        text = encode(config)
        tmp = path.with_name(f"{path.name}.{os.getpid()}.{threading.get_ident()}.tmp")
        try:
            tmp.write_text(text, encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise StoreIOError(f"Failed to write config file: {e}") from e

    @contextlib.contextmanager
    def _locked(self, path: Path) -> Iterator[None]:
        if not self._serialize_writes:
            yield
            return
        key = str(Path(path).expanduser().resolve())
        with self._locks_guard:
            lock = self._locks.setdefault(key, threading.Lock())
        with lock:
            yield

    def _publish(self, config: CallistoConfig) -> None:
        if self.notifier is None:
            logger.debug("No notifier attached; %s not emitted", CONFIG_EVENT)
            return
        self.notifier.publish(CONFIG_EVENT, config)

    def _mutate(
        self,
        path: Path,
        action: str,
        change: Callable[[CallistoConfig], None],
        *,
        create_missing: bool = False,
    ) -> CallistoConfig:
        with self._locked(path):
            try:
                config = self._read(path)
            except ConfigNotFound:
                if not create_missing:
                    raise
                config = CallistoConfig.empty()

            change(config)
            self._write(path, config)

        logger.info("%s persisted to %s", action, path)
        self._publish(config)
        return config

    # -------------------------
    # Lookups
    # -------------------------

    @staticmethod
    def _workspace(config: CallistoConfig, workspace_id: str) -> Workspace:
        ws = next((w for w in config.workspaces if w.id == workspace_id), None)
        if ws is None:
            raise WorkspaceNotFound()
        return ws

    @classmethod
    def _collection(cls, config: CallistoConfig, workspace_id: str, collection_id: str) -> Collection:
        ws = cls._workspace(config, workspace_id)
        coll = next((c for c in ws.collections if c.id == collection_id), None)
        if coll is None:
            raise CollectionNotFound()
        return coll

    # -------------------------
    # Document
    # -------------------------

    def initialize_or_load(self, path: Path) -> CallistoConfig:
        """Create an empty document on first run, otherwise load the existing one."""
        path = Path(path)
        with self._locked(path):
            if not path.exists():
                config = CallistoConfig.empty()
                self._write(path, config)
                logger.info("Created default config at %s", path)
                return config
            return self._read(path)

    get_config = initialize_or_load

    def load(self, path: Path) -> CallistoConfig:
        return self._read(path)

    # -------------------------
    # Workspaces
    # -------------------------

    def add_workspace(self, path: Path, name: str) -> CallistoConfig:
        def change(config: CallistoConfig) -> None:
            config.workspaces.append(Workspace(id=self._new_id(), name=name))

        return self._mutate(path, "add_workspace", change, create_missing=True)

    def delete_workspace(self, path: Path, workspace_id: str) -> CallistoConfig:
        def change(config: CallistoConfig) -> None:
            config.workspaces = [w for w in config.workspaces if w.id != workspace_id]

        return self._mutate(path, "delete_workspace", change)

    # -------------------------
    # Collections
    # -------------------------

    def create_collection(self, path: Path, workspace_id: str, name: str) -> CallistoConfig:
        def change(config: CallistoConfig) -> None:
            ws = self._workspace(config, workspace_id)
            ws.collections.append(Collection(id=self._new_id(), name=name))

        return self._mutate(path, "create_collection", change)

    def rename_collection(self, path: Path, workspace_id: str, collection_id: str, new_name: str) -> CallistoConfig:
        def change(config: CallistoConfig) -> None:
            self._collection(config, workspace_id, collection_id).name = new_name

        return self._mutate(path, "rename_collection", change)

    def delete_collection(self, path: Path, workspace_id: str, collection_id: str) -> CallistoConfig:
        def change(config: CallistoConfig) -> None:
            ws = self._workspace(config, workspace_id)
            ws.collections = [c for c in ws.collections if c.id != collection_id]

        return self._mutate(path, "delete_collection", change)

    # -------------------------
    # Requests
    # -------------------------

    def create_request(
        self,
        path: Path,
        workspace_id: str,
        collection_id: str,
        name: str,
        req_type: str,
        method: str,
        curl: str,
    ) -> CallistoConfig:
        def change(config: CallistoConfig) -> None:
            coll = self._collection(config, workspace_id, collection_id)
            coll.requests.append(Request(
                id=self._new_id(),
                name=name,
                req_type=req_type,
                method=method,
                curl=curl,
            ))

        return self._mutate(path, "create_request", change)

    def update_request(
        self,
        path: Path,
        workspace_id: str,
        collection_id: str,
        request_id: str,
        name: str,
        req_type: str,
        method: str,
        curl: str,
    ) -> CallistoConfig:
        def change(config: CallistoConfig) -> None:
            coll = self._collection(config, workspace_id, collection_id)
            req = next((r for r in coll.requests if r.id == request_id), None)
            if req is None:
                raise RequestNotFound()
            req.name = name
            req.req_type = req_type
            req.method = method
            req.curl = curl

        return self._mutate(path, "update_request", change)

    def delete_request(self, path: Path, workspace_id: str, collection_id: str, request_id: str) -> CallistoConfig:
        def change(config: CallistoConfig) -> None:
            coll = self._collection(config, workspace_id, collection_id)
            coll.requests = [r for r in coll.requests if r.id != request_id]

        return self._mutate(path, "delete_request", change)

    # -------------------------
    # Environments
    # -------------------------

    def create_environment(self, path: Path, name: str, variables: Iterable[Variable]) -> CallistoConfig:
        def change(config: CallistoConfig) -> None:
            config.environments.append(Environment(
                id=self._new_id(),
                name=name,
                variables=[v.model_copy() for v in variables],
            ))

        return self._mutate(path, "create_environment", change)

    def update_environment(
        self,
        path: Path,
        environment_id: str,
        name: str,
        variables: Iterable[Variable],
    ) -> CallistoConfig:
        def change(config: CallistoConfig) -> None:
            env = next((e for e in config.environments if e.id == environment_id), None)
            if env is None:
                raise EnvironmentNotFound()
            env.name = name
            env.variables = [v.model_copy() for v in variables]

        return self._mutate(path, "update_environment", change)

    def delete_environment(self, path: Path, environment_id: str) -> CallistoConfig:
        def change(config: CallistoConfig) -> None:
            config.environments = [e for e in config.environments if e.id != environment_id]

        return self._mutate(path, "delete_environment", change)
