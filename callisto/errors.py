"""
errors.py

exception hierarchy for the config store and the http relay.
"""


class StoreError(Exception):
    """Base exception for the config store."""


class StoreIOError(StoreError):
    """The backing file could not be created, read or written."""


class DecodeError(StoreError):
    """The backing file is not valid JSON or not a valid document."""


class EncodeError(StoreError):
    """The in-memory document could not be serialized."""


class NotFoundError(StoreError):
    """A required entity is missing."""


class ConfigNotFound(NotFoundError):
    def __init__(self, msg: str = "Config file not found"):
        super().__init__(msg)


class WorkspaceNotFound(NotFoundError):
    def __init__(self, msg: str = "Workspace not found"):
        super().__init__(msg)


class CollectionNotFound(NotFoundError):
    def __init__(self, msg: str = "Collection not found"):
        super().__init__(msg)


class RequestNotFound(NotFoundError):
    def __init__(self, msg: str = "Request not found"):
        super().__init__(msg)


class EnvironmentNotFound(NotFoundError):
    def __init__(self, msg: str = "Environment not found"):
        super().__init__(msg)


class RelayError(Exception):
    """The outbound http request could not be built or sent."""
