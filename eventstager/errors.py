class EventStagerError(Exception):
    """Base for errors the CLI reports instead of a traceback."""


class ConfigError(EventStagerError):
    pass


class StoreError(EventStagerError):
    pass
