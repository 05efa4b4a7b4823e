from typing import List, Optional


class ConfigError(Exception):
    """Base error for anything wrong with a client configuration file."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class ConfigNotFoundError(ConfigError):
    pass


class ConfigFormatError(ConfigError):
    """Unsupported extension, unparsable text, or a non-mapping document."""
    pass


class MissingKeysError(ConfigError):
    def __init__(self, missing: List[str], path: Optional[str] = None):
        self.missing = list(missing)
        super().__init__(f"Missing required keys: {', '.join(self.missing)}", path)


class ConfigValueError(ConfigError):
    pass
