"""Domain-specific errors for obsmacros."""


class ObsMacrosError(Exception):
    """Base error for obsmacros."""


class ConfigError(ObsMacrosError):
    """Base config file error."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file does not exist."""


class ConfigParseError(ConfigError):
    """Raised when the config file is not a readable config document."""


class ConfigSaveError(ConfigError):
    """Raised when writing the config file fails."""


class MacroDecodeError(ObsMacrosError):
    """Raised when a stored macro entry cannot be decoded."""


class UnknownActionTagError(MacroDecodeError):
    """Raised when an action type tag matches no known action."""


class MissingParameterError(MacroDecodeError):
    """Raised when a required action parameter is absent."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Missing action parameter '{name}'")
        self.name = name


class MalformedParameterError(MacroDecodeError):
    """Raised when an action parameter cannot be parsed to its expected type."""

    def __init__(self, name: str, value: object) -> None:
        super().__init__(f"Malformed action parameter '{name}': {value!r}")
        self.name = name
        self.value = value


class RemoteError(ObsMacrosError):
    """Base remote surface error."""


class RemoteConnectError(RemoteError):
    """Raised when connecting or authenticating to OBS fails."""


class RemoteCommandError(RemoteError):
    """Raised when OBS rejects a request or the request cannot be delivered."""
