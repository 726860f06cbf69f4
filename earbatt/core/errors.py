"""Domain-specific errors for earbatt."""


class EarbattError(Exception):
    """Base error for earbatt."""


class ConfigError(EarbattError):
    """Base configuration error."""


class ConfigLoadError(ConfigError):
    """Raised when the config file cannot be read."""


class ConfigValidationError(ConfigError):
    """Raised when the config file does not conform to schema or semantics."""


class TransportError(EarbattError):
    """Base transport error."""


class AdapterUnavailableError(TransportError):
    """Raised when no Bluetooth adapter exists or it refuses to power on."""


class DeviceNotFoundError(TransportError):
    """Raised when no known device address carries the target prefix."""


class ConnectionFailedError(TransportError):
    """Raised on RFCOMM connect failures."""


class ConnectionExhaustedError(TransportError):
    """Raised when every connection attempt has failed."""


class TransportSendError(TransportError):
    """Raised when writing to or reading from an open channel fails."""


class TransportTimeoutError(TransportError):
    """Raised when RFCOMM receive times out."""


class DecodeError(EarbattError):
    """Base error for battery response decoding."""


class UnexpectedResponseError(DecodeError):
    """Raised when the response is not a battery status 2 report."""

    def __init__(self, message: str = "Ear 2 not detected", *, command: int | None = None) -> None:
        super().__init__(message)
        self.command = command


class ShortResponseError(DecodeError):
    """Raised when the response is shorter than its header declares."""
