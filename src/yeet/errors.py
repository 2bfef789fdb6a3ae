"""Shared error types for provider resolution and generation."""


class YeetError(Exception):
    """Base error for everything the engine can raise."""


class ConfigError(YeetError):
    """The configuration file could not be read or parsed."""

    def __init__(self, path: str, detail: str = "") -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config file {path}" + (f": {detail}" if detail else ""))


class UnknownProviderError(YeetError):
    """Provider name is neither in the registry nor in ``[custom]``."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"unknown provider: {name} — add it to [custom.{name}] in config.toml"
        )


class MissingCredentialError(YeetError):
    """The provider needs an API key and none was found."""

    def __init__(self, provider: str, env_var: str = "") -> None:
        self.provider = provider
        self.env_var = env_var
        super().__init__(f"{provider} API key not found — run: yeet auth set {provider}")


class NoProviderAvailableError(YeetError):
    """Auto mode found no provider with a usable credential."""

    def __init__(self) -> None:
        super().__init__("no API key found for any provider — run: yeet auth set <provider>")


class GenerationError(YeetError):
    """Base error for failures while talking to a provider."""


class TransportError(GenerationError):
    """DNS, connect, TLS, timeout or deadline failure."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("API request failed" + (f": {detail}" if detail else ""))


class ProtocolError(GenerationError):
    """The provider answered with a non-2xx status or an error payload."""

    def __init__(self, status: int, message: str | None = None) -> None:
        self.status = status
        self.message = message
        if message:
            super().__init__(f"API error: {message}")
        else:
            super().__init__(f"API error: status {status}")


class ParseError(GenerationError):
    """The response body or a stream event was not valid."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("failed to parse response" + (f": {detail}" if detail else ""))


class EmptyResponseError(GenerationError):
    """A well-formed response carried no content."""

    def __init__(self) -> None:
        super().__init__("empty response from API")


class StreamReadError(GenerationError):
    """The stream broke after at least one event was received."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("stream interrupted" + (f": {detail}" if detail else ""))


class GitError(YeetError):
    """A ``git`` (or forge CLI) command exited non-zero or could not start."""

    def __init__(self, command: str, output: str = "") -> None:
        self.command = command
        self.output = output
        super().__init__(f"{command} failed" + (f": {output}" if output else ""))


class ForgeError(YeetError):
    """A pull/merge request cannot be opened from this repository state."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)
