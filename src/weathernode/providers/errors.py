"""Error types raised by weather providers."""


class ProviderError(Exception):
    """Base error for backend capability providers."""


class ProviderConfigError(ProviderError):
    """The provider is missing configuration it needs to make a call."""

    def __init__(self, setting: str) -> None:
        self.setting = setting
        super().__init__(f"{setting} environment variable not set")
