"""Exception hierarchy for world generation."""


class WorldGenError(Exception):
    """Base class for all world generation errors."""


class ConfigurationError(WorldGenError, ValueError):
    """A requested run is misconfigured and cannot start."""


class UnknownThemeError(ConfigurationError):
    """Raised when a theme name does not match any registry key."""

    def __init__(self, name: str, available):
        self.name = name
        self.available = list(available)
        super().__init__(
            f"Unknown theme: {name}. Available themes: {', '.join(self.available)}"
        )
