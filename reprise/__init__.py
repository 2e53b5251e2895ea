"""Client library for the Bitrise CI API: typed responses, link parsing and errors."""

__version__ = "0.1.5"

__all__ = ["client", "errors", "models", "pipelines", "url_parser"]