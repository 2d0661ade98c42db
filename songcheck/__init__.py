"""songcheck - compare local audio files against the Spotify catalog."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("songcheck")
except PackageNotFoundError:
    # Development environment fallback
    __version__ = "0.1.0-dev"

__license__ = "MIT"
