"""Version information."""

# https://www.python.org/dev/peps/pep-0440
__version__ = "0.3.0"

try:
    from keyload.buildinfo import __commit__, __timestamp__

    __verbose_version__ = f"{__version__} ({__commit__})"
except ImportError:
    __verbose_version__ = __version__
    __commit__ = None  # type: ignore
    __timestamp__ = None  # type: ignore
