"""JagJar revenue-share backend."""

__version__ = '0.1.0'
