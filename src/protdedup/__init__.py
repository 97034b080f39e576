"""Keep one protein-to-genome alignment per locus."""

from protdedup._version import __version__

__all__ = ['__version__']
