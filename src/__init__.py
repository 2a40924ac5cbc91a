"""alchemy4d - potion recipe crafting backend.

Turns a list of materials plus an incantation into a structured potion
recipe generated by an LLM, relays the generation live to the client and
caches the parsed recipe under a content fingerprint.
"""

from alchemy4d.version import __version__

__all__ = ["__version__"]
