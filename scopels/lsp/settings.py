from dataclasses import dataclass
from typing import Any


@dataclass
class ServerSettings:
    """
    Options sent by the client in initializationOptions.

    Keys are camelCase on the wire:
        {"maxItems": 200}
    """

    # Cap on items per completion response; None means unlimited.
    max_items: int | None = None

    @classmethod
    def from_initialization_options(cls, options: Any) -> "ServerSettings":
        """Read settings, ignoring unknown keys and malformed values."""
        settings = cls()
        if not isinstance(options, dict):
            return settings

        max_items = options.get("maxItems")
        if isinstance(max_items, int) and not isinstance(max_items, bool) and max_items > 0:
            settings.max_items = max_items

        return settings
