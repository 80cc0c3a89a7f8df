"""asset-catalog: API-key gated catalog of community-submitted effect assets."""

__version__ = "0.1.0"
