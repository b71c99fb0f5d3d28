"""Correios (Brazilian postal service) API client: prices, deadlines and pre-postage."""

from correios_hub.integrations.correios import CorreiosClient, CorreiosError

__all__ = ["CorreiosClient", "CorreiosError"]
