"""Pipefy client module."""

from .pipefy import PipefyClient, PipefyGraphQLClientViaToken, PipefyTokenConfig

__all__ = ["PipefyClient", "PipefyGraphQLClientViaToken", "PipefyTokenConfig"]
