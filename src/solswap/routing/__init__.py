"""Quote routing through the Jupiter aggregator."""

from solswap.routing.base import Quote, SwapRequest
from solswap.routing.jupiter import JupiterClient

__all__ = ["Quote", "SwapRequest", "JupiterClient"]
