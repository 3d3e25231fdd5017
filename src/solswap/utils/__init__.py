"""Utility modules for solswap."""

from solswap.utils.locks import WalletSwapLock, get_wallet_lock

__all__ = ["WalletSwapLock", "get_wallet_lock"]
