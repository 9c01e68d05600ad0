from .http import RpcClient

__all__ = ["RpcClient"]
