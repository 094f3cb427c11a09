from .adapter import GrokProvider

__all__ = ["GrokProvider"]
