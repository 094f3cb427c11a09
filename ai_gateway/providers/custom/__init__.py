from .adapter import CustomProvider
from .config import CustomProviderConfig
from .transforms import FunctionTransform, Transform, as_transform

__all__ = ["CustomProvider", "CustomProviderConfig", "FunctionTransform", "Transform", "as_transform"]
