# Client-side asset dependencies
from .asset_ref import AssetRef, AssetKind
from .registry import DependencyRegistry
from .loader import AssetLoader
from .materializer import AssetMaterializer, Stylesheet

__all__ = [
    'AssetRef',
    'AssetKind',
    'DependencyRegistry',
    'AssetLoader',
    'AssetMaterializer',
    'Stylesheet',
]
