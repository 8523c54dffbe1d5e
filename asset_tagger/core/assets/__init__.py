from .reconciler import (
    AssetCollection,
    ReconcileResult,
    asset_from_path,
    asset_id_for,
)

__all__ = [
    "AssetCollection",
    "ReconcileResult",
    "asset_from_path",
    "asset_id_for",
]
