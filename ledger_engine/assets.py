"""
Asset Service.

The asset catalogue. Symbols are stored upper-case and are
unique. Accounting never reads the catalogue; ledger entries
keep the symbol exactly as entered.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from storage.models.ledger import Asset
from storage.repositories.accounts import AssetRepository

from .errors import DuplicateAsset, NotFound


logger = logging.getLogger(__name__)

DEFAULT_PRECISION = 8


class AssetService:
    """Service for the asset catalogue."""

    def __init__(self, session: Session):
        self.session = session
        self.assets = AssetRepository(session)

    def _require(self, asset_id: str) -> Asset:
        asset = self.assets.get_asset(asset_id)
        if asset is None:
            raise NotFound("asset", asset_id)
        return asset

    def _ensure_free(self, symbol: str, asset_id: Optional[str] = None) -> None:
        existing = self.assets.get_asset_by_symbol(symbol)
        if existing is not None and existing.id != asset_id:
            raise DuplicateAsset(symbol)

    def create_asset(
        self,
        symbol: str,
        name: Optional[str] = None,
        precision: Optional[int] = None,
    ) -> Asset:
        """
        Register an asset.

        Raises:
            DuplicateAsset: Symbol already registered
        """
        symbol = symbol.strip().upper()
        self._ensure_free(symbol)

        asset = self.assets.create_asset(
            symbol=symbol,
            name=name,
            precision=DEFAULT_PRECISION if precision is None else precision,
        )
        self.assets.commit()
        logger.info(f"Registered asset {symbol}")
        return asset

    def get_asset(self, asset_id: str) -> Asset:
        return self._require(asset_id)

    def list_assets(self) -> List[Asset]:
        return self.assets.list_assets()

    def update_asset(self, asset_id: str, changes: Mapping[str, Any]) -> Asset:
        self._require(asset_id)
        fields: Dict[str, Any] = {}
        if changes.get("symbol") is not None:
            fields["symbol"] = changes["symbol"].strip().upper()
            self._ensure_free(fields["symbol"], asset_id)
        if "name" in changes:
            fields["name"] = changes["name"]
        if changes.get("precision") is not None:
            fields["precision"] = changes["precision"]

        asset = self.assets.update_asset(asset_id, fields)
        self.assets.commit()
        return asset

    def delete_asset(self, asset_id: str) -> None:
        self._require(asset_id)
        self.assets.delete_asset(asset_id)
        self.assets.commit()
