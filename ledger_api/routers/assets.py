"""
FastAPI Router for the Asset Catalogue.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from ledger_api.dependencies import get_asset_service
from ledger_api.schemas import AssetCreate, AssetResponse, AssetUpdate
from ledger_engine.assets import AssetService

router = APIRouter(prefix="/assets", tags=["Assets"])


@router.get("", response_model=List[AssetResponse])
def list_assets(service: AssetService = Depends(get_asset_service)):
    return [AssetResponse.model_validate(a) for a in service.list_assets()]


@router.post("", response_model=AssetResponse, status_code=status.HTTP_201_CREATED)
def create_asset(
    data: AssetCreate,
    service: AssetService = Depends(get_asset_service),
):
    """Register an asset. The symbol is stored upper-case and must be unique."""
    asset = service.create_asset(symbol=data.symbol, name=data.name, precision=data.precision)
    return AssetResponse.model_validate(asset)


@router.get("/{asset_id}", response_model=AssetResponse)
def get_asset(asset_id: str, service: AssetService = Depends(get_asset_service)):
    return AssetResponse.model_validate(service.get_asset(asset_id))


@router.patch("/{asset_id}", response_model=AssetResponse)
def update_asset(
    asset_id: str,
    data: AssetUpdate,
    service: AssetService = Depends(get_asset_service),
):
    asset = service.update_asset(asset_id, data.model_dump(exclude_unset=True))
    return AssetResponse.model_validate(asset)


@router.delete("/{asset_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_asset(asset_id: str, service: AssetService = Depends(get_asset_service)):
    service.delete_asset(asset_id)
