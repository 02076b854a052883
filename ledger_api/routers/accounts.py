"""
FastAPI Router for Account Endpoints.

Provides REST API for trading accounts:
- CRUD and archiving
- Open balances per symbol
- Realized cash P&L
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status

from ledger_api.dependencies import get_account_service
from ledger_api.schemas import (
    AccountCreate,
    AccountResponse,
    AccountUpdate,
    BalanceResponse,
    PnLResponse,
)
from ledger_engine.accounts import AccountService

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.get("", response_model=List[AccountResponse])
def list_accounts(
    include_archived: bool = Query(False, description="Include archived accounts"),
    service: AccountService = Depends(get_account_service),
):
    """List accounts, newest first."""
    return [AccountResponse.model_validate(a) for a in service.list_accounts(include_archived)]


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    data: AccountCreate,
    service: AccountService = Depends(get_account_service),
):
    account = service.create_account(name=data.name, base_currency=data.base_currency)
    return AccountResponse.model_validate(account)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: str,
    service: AccountService = Depends(get_account_service),
):
    return AccountResponse.model_validate(service.get_account(account_id))


@router.patch("/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: str,
    data: AccountUpdate,
    service: AccountService = Depends(get_account_service),
):
    account = service.update_account(account_id, data.model_dump(exclude_unset=True))
    return AccountResponse.model_validate(account)


@router.post("/{account_id}/archive", response_model=AccountResponse)
def archive_account(
    account_id: str,
    service: AccountService = Depends(get_account_service),
):
    """Hide the account from default listings. Its entries are kept."""
    return AccountResponse.model_validate(service.archive_account(account_id))


@router.post("/{account_id}/unarchive", response_model=AccountResponse)
def unarchive_account(
    account_id: str,
    service: AccountService = Depends(get_account_service),
):
    return AccountResponse.model_validate(service.unarchive_account(account_id))


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    account_id: str,
    service: AccountService = Depends(get_account_service),
):
    """Delete the account and every entry it owns."""
    service.delete_account(account_id)


@router.get("/{account_id}/balance", response_model=BalanceResponse)
def get_balance(
    account_id: str,
    service: AccountService = Depends(get_account_service),
):
    """Signed open quantity per symbol."""
    return BalanceResponse(account_id=account_id, balances=service.get_balance(account_id))


@router.get("/{account_id}/pnl", response_model=PnLResponse)
def get_pnl(
    account_id: str,
    service: AccountService = Depends(get_account_service),
):
    """
    Realized cash P&L: the sum of value_base over every entry,
    in the account's base currency.
    """
    account = service.get_account(account_id)
    return PnLResponse(
        account_id=account_id,
        base_currency=account.base_currency,
        total_pnl=service.get_pnl(account_id),
    )
