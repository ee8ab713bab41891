"""Tariff sheet inspection for club admins."""

from fastapi import APIRouter, Depends, HTTPException, status

from clubreserva.core.dependencies import get_pricing_store, require_club_admin
from clubreserva.schemas import PricingRuleOut, TariffRulesOut
from clubreserva.services.store import PricingStore

router = APIRouter(prefix="/clubs", tags=["tariffs"])


@router.get("/{club_id}/tariffs/{tariff_id}/rules", response_model=TariffRulesOut)
async def list_tariff_rules(
    club_id: int,
    tariff_id: int,
    _admin_id: int = Depends(require_club_admin),
    store: PricingStore = Depends(get_pricing_store),
):
    """Every rule of a tariff sheet, active or not, in the order operators read them."""
    tariff = await store.get_tariff(club_id, tariff_id)
    if tariff is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tariff sheet not found")

    rules = await store.list_tariff_rules(tariff.id)
    return TariffRulesOut(
        tariff_id=tariff.id,
        tariff_name=tariff.name,
        rules=[PricingRuleOut.model_validate(r) for r in rules],
    )
