# =============================================================================================
# APP/ROUTERS/CURRENCIES.PY - CURRENCY, EXCHANGE RATE AND CONVERSION ENDPOINTS
# =============================================================================================
# - GET    /currencies          viewer   list currencies with their rates
# - POST   /currencies          editor   add a currency
# - DELETE /currencies          editor   remove a currency (and every rate pointing at it)
# - PUT    /currencies/rate     editor   set base→target = rate (and target→base = 1/rate)
# - DELETE /currencies/rate     editor   remove both directions of a rate
# - POST   /currencies/convert  viewer   convert an amount using the direct rate
#
# Handlers stay thin: validate the body, call CurrencyService, wrap the result.
# Domain errors (CurrencyNotFound, ...) are turned into responses by app/core/handlers.py.
# =============================================================================================

from fastapi import APIRouter, Depends, Response, status

from app.core.deps import get_currency_service, require_editor, require_viewer
from app.core.errors import ValidationFailure
from app.schemas.currency import (
    ConversionEnvelope,
    ConversionOut,
    ConvertIn,
    CurrencyIn,
    CurrencyListOut,
    CurrencyOut,
    CurrencySymbolIn,
    RateIn,
    RatePairIn,
)
from app.schemas.user import MessageOut
from app.services.currency_service import CurrencyService

router = APIRouter(
    prefix="/currencies",
    tags=["Currencies"],
)

SAME_PAIR = "Target and base should be different."


def _ensure_distinct(pair: RatePairIn) -> None:
    if pair.base == pair.target:
        raise ValidationFailure(SAME_PAIR)


@router.get("", response_model=CurrencyListOut, dependencies=[Depends(require_viewer)])
def list_currencies(service: CurrencyService = Depends(get_currency_service)):
    currencies = [CurrencyOut.model_validate(c) for c in service.get_all_currencies()]
    return CurrencyListOut(count=len(currencies), result=currencies)


@router.post(
    "",
    response_model=MessageOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_editor)],
)
def add_currency(data: CurrencyIn, service: CurrencyService = Depends(get_currency_service)):
    currency = service.create_currency(data.symbol, data.name)
    return MessageOut(msg=f"Successfully added {currency.symbol}")


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    dependencies=[Depends(require_editor)],
)
def delete_currency(data: CurrencySymbolIn, service: CurrencyService = Depends(get_currency_service)):
    service.delete_currency(data.symbol)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/rate",
    response_model=MessageOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_editor)],
)
def set_rate(data: RateIn, service: CurrencyService = Depends(get_currency_service)):
    _ensure_distinct(data)
    service.set_exchange_rate(data.base, data.target, data.rate)
    return MessageOut(
        msg=f"Successfully set exchange rate: {data.base} -> {data.target}: {data.rate}"
    )


@router.delete(
    "/rate",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    dependencies=[Depends(require_editor)],
)
def remove_rate(data: RatePairIn, service: CurrencyService = Depends(get_currency_service)):
    _ensure_distinct(data)
    service.remove_exchange_rate(data.base, data.target)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/convert", response_model=ConversionEnvelope, dependencies=[Depends(require_viewer)])
def convert(data: ConvertIn, service: CurrencyService = Depends(get_currency_service)):
    result = service.convert_currency(data.base, data.target, data.amount)
    return ConversionEnvelope(data=ConversionOut.model_validate(result))
