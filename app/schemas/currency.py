"""Request and response bodies for the /currencies routes."""

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.auth import CamelModel


class _Body(BaseModel):
    # Blank strings fail min_length after stripping
    model_config = ConfigDict(str_strip_whitespace=True)


class CurrencyIn(_Body):
    symbol: str = Field(..., min_length=1, max_length=16, examples=["USD"])
    name: str = Field(..., min_length=1, max_length=100, examples=["US Dollar"])


class CurrencySymbolIn(_Body):
    symbol: str = Field(..., min_length=1, max_length=16, examples=["USD"])


class RatePairIn(_Body):
    base: str = Field(..., min_length=1, max_length=16, examples=["USD"])
    target: str = Field(..., min_length=1, max_length=16, examples=["EUR"])


class RateIn(RatePairIn):
    # Numeric strings ("0.9") are accepted, like numbers
    rate: float = Field(..., gt=0, allow_inf_nan=False, examples=[0.9])


class ConvertIn(RatePairIn):
    amount: float = Field(..., allow_inf_nan=False, examples=[100])


class CurrencyOut(BaseModel):
    symbol: str
    name: str
    rates: dict[str, float]

    model_config = ConfigDict(from_attributes=True)


class CurrencyListOut(BaseModel):
    ok: bool = True
    count: int
    result: list[CurrencyOut]


class ConversionOut(CamelModel):
    base: str
    target: str
    amount: float
    converted_amount: float
    exchange_rate: float

    model_config = ConfigDict(from_attributes=True)


class ConversionEnvelope(BaseModel):
    ok: bool = True
    data: ConversionOut
