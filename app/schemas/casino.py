from typing import Literal

from pydantic import BaseModel, Field

LanguageType = Literal["website", "support", "livechat"]


class WithdrawalLimits(BaseModel):
    per_day: str | None = None
    per_week: str | None = None
    per_month: str | None = None


class Features(BaseModel):
    positive: list[str] = []
    negative: list[str] = []
    interesting: list[str] = []


class PaymentMethod(BaseModel):
    name: str
    logo_url: str | None = None


class GameProvider(BaseModel):
    name: str
    logo_url: str | None = None


class License(BaseModel):
    name: str
    country_code: str | None = None


class NoDepositBonus(BaseModel):
    name: str = ""
    name_2: str = ""
    subtype: str = ""
    wagering_requirements: str = ""
    free_spins_value: str = ""
    free_spins_conditions: str = ""
    max_cashout: str = ""
    max_bet: str = ""
    bonus_expiration: str = ""
    process_speed: str = ""  # "Fast" | ""
    other_info: str = ""


class DepositBonus(NoDepositBonus):
    min_deposit: str = ""


class Bonuses(BaseModel):
    no_deposit: NoDepositBonus | None = None
    deposit: DepositBonus | None = None


class Screenshot(BaseModel):
    url: str
    alt_text: str = ""


class CasinoLanguage(BaseModel):
    name: str
    country_code: str
    type: LanguageType


class ParsedCasino(BaseModel):
    name: str
    logo_url: str | None = None
    rating: float | None = None
    description: str | None = None
    description_html: str | None = None
    owner: str | None = None
    operator: str | None = None
    established: int | None = None
    estimated_revenue: str | None = None
    withdrawal_limits: str | None = None  # legacy plain-text block
    withdrawal_limits_structured: WithdrawalLimits = Field(default_factory=WithdrawalLimits)
    features: Features = Field(default_factory=Features)
    payment_methods: list[PaymentMethod] = []
    licenses: list[License] = []
    game_types: list[str] = []
    game_providers: list[GameProvider] = []
    bonuses: Bonuses = Field(default_factory=Bonuses)
    screenshots: list[Screenshot] = []
    languages: list[CasinoLanguage] = []
    data_casino_id: str | None = None
