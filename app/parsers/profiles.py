"""Per-site CSS selector profiles.

A profile names the container selectors the page parser needs for one site
family. Field parsers receive the fragment isolated by these containers and
carry their own inner selectors.
"""

from urllib.parse import urlparse

from pydantic import BaseModel


class InfoSelectors(BaseModel):
    model_config = {"frozen": True}

    rows: str
    label: str
    value: str
    legacy_rows: str
    sections: str
    section_header: str
    withdrawal_text: str


class FeatureSelectors(BaseModel):
    model_config = {"frozen": True}

    heading: str
    item: str
    positive_label: str = "Positives"
    negative_label: str = "Negatives"
    interesting_label: str = "Interesting facts"


class LicenseSelectors(BaseModel):
    model_config = {"frozen": True}

    item: str
    name: str
    flag: str


class SelectorProfile(BaseModel):
    model_config = {"frozen": True}

    site: str
    logo: str
    heading: str = "h1"
    rating: str
    description: str
    description_html: str
    info: InfoSelectors
    features: FeatureSelectors
    licenses: LicenseSelectors
    game_types: str
    payment_methods: str
    game_providers: str
    no_deposit_bonus: str
    deposit_bonus: str
    withdrawal_limits: str
    screenshots: str
    languages: str
    language_option: str
    casino_id_root: str
    casino_id_attr: str = "data-casino-id"


CASINO_GURU = SelectorProfile(
    site="casino.guru",
    logo=".casino-logo",
    rating=".rating b, .casino-rating__value",
    description=".casino-description p, .casino-detail-box-description",
    description_html=".casino-detail-box-description",
    info=InfoSelectors(
        rows=".info-col-section-revenues .my-m",
        label="label.info-col-section-header",
        value="b",
        legacy_rows=".casino-information tr",
        sections=".info-col-section",
        section_header=".info-col-section-header",
        withdrawal_text=".fs-m.text-bold, .neo-fs-20",
    ),
    features=FeatureSelectors(heading=".casino-detail-box-pros .col", item="li"),
    licenses=LicenseSelectors(
        item="ul.license-list li",
        name="a.link-secondary",
        flag="i[class*='flag-icon-']",
    ),
    game_types=".game-types-list li, .casino-card-available-games-ul li",
    payment_methods="#popover-payment-methods",
    game_providers="#popover-game-providers",
    no_deposit_bonus=".info-col-bonus-wrapper-1",
    deposit_bonus=".info-col-bonus-wrapper",
    withdrawal_limits=".payments-withdrawal",
    screenshots=".casino-detail-box-screenshots",
    languages=".casino-detail-box-languages",
    language_option=".language-option",
    casino_id_root='.casino-detail-main-col[data-module="modules/casino-detail-tabs"]',
)

ASKGAMBLERS = SelectorProfile(
    site="askgamblers.com",
    logo=".casino-logo img",
    heading=".casino-title h1",
    rating=".casino-rating .rating-value",
    description=".casino-description",
    description_html=".casino-description",
    info=InfoSelectors(
        rows=".casino-info-item",
        label=".info-label",
        value=".info-value",
        legacy_rows=".casino-information tr",
        sections=".casino-info-section",
        section_header=".casino-info-section-header",
        withdrawal_text=".info-value",
    ),
    features=FeatureSelectors(
        heading=".pros-cons-section .section-title",
        item="li",
        positive_label="Pros",
        negative_label="Cons",
        interesting_label="Facts",
    ),
    licenses=LicenseSelectors(
        item=".licenses-section .license-item",
        name=".license-name",
        flag=".license-country",
    ),
    game_types=".game-types-list .game-type-item",
    payment_methods=".payment-methods-section",
    game_providers=".game-providers-section",
    no_deposit_bonus=".bonus-item-no-deposit",
    deposit_bonus=".bonus-item-welcome",
    withdrawal_limits=".withdrawal-limits",
    screenshots=".screenshots-gallery",
    languages=".casino-languages",
    language_option=".language-option",
    casino_id_root="[data-casino-id]",
)

DEFAULT_PROFILE = CASINO_GURU

# host suffix -> profile
_PROFILES: dict[str, SelectorProfile] = {
    "askgamblers.com": ASKGAMBLERS,
    "casino.guru": CASINO_GURU,
}


def resolve_profile(url: str) -> SelectorProfile:
    """Pick the selector profile for a URL's host, falling back to the default."""
    try:
        host = (urlparse(url).hostname or "").lower()
    except ValueError:
        return DEFAULT_PROFILE
    for suffix, profile in _PROFILES.items():
        if host == suffix or host.endswith("." + suffix):
            return profile
    return DEFAULT_PROFILE
