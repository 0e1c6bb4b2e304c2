"""
Ward tariff resolution.

The daily room rate for a ward is chosen in this order:

1. the ward's own ``daily_rate`` when it is set (zero is a valid rate);
2. the hospital configuration's default for the ward category, read
   from ``modules_enabled['ipdSettings']['wardTariffs']``;
3. :data:`DEFAULT_WARD_TARIFFS` when the configuration row or the
   nested map is missing entirely;
4. :data:`FALLBACK_TARIFF` when the category is not in the map in use.

Category defaults come from a configuration provider so callers (and
tests) can swap the data source without a database row.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Mapping, Optional, Protocol

from ipd.models import HospitalConfig, Ward

DEFAULT_WARD_TARIFFS: dict[str, int] = {
    'GENERAL': 1000,
    'SEMI_PRIVATE': 2000,
    'PRIVATE': 3000,
    'ICU': 5000,
}
FALLBACK_TARIFF = 1000


class TariffConfigProvider(Protocol):
    def get_ward_tariff_defaults(self) -> Mapping[str, object]:
        ...


class HospitalConfigProvider:
    """Reads category tariffs from the singleton :class:`HospitalConfig`.

    The row is fetched fresh on every call; nothing is cached.
    """

    def get_ward_tariff_defaults(self) -> Mapping[str, object]:
        cfg = HospitalConfig.load()
        modules = (cfg.modules_enabled if cfg else None) or {}
        ipd_settings = modules.get('ipdSettings') or {}
        tariffs = ipd_settings.get('wardTariffs')
        # An explicit empty map is honoured: every category then falls back.
        return DEFAULT_WARD_TARIFFS if tariffs is None else tariffs


class StaticTariffProvider:
    """Fixed category map, independent of the database."""

    def __init__(self, tariffs: Optional[Mapping[str, object]] = None):
        self.tariffs = DEFAULT_WARD_TARIFFS if tariffs is None else tariffs

    def get_ward_tariff_defaults(self) -> Mapping[str, object]:
        return self.tariffs


def to_amount(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def tariff_for_category(ward_type: str, tariffs: Mapping[str, object]) -> Decimal:
    rate = tariffs.get(ward_type)
    if rate is None:
        return Decimal(FALLBACK_TARIFF)
    return to_amount(rate)


def resolve_tariff_per_day(ward_id, ward_type: str, *,
                           config_provider: Optional[TariffConfigProvider] = None) -> Decimal:
    """Return the daily room rate for ``ward_id``.

    The ward is expected to exist; callers fetch it before pricing a
    stay.  A missing row simply skips the override step.
    """
    override = Ward.objects.filter(pk=ward_id).values_list('daily_rate', flat=True).first()
    if override is not None:
        return to_amount(override)

    provider = config_provider or HospitalConfigProvider()
    return tariff_for_category(ward_type, provider.get_ward_tariff_defaults())
