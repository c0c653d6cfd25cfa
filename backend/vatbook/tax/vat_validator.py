"""VAT number validation against the EU VIES registry.

The registry is consulted once. When it cannot answer (network error,
timeout, non-2xx status, unparseable body) validation falls back to the
local format rule: a Belgian VAT number is exactly ten digits.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from vatbook.config import Settings

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"[^0-9]")
_VAT_FORMAT = re.compile(r"^[0-9]{10}$")


class VIESResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    valid: bool
    request_date: str = Field(alias="requestDate")
    user_error: Optional[str] = Field(None, alias="userError")
    name: Optional[str] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class RegistryAnswer:
    valid: bool
    name: Optional[str] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class RegistryUnavailable:
    reason: str


RegistryLookup = Union[RegistryAnswer, RegistryUnavailable]


@dataclass(frozen=True)
class CompanyDetails:
    name: Optional[str] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class VATValidationResult:
    is_valid: bool
    details: Optional[CompanyDetails] = None
    error: Optional[str] = None


def clean_vat_number(raw: str) -> str:
    """Strip everything but digits, e.g. ``"BE 0123.456.789"`` -> ``"0123456789"``."""
    return _NON_DIGITS.sub("", raw or "")


def is_valid_vat_format(raw: str) -> bool:
    return bool(_VAT_FORMAT.match(clean_vat_number(raw)))


async def query_registry(
    cleaned: str,
    client: httpx.AsyncClient,
    settings: Settings,
) -> RegistryLookup:
    """Ask VIES about a cleaned VAT number. Never raises."""
    country = settings.vat_country_code
    try:
        response = await client.post(
            settings.vies_api_url,
            json={"vatNumber": f"{country}{cleaned}", "countryCode": country},
            timeout=settings.vies_timeout_seconds,
        )
        response.raise_for_status()
        data = VIESResponse.model_validate(response.json())
    except httpx.HTTPStatusError as exc:
        return RegistryUnavailable(
            f"VIES API error: {exc.response.status_code} {exc.response.reason_phrase}"
        )
    except httpx.TimeoutException:
        return RegistryUnavailable("VIES API request timed out")
    except httpx.HTTPError as exc:
        return RegistryUnavailable(f"VIES API request failed: {exc}")
    except (ValueError, PydanticValidationError) as exc:
        return RegistryUnavailable(f"Malformed VIES response: {exc}")

    return RegistryAnswer(valid=data.valid, name=data.name, address=data.address)


def resolve_validation(cleaned: str, lookup: RegistryLookup) -> VATValidationResult:
    """Turn a registry lookup into a validation result."""
    if isinstance(lookup, RegistryAnswer):
        return VATValidationResult(
            is_valid=lookup.valid,
            details=CompanyDetails(name=lookup.name, address=lookup.address),
        )
    return VATValidationResult(
        is_valid=bool(_VAT_FORMAT.match(cleaned)),
        error=lookup.reason,
    )


async def validate_vat_number(
    raw: str,
    *,
    client: httpx.AsyncClient | None = None,
    settings: Settings | None = None,
) -> VATValidationResult:
    if settings is None:
        settings = Settings()
    cleaned = clean_vat_number(raw)

    if client is None:
        async with httpx.AsyncClient() as own_client:
            lookup = await query_registry(cleaned, own_client, settings)
    else:
        lookup = await query_registry(cleaned, client, settings)

    if isinstance(lookup, RegistryUnavailable):
        logger.warning("VAT validation fell back to format check: %s", lookup.reason)
    return resolve_validation(cleaned, lookup)
