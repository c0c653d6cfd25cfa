import json
import logging

import httpx
import pytest

from vatbook.tax.vat_validator import (
    RegistryAnswer,
    RegistryUnavailable,
    clean_vat_number,
    is_valid_vat_format,
    query_registry,
    resolve_validation,
    validate_vat_number,
)


def registry(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def answer(valid=True, **extra):
    body = {"valid": valid, "requestDate": "2025-03-01T10:00:00.000Z", **extra}
    return lambda request: httpx.Response(200, json=body)


def unreachable(request):
    raise httpx.ConnectError("connection refused", request=request)


class TestCleaning:

    @pytest.mark.parametrize(
        "raw, cleaned",
        [
            ("BE0123456789", "0123456789"),
            ("BE 0123.456.789", "0123456789"),
            ("be-0123/456/789 ", "0123456789"),
            ("", ""),
        ],
    )
    def test_strips_everything_but_digits(self, raw, cleaned):
        assert clean_vat_number(raw) == cleaned

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("BE0123.456.789", True),
            ("0123456789", True),
            ("123456789", False),
            ("01234567890", False),
            ("ABCDEFGHIJ", False),
        ],
    )
    def test_format_rule(self, raw, expected):
        assert is_valid_vat_format(raw) is expected


class TestRegistryQuery:

    async def test_sends_country_prefixed_number(self, settings):
        seen = []

        def handler(request):
            seen.append(request)
            return answer()(request)

        async with registry(handler) as client:
            await query_registry("0123456789", client, settings)

        assert str(seen[0].url) == settings.vies_api_url
        assert seen[0].method == "POST"
        assert json.loads(seen[0].content) == {"vatNumber": "BE0123456789", "countryCode": "BE"}

    async def test_answer_carries_company_details(self, settings):
        handler = answer(valid=True, name="ACME BV", address="Rue de la Loi 16, Brussels")
        async with registry(handler) as client:
            lookup = await query_registry("0123456789", client, settings)
        assert lookup == RegistryAnswer(valid=True, name="ACME BV", address="Rue de la Loi 16, Brussels")

    async def test_non_2xx_is_unavailable(self, settings):
        async with registry(lambda request: httpx.Response(503)) as client:
            lookup = await query_registry("0123456789", client, settings)
        assert isinstance(lookup, RegistryUnavailable)
        assert "503" in lookup.reason

    async def test_timeout_is_unavailable(self, settings):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with registry(handler) as client:
            lookup = await query_registry("0123456789", client, settings)
        assert lookup == RegistryUnavailable("VIES API request timed out")

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>maintenance</html>"),
            httpx.Response(200, json={"requestDate": "2025-03-01"}),
            httpx.Response(200, json=["valid"]),
        ],
    )
    async def test_malformed_body_is_unavailable(self, settings, response):
        async with registry(lambda request: response) as client:
            lookup = await query_registry("0123456789", client, settings)
        assert isinstance(lookup, RegistryUnavailable)
        assert lookup.reason.startswith("Malformed VIES response")


class TestResolve:

    def test_answer_decides_validity(self):
        result = resolve_validation("0123456789", RegistryAnswer(valid=False))
        assert result.is_valid is False
        assert result.error is None
        assert result.details is not None

    def test_unavailable_uses_format_rule(self):
        result = resolve_validation("0123456789", RegistryUnavailable("down"))
        assert result.is_valid is True
        assert result.error == "down"
        assert result.details is None

    def test_unavailable_with_short_number(self):
        result = resolve_validation("123456789", RegistryUnavailable("down"))
        assert result.is_valid is False


class TestValidateVATNumber:

    async def test_registry_confirms(self, settings):
        async with registry(answer(valid=True, name="ACME BV")) as client:
            result = await validate_vat_number("BE 0123.456.789", client=client, settings=settings)
        assert result.is_valid is True
        assert result.details.name == "ACME BV"
        assert result.error is None

    async def test_registry_verdict_wins_over_format(self, settings):
        async with registry(answer(valid=False)) as client:
            result = await validate_vat_number("0123456789", client=client, settings=settings)
        assert result.is_valid is False

    async def test_ten_digits_with_registry_down_is_valid(self, settings):
        async with registry(unreachable) as client:
            result = await validate_vat_number("BE-0123.456.789", client=client, settings=settings)
        assert result.is_valid is True
        assert "connection refused" in result.error

    async def test_nine_digits_with_registry_down_is_invalid(self, settings):
        async with registry(unreachable) as client:
            result = await validate_vat_number("BE 123.456.789", client=client, settings=settings)
        assert result.is_valid is False
        assert result.error

    async def test_letters_and_punctuation_are_cleaned_first(self, settings):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return unreachable(request)

        async with registry(handler) as client:
            result = await validate_vat_number("B.E. 01-23 x45y6 789!", client=client, settings=settings)
        assert seen == [{"vatNumber": "BE0123456789", "countryCode": "BE"}]
        assert result.is_valid is True

    async def test_single_attempt(self, settings):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        async with registry(handler) as client:
            await validate_vat_number("0123456789", client=client, settings=settings)
        assert len(calls) == 1

    async def test_fallback_is_logged(self, settings, caplog):
        caplog.set_level(logging.WARNING, logger="vatbook.tax.vat_validator")
        async with registry(unreachable) as client:
            await validate_vat_number("0123456789", client=client, settings=settings)
        assert "fell back to format check" in caplog.text
