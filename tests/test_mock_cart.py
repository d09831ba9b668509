import pytest

from src.integrations.clients.mocks.cart import MockCartClient
from src.integrations.contracts.cart import CartLineChange, cart_lines_from_ids, validate_line_change


@pytest.mark.asyncio
async def test_mock_cart_records_added_lines():
    cart = MockCartClient()

    result = await cart.add_line("V1")

    assert result.ok is True
    assert [line.merchandise_id for line in cart.lines] == ["V1"]


@pytest.mark.asyncio
async def test_mock_cart_rejects_configured_variants():
    cart = MockCartClient(failing_variants={"V2"})

    result = await cart.add_line("V2")

    assert result.ok is False
    assert result.message
    assert cart.lines == []


@pytest.mark.asyncio
async def test_mock_cart_with_zero_success_rate_always_fails():
    cart = MockCartClient(success_rate=0.0)

    assert (await cart.add_line("V1")).ok is False


def test_validate_line_change():
    assert validate_line_change(CartLineChange("V1")) == []
    errors = validate_line_change(CartLineChange(" ", quantity=3))
    assert "merchandise_id is required" in errors
    assert "quantity must be 1 per add action" in errors


def test_cart_lines_from_ids_skips_blanks():
    assert [line.merchandise_id for line in cart_lines_from_ids(["V1", "", "  ", " V2 "])] == ["V1", "V2"]
