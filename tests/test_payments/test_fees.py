"""Tests for fee resolution — payments/fees.py."""

from __future__ import annotations

import pytest

from xrp_payments.errors import ValidationError
from xrp_payments.ledger.retry import RetryTransport
from xrp_payments.payments.fees import FEE_LEVEL_CUSHIONS, FeeResolver
from xrp_payments.payments.models import CreateTransactionOptions, FeeLevel, FeeRateType


@pytest.fixture
def fees(fake_ledger) -> FeeResolver:
    return FeeResolver(RetryTransport(fake_ledger, retry_delay=0))


class TestCushions:
    def test_values(self) -> None:
        assert FEE_LEVEL_CUSHIONS[FeeLevel.LOW] == 1.0
        assert FEE_LEVEL_CUSHIONS[FeeLevel.MEDIUM] == 1.2
        assert FEE_LEVEL_CUSHIONS[FeeLevel.HIGH] == 1.5

    def test_read_only(self) -> None:
        with pytest.raises(TypeError):
            FEE_LEVEL_CUSHIONS[FeeLevel.LOW] = 2.0  # type: ignore[index]


class TestNetworkFee:
    async def test_defaults_to_medium(self, fees, fake_ledger) -> None:
        fee = await fees.resolve(CreateTransactionOptions())
        assert fee.target_fee_level == FeeLevel.MEDIUM
        assert fee.target_fee_rate_type == FeeRateType.MAIN
        assert fee.fee_main == "0.000012"
        assert fee.fee_base == "12"
        assert fee.target_fee_rate == fee.fee_main
        assert fake_ledger.calls == [("get_fee", (1.2,))]

    @pytest.mark.parametrize(
        ("level", "fee_base"),
        [(FeeLevel.LOW, "10"), (FeeLevel.HIGH, "15")],
    )
    async def test_levels(self, fees, level, fee_base) -> None:
        fee = await fees.resolve(CreateTransactionOptions(fee_level=level))
        assert fee.target_fee_level == level
        assert fee.fee_base == fee_base


class TestCustomFee:
    async def test_base_rate(self, fees, fake_ledger) -> None:
        fee = await fees.resolve(
            CreateTransactionOptions(
                fee_level=FeeLevel.CUSTOM, fee_rate="12", fee_rate_type=FeeRateType.BASE
            )
        )
        assert fee.target_fee_level == FeeLevel.CUSTOM
        assert fee.target_fee_rate == "12"
        assert fee.target_fee_rate_type == FeeRateType.BASE
        assert fee.fee_base == "12"
        assert fee.fee_main == "0.000012"
        assert fake_ledger.calls == []

    async def test_main_rate(self, fees) -> None:
        fee = await fees.resolve(
            CreateTransactionOptions(
                fee_level=FeeLevel.CUSTOM, fee_rate="0.00002", fee_rate_type="main"
            )
        )
        assert fee.fee_main == "0.00002"
        assert fee.fee_base == "20"
        assert fee.target_fee_rate_type == FeeRateType.MAIN

    async def test_per_byte_rejected(self, fees) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await fees.resolve(
                CreateTransactionOptions(
                    fee_level=FeeLevel.CUSTOM,
                    fee_rate="1",
                    fee_rate_type=FeeRateType.BASE_PER_BYTE,
                )
            )
        assert exc_info.value.code == "unsupported-fee-rate-type"

    async def test_missing_rate(self, fees) -> None:
        with pytest.raises(ValidationError, match="fee_rate"):
            await fees.resolve(CreateTransactionOptions(fee_level=FeeLevel.CUSTOM))

    @pytest.mark.parametrize("rate", ["abc", "NaN", "Infinity", "-Infinity", "-50", ""])
    @pytest.mark.parametrize("rate_type", [FeeRateType.MAIN, FeeRateType.BASE])
    async def test_invalid_rate_rejected(self, fees, rate, rate_type) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await fees.resolve(
                CreateTransactionOptions(
                    fee_level=FeeLevel.CUSTOM, fee_rate=rate, fee_rate_type=rate_type
                )
            )
        assert exc_info.value.code == "invalid-fee-rate"

    async def test_zero_rate_allowed(self, fees) -> None:
        fee = await fees.resolve(
            CreateTransactionOptions(
                fee_level=FeeLevel.CUSTOM, fee_rate="0", fee_rate_type=FeeRateType.BASE
            )
        )
        assert fee.fee_base == "0"
        assert fee.fee_main == "0"
