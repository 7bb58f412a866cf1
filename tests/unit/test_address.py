"""Unit tests for address and code hash helpers."""

import pytest

from feed_subscriptions.utils.address import (
    ADDRESS_BODY_LENGTH,
    generate_address,
    generate_contract_address,
    normalize_code_hash,
    validate_address,
)

HASH = "ab" * 32


class TestGenerateAddress:
    def test_account_address(self):
        address = generate_address()

        assert len(address) == ADDRESS_BODY_LENGTH + 1
        assert address.startswith("G")
        assert validate_address(address, prefix="G")

    def test_contract_address(self):
        address = generate_contract_address()

        assert address.startswith("C")
        assert validate_address(address, prefix="C")
        assert not validate_address(address, prefix="G")

    def test_addresses_are_unique(self):
        assert len({generate_address() for _ in range(50)}) == 50

    def test_unknown_prefix_rejected(self):
        with pytest.raises(ValueError, match="prefix"):
            generate_address("X")


class TestValidateAddress:
    @pytest.mark.parametrize(
        "value",
        ["", None, "GSHORT", "X" + "A" * 55, "G" + "a" * 55, "G" + "1" * 55, "G" + "A" * 56],
    )
    def test_invalid(self, value):
        assert validate_address(value) is False

    def test_valid_any_prefix(self):
        assert validate_address("G" + "A" * 55)
        assert validate_address("C" + "7" * 55)


class TestNormalizeCodeHash:
    def test_plain(self):
        assert normalize_code_hash(HASH) == HASH

    def test_prefix_case_and_whitespace(self):
        assert normalize_code_hash("  0x" + HASH.upper() + "\n") == HASH

    @pytest.mark.parametrize("value", ["", "ab" * 31, "zz" * 32, "ab" * 33])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            normalize_code_hash(value)

    def test_non_string(self):
        with pytest.raises(ValueError):
            normalize_code_hash(1234)
