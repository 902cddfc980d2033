"""
Tests for argument marshalling and output formatting.
"""
import json

import pytest

from urwa_console.exceptions import InvalidParameterError, MissingParameterError
from urwa_console.marshal import (
    format_address_short,
    format_output_value,
    format_parameter_value,
    format_token_amount,
    is_address,
    normalize_address,
    parse_function_inputs,
)
from urwa_console.models import ParamKind, ParamSpec

from tests.test_helpers import TEST_TOKEN

CHECKSUMMED = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


def _param(declared_type, kind, name="x"):
    return ParamSpec(name=name, declared_type=declared_type, kind=kind)


class TestFormatParameterValue:

    def test_big_integer_is_exact(self):
        value = format_parameter_value("123456789012345678901234567890", _param("uint256", ParamKind.UINT))
        assert value == 123456789012345678901234567890
        assert str(value) == "123456789012345678901234567890"

    def test_empty_integer_is_zero(self):
        assert format_parameter_value("", _param("uint256", ParamKind.UINT)) == 0
        assert format_parameter_value("  ", _param("int8", ParamKind.INT)) == 0

    def test_negative_int(self):
        assert format_parameter_value("-42", _param("int256", ParamKind.INT)) == -42

    @pytest.mark.parametrize("text", ["abc", "1.5", "0x10", "1e3"])
    def test_invalid_integer(self, text):
        with pytest.raises(InvalidParameterError, match="amount"):
            format_parameter_value(text, _param("uint256", ParamKind.UINT, name="amount"))

    @pytest.mark.parametrize("text,expected", [
        ("true", True), ("1", True), ("false", False), ("0", False), ("yes", False), ("TRUE", False),
    ])
    def test_bool(self, text, expected):
        assert format_parameter_value(text, _param("bool", ParamKind.BOOL)) is expected

    def test_address_is_checksummed(self):
        param = _param("address", ParamKind.ADDRESS)
        assert format_parameter_value(CHECKSUMMED.lower(), param) == CHECKSUMMED
        assert format_parameter_value(CHECKSUMMED[2:].lower(), param) == CHECKSUMMED

    def test_invalid_address_passes_through_prefixed(self):
        param = _param("address", ParamKind.ADDRESS)
        assert format_parameter_value("1234", param) == "0x1234"

    def test_bytes(self):
        param = _param("bytes", ParamKind.BYTES)
        assert format_parameter_value("0xdeadbeef", param) == "0xdeadbeef"
        assert format_parameter_value("deadbeef", param) == "0xdeadbeef"
        assert format_parameter_value("hi!", param) == "0x686921"

    def test_fixed_bytes(self):
        param = _param("bytes32", ParamKind.FIXED_BYTES)
        assert format_parameter_value("0x" + "00" * 32, param) == "0x" + "00" * 32

    def test_string_and_array_pass_through(self):
        assert format_parameter_value("hello", _param("string", ParamKind.STRING)) == "hello"
        assert format_parameter_value('["0x1"]', _param("address[]", ParamKind.ARRAY)) == '["0x1"]'


class TestParseFunctionInputs:

    def test_transfer(self, schema):
        args = parse_function_inputs(schema.get_function("transfer"), [CHECKSUMMED.lower(), "1000"])
        assert args == [CHECKSUMMED, 1000]

    def test_missing_parameter_names_it(self, schema):
        with pytest.raises(MissingParameterError) as exc_info:
            parse_function_inputs(schema.get_function("transfer"), [CHECKSUMMED, ""])
        assert exc_info.value.parameter == "amount"
        assert str(exc_info.value) == "Missing value for parameter amount"

    def test_short_value_list(self, schema):
        with pytest.raises(MissingParameterError, match="to"):
            parse_function_inputs(schema.get_function("transfer"), [])

    def test_unnamed_parameter_uses_index(self, schema):
        with pytest.raises(MissingParameterError) as exc_info:
            parse_function_inputs(schema.get_function("auditorPermissions"), [None])
        assert exc_info.value.parameter == "0"

    def test_token_substituted(self, schema):
        fn = schema.get_function("balanceOf")
        args = parse_function_inputs(fn, [CHECKSUMMED, "0x"], auth_token=TEST_TOKEN)
        assert args == [CHECKSUMMED, TEST_TOKEN]

    def test_token_substituted_when_blank(self, schema):
        fn = schema.get_function("balanceOf")
        args = parse_function_inputs(fn, [CHECKSUMMED], auth_token=TEST_TOKEN)
        assert args[-1] == TEST_TOKEN

    def test_no_token_uses_supplied_value(self, schema):
        fn = schema.get_function("balanceOf")
        assert parse_function_inputs(fn, [CHECKSUMMED, "0x"])[-1] == "0x"

    def test_token_not_applied_without_token_param(self, schema):
        fn = schema.get_function("transfer")
        assert parse_function_inputs(fn, [CHECKSUMMED, "5"], auth_token=TEST_TOKEN) == [CHECKSUMMED, 5]


class TestFormatOutputValue:

    @pytest.mark.parametrize("value,expected", [
        (None, "null"),
        (True, "true"),
        (False, "false"),
        (0, "0"),
        (10**30, "1000000000000000000000000000000"),
        (b"\x01\x02", "0x0102"),
        ("text", "text"),
    ])
    def test_scalars(self, value, expected):
        assert format_output_value(value) == expected

    def test_tuple_renders_as_json(self):
        rendered = format_output_value((CHECKSUMMED, 5, b"\xff", [True]))
        assert json.loads(rendered) == [CHECKSUMMED, 5, "0xff", [True]]
        assert "\n" in rendered


@pytest.mark.parametrize("amount,expected", [
    (1500000000000000000, "1.5"),
    (0, "0"),
    (1000000000000000001, "1.000000000000000001"),
    (10**18, "1"),
    (1, "0.000000000000000001"),
    (-25 * 10**17, "-2.5"),
])
def test_format_token_amount(amount, expected):
    assert format_token_amount(amount) == expected


def test_format_token_amount_decimals():
    assert format_token_amount(12345, decimals=2) == "123.45"
    assert format_token_amount(12345, decimals=0) == "12345"


def test_format_address_short():
    assert format_address_short("0x1234567890abcdef1234567890abcdef12345678") == "0x1234...5678"
    assert format_address_short("0x12") == "0x12"
    assert format_address_short("") == ""


def test_address_helpers():
    assert is_address(CHECKSUMMED)
    assert is_address(CHECKSUMMED.lower())
    assert not is_address(CHECKSUMMED[2:])
    assert not is_address(None)
    assert normalize_address(CHECKSUMMED.upper().replace("0X", "0x")) == CHECKSUMMED
