"""
Testy walidatorów - NIP, kod pocztowy, telefon, email.
"""

import pytest

from paczki.utils.validators import (
    clean_nip,
    escape_html,
    format_nip,
    format_postal_code,
    is_valid_email,
    is_valid_nip,
    is_valid_phone,
    is_valid_postal_code,
)

VALID_NIPS = ["5260001246", "5260250995", "7680002466"]


class TestNIPValidation:
    """Suma kontrolna NIP."""

    @pytest.mark.parametrize("nip", VALID_NIPS)
    def test_valid(self, nip):
        assert is_valid_nip(nip)

    def test_invalid_checksum(self):
        assert not is_valid_nip("1234567890")

    def test_separators_are_stripped(self):
        assert is_valid_nip("526-000-12-46")
        assert is_valid_nip(" 526 000 12 46 ")
        assert is_valid_nip("526\t000-12 46")

    @pytest.mark.parametrize(
        "value",
        ["", "123", "abc", "52600012460", "526000124", "PL5260001246", "526.000.12.46", "52600O1246"],
    )
    def test_not_ten_digits(self, value):
        assert not is_valid_nip(value)

    def test_non_ascii_digits_rejected(self):
        # Cyfry arabsko-indyjskie - isdigit() True, ale to nie jest NIP
        assert not is_valid_nip("٥٢٦٠٠٠١٢٤٦")

    def test_none_and_non_string(self):
        assert not is_valid_nip(None)
        assert not is_valid_nip(5260001246)

    def test_checksum_ten_is_invalid(self):
        # 9 * 6 = 54, 54 % 11 = 10
        for control in "0123456789":
            assert not is_valid_nip("900000000" + control)

    @pytest.mark.parametrize("nip", VALID_NIPS)
    def test_changing_control_digit_invalidates(self, nip):
        for digit in "0123456789":
            if digit == nip[9]:
                continue
            assert not is_valid_nip(nip[:9] + digit)


class TestNIPFormatting:
    """Formatowanie XXX-XXX-XX-XX."""

    def test_format(self):
        assert format_nip("5260001246") == "526-000-12-46"

    def test_format_already_formatted(self):
        assert format_nip("526 000 12 46") == "526-000-12-46"

    def test_format_does_not_check_checksum(self):
        assert format_nip("1234567890") == "123-456-78-90"

    @pytest.mark.parametrize("value", ["abc", "", "123", "PL5260001246"])
    def test_invalid_returned_unchanged(self, value):
        assert format_nip(value) == value

    def test_clean_nip(self):
        assert clean_nip(" 526-000 12-46\n") == "5260001246"
        assert clean_nip(None) == ""


class TestOtherValidators:
    """Kod pocztowy, telefon, email, HTML."""

    @pytest.mark.parametrize(
        "value,expected",
        [("00001", "00-001"), ("00-001", "00-001"), ("0", "0"), ("00", "00"), ("000", "00-0"), ("123456", "12-345"), ("", "")],
    )
    def test_format_postal_code(self, value, expected):
        assert format_postal_code(value) == expected

    def test_postal_code(self):
        assert is_valid_postal_code("00-001")
        assert not is_valid_postal_code("00001")
        assert not is_valid_postal_code("")

    @pytest.mark.parametrize("phone", ["+48 123 456 789", "123456789", "123-456-789", "+48123456789"])
    def test_valid_phone(self, phone):
        assert is_valid_phone(phone)

    @pytest.mark.parametrize("phone", ["12345678", "+49 123 456 789", "telefon", None])
    def test_invalid_phone(self, phone):
        assert not is_valid_phone(phone)

    def test_email(self):
        assert is_valid_email("kontakt@psialapa.pl")
        assert not is_valid_email("kontakt@")
        assert not is_valid_email(None)

    def test_escape_html(self):
        assert escape_html('<b>"Kot" & pies</b>') == "&lt;b&gt;&quot;Kot&quot; &amp; pies&lt;/b&gt;"
        assert escape_html(None) == ""
