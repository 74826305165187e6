"""
Tests for enum helpers
"""

from pixelflow.core.enums import BorderMode, StructuringElementShape
from pixelflow.core.utils.enum_converter import convert_enums_to_strings, enum_to_string, parse_enum


class TestParseEnum:
    """Test member resolution"""

    def test_member_passthrough(self):
        """Test members are returned as is"""
        assert parse_enum(BorderMode.WRAP, BorderMode, None) is BorderMode.WRAP

    def test_normalized_name(self):
        """Test names are stripped and lowercased on request"""
        assert parse_enum(" Mirror", BorderMode, None, normalize=True) is BorderMode.MIRROR
        assert parse_enum(" Mirror", BorderMode, None) is None

    def test_default_for_unknown_and_none(self):
        """Test the default covers None, unknown names and non-strings"""
        assert parse_enum(None, BorderMode, BorderMode.EXTEND) is BorderMode.EXTEND
        assert parse_enum("reflect101", BorderMode, BorderMode.EXTEND, normalize=True) is BorderMode.EXTEND
        assert parse_enum(3, BorderMode, None, normalize=True) is None


class TestToString:
    """Test member names"""

    def test_members_and_plain_values(self):
        """Test members become names and other values pass through"""
        assert enum_to_string(StructuringElementShape.CROSS) == "cross"
        assert enum_to_string(5) == 5

    def test_dict_conversion(self):
        """Test every enum value in a dict is converted"""
        data = {"border": BorderMode.CONSTANT, "size": 3}
        assert convert_enums_to_strings(data) == {"border": "constant", "size": 3}
