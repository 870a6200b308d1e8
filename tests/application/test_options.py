from __future__ import annotations

from lib_typed_dotenv.application.interpolation import InterpolationOptions
from lib_typed_dotenv.application.options import ParseOptions
from lib_typed_dotenv.application.type_registry import BUILTIN_TYPE_NAMES


def test_empty_options_are_defaults() -> None:
    assert ParseOptions.from_mapping(None) == ParseOptions()
    assert ParseOptions.from_mapping({}) == ParseOptions()
    assert ParseOptions().builtin_types == frozenset(BUILTIN_TYPE_NAMES)


def test_unknown_keys_do_not_change_options() -> None:
    assert ParseOptions.from_mapping({"colour": "blue", "workers": 3}) == ParseOptions()


def test_existing_options_pass_through() -> None:
    options = ParseOptions(interpolation=InterpolationOptions())

    assert ParseOptions.from_mapping(options) is options


def test_interpolate_flag_and_mapping() -> None:
    assert ParseOptions.from_mapping({"interpolate": True}).interpolation == InterpolationOptions()
    assert ParseOptions.from_mapping({"interpolate": False}).interpolation is None
    nested = ParseOptions.from_mapping({"interpolation": {"enabled": True, "simple_variables": True}})
    assert nested.interpolation == InterpolationOptions(simple_variables=True)


def test_equal_settings_compare_equal_and_hash_equal() -> None:
    first = ParseOptions.from_mapping({"interpolate": True, "types": {"ipv4": False}})
    second = ParseOptions.from_mapping({"types": {"ipv4": False}, "interpolate": True})

    assert first == second
    assert hash(first) == hash(second)


def test_registry_reflects_builtin_toggles() -> None:
    registry = ParseOptions.from_mapping({"types": False}).registry()

    assert registry.detect_type("42") == ("string", "42")


def test_declarative_custom_types_compare_equal() -> None:
    raw = {"custom_types": [{"name": "tag", "pattern": "^v", "validate": r"v\d+", "transform": "upper"}]}

    first = ParseOptions.from_mapping(raw)
    second = ParseOptions.from_mapping(raw)

    assert first == second
    assert hash(first) == hash(second)


def test_interpolation_mapping_reads_undefined_warning_switch() -> None:
    options = ParseOptions.from_mapping({"interpolation": {"warn_on_undefined": False}})

    assert options.interpolation == InterpolationOptions(warn_on_undefined=False)
