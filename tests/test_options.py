"""Tests for option registration and per-build lookup."""

import logging

import pytest

from framesaver.errors import ConfigurationInitError
from framesaver.extractor import (
    SAVE_FIRST_FRAME,
    SAVE_LAST_FRAME,
    SAVE_RANGE_END,
    SAVE_RANGE_START,
    ExtractionOptions,
)
from framesaver.options import OptionRegistry, OptionSpec, UserInput, clean_option_id


class TestCleanOptionId:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("Save First Frame", "savefirstframe"),
            ("save_last-frame", "savelastframe"),
            ("Save Frame Range Start", "saveframerangestart"),
        ],
    )
    def test_clean(self, name, expected):
        assert clean_option_id(name) == expected

    def test_spec_id_derived_from_name(self):
        assert SAVE_FIRST_FRAME.id == "savefirstframe"
        assert SAVE_FIRST_FRAME.model_dump()["id"] == "savefirstframe"


class TestOptionRegistry:
    def test_register_and_get(self):
        registry = OptionRegistry()
        registry.register(SAVE_FIRST_FRAME)
        assert registry.get("Save First Frame") is SAVE_FIRST_FRAME
        assert "savefirstframe" in registry
        assert len(registry) == 1

    def test_duplicate_id_raises(self):
        registry = OptionRegistry()
        registry.register(SAVE_FIRST_FRAME)
        clash = OptionSpec(name="save first-frame", type="bool", default=True)
        with pytest.raises(ConfigurationInitError):
            registry.register(clash)
        assert registry.get("savefirstframe") is SAVE_FIRST_FRAME

    def test_list_sorted_by_priority(self):
        registry = OptionRegistry()
        for option in [SAVE_RANGE_END, SAVE_FIRST_FRAME, SAVE_RANGE_START, SAVE_LAST_FRAME]:
            registry.register(option)
        assert [o.order_priority for o in registry.list_options()] == [30, 31, 32, 33]

    def test_is_registered_requires_same_spec(self):
        registry = OptionRegistry()
        other = OptionSpec(name="Save First Frame", type="bool", default=True)
        registry.register(other)
        assert registry.is_registered(other)
        assert not registry.is_registered(SAVE_FIRST_FRAME)


class TestOptionCoercion:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(True, True), ("true", True), ("false", False), (0, False), ("yes", True)],
    )
    def test_bool(self, raw, expected):
        assert SAVE_FIRST_FRAME.coerce(raw) is expected

    def test_int_from_string(self):
        assert SAVE_RANGE_START.coerce("7") == 7

    def test_int_below_min_rejected(self):
        with pytest.raises(ValueError, match=">= -1"):
            SAVE_RANGE_START.coerce(-5)

    def test_int_max(self):
        option = OptionSpec(name="Limit", type="int", default=0, max=10)
        with pytest.raises(ValueError, match="<= 10"):
            option.coerce(11)

    def test_invalid_value(self):
        with pytest.raises(ValueError, match="expected bool"):
            SAVE_FIRST_FRAME.coerce("sometimes")


class TestUserInput:
    def test_unset_returns_default(self):
        assert UserInput().get(SAVE_FIRST_FRAME, False) is False

    def test_keys_are_normalised(self):
        user_input = UserInput({"Save First Frame": "true"})
        assert user_input.get(SAVE_FIRST_FRAME, False) is True

    def test_ignore_if_returns_default(self):
        user_input = UserInput({"saveframerangestart": -1})
        assert user_input.get(SAVE_RANGE_START, 99) == 99

    def test_invalid_value_logs_and_returns_default(self, caplog):
        caplog.set_level(logging.WARNING)
        user_input = UserInput({"saveframerangeend": "abc"})
        assert user_input.get(SAVE_RANGE_END, -1) == -1
        assert "Invalid value 'abc'" in caplog.text

    def test_unregistered_option_disabled(self):
        registry = OptionRegistry()
        user_input = UserInput({"savefirstframe": True}, registry=registry)
        assert user_input.get(SAVE_FIRST_FRAME, False) is False

        registry.register(SAVE_FIRST_FRAME)
        assert user_input.get(SAVE_FIRST_FRAME, False) is True

    def test_set(self):
        user_input = UserInput()
        user_input.set(SAVE_LAST_FRAME, True)
        assert user_input.get(SAVE_LAST_FRAME, False) is True


class TestExtractionOptionsFromUserInput:
    def test_reads_all_options(self):
        user_input = UserInput(
            {
                "savefirstframe": True,
                "savelastframe": "true",
                "saveframerangestart": "3",
                "saveframerangeend": 5,
            }
        )
        options = ExtractionOptions.from_user_input(user_input)
        assert options == ExtractionOptions(
            save_first=True, save_last=True, range_start=3, range_end=5
        )
        assert options.range_active

    def test_defaults_when_empty(self):
        assert ExtractionOptions.from_user_input(UserInput()) == ExtractionOptions()
