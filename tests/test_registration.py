import pytest
from dataclasses import dataclass
from pathlib import Path

from optionset import FlagConflictError, OptionSet, Ref
from optionset.options import FIRST_SYNTHETIC_CODE


@dataclass
class BuildConfig:
    """Sample configuration object flags are bound to."""

    jobs: int = 1
    target: str = "all"
    ratio: float = 0.5
    verbose: bool = False


class TestRegistration:
    """Test suite for flag registration and code assignment."""

    def test_short_flag_code_is_character_value(self):
        """Test that an entry with a short flag uses the character as its code."""
        options = OptionSet(width=80)
        entry = options.add_switch(Ref(False), "value", "v", "verbose")
        assert entry.code == ord("v")
        assert ord("v") in options.setters

    def test_long_only_flags_get_synthetic_codes(self):
        """Test that long-only flags get increasing codes above character codes."""
        options = OptionSet(width=80)
        first = options.add(Ref(""), "value", long="first")
        second = options.add(Ref(""), "value", long="second")
        assert first.code == FIRST_SYNTHETIC_CODE
        assert second.code == FIRST_SYNTHETIC_CODE + 1

    def test_synthetic_codes_are_per_instance(self):
        """Test that two option sets allocate synthetic codes independently."""
        a = OptionSet(width=80)
        b = OptionSet(width=80)
        a.add(Ref(""), "value", long="one")
        entry = b.add(Ref(""), "value", long="two")
        assert entry.code == FIRST_SYNTHETIC_CODE

    def test_codes_are_unique(self):
        """Test that no two entries share a code."""
        options = OptionSet(width=80)
        config = BuildConfig()
        options.add(config, "jobs", "j", "jobs")
        options.add(config, "target", long="target")
        options.add(config, "ratio", long="ratio")
        options.add_switch(config, "verbose", "v")
        codes = [entry.code for entry in options.entries]
        assert len(codes) == len(set(codes))

    def test_duplicate_short_flag_raises(self):
        """Test that registering the same short flag twice is a configuration error."""
        options = OptionSet(width=80)
        options.add(Ref(""), "value", "o", "output")
        second = Ref("untouched")

        with pytest.raises(FlagConflictError) as exc_info:
            options.add(second, "value", "o", "other")

        assert exc_info.value.flag == "-o"
        assert second.value == "untouched"
        assert len(options.entries) == 1

    def test_duplicate_long_flag_raises(self):
        """Test that registering the same long flag twice is a configuration error."""
        options = OptionSet(width=80)
        options.add_switch(Ref(False), "value", "v", "verbose")
        second = Ref(True)

        with pytest.raises(FlagConflictError, match="--verbose"):
            options.add_switch(second, "value", "V", "verbose")

        assert second.value is True

    def test_duplicate_short_across_switch_and_value(self):
        """Test that switches and value flags share one flag namespace."""
        options = OptionSet(width=80)
        options.add_switch(Ref(False), "value", "x")
        with pytest.raises(FlagConflictError):
            options.add(Ref(0), "value", "x")

    def test_conflict_error_is_value_error(self):
        """Test that a flag conflict can be caught as a ValueError."""
        options = OptionSet(width=80)
        options.add(Ref(""), "value", long="name")
        with pytest.raises(ValueError):
            options.add(Ref(""), "value", long="name")

    def test_conflict_does_not_consume_code(self):
        """Test that a rejected long-only flag does not allocate a code."""
        options = OptionSet(width=80)
        options.add(Ref(""), "value", long="name")
        with pytest.raises(FlagConflictError):
            options.add(Ref(""), "value", long="name")
        entry = options.add(Ref(""), "value", long="other")
        assert entry.code == FIRST_SYNTHETIC_CODE + 1

    def test_no_flags_is_silent_noop(self):
        """Test that a registration without short or long flag does nothing."""
        options = OptionSet(width=80)
        ref = Ref("untouched")
        assert options.add(ref, "value", None, None, "disabled", "default") is None
        assert options.add_switch(ref, "value", "", "", "disabled") is None
        assert ref.value == "untouched"
        assert options.entries == []
        assert options.format_usage() == ""

    def test_registration_assigns_default(self):
        """Test that registering a flag assigns its default to the bound attribute."""
        options = OptionSet(width=80)
        config = BuildConfig()
        options.add(config, "jobs", "j", "jobs", "parallel jobs", 8)
        options.add_switch(config, "verbose", "v", "verbose", "chatty", True)
        assert config.jobs == 8
        assert config.verbose is True

    def test_missing_default_is_zero_value(self):
        """Test that an omitted default becomes the zero value of the type."""
        options = OptionSet(width=80)
        config = BuildConfig()
        options.add(config, "jobs", "j")
        options.add(config, "target", "t")
        options.add_switch(config, "verbose", "v")
        assert config.jobs == 0
        assert config.target == ""
        assert config.verbose is False

    def test_type_inferred_from_default(self):
        """Test that the value type follows the default value."""
        options = OptionSet(width=80)
        ref = Ref(None)
        options.add(ref, "value", "n", default=3)
        assert options.parse(["-n", "12"])
        assert ref.value == 12

    def test_type_inferred_from_current_value(self):
        """Test that the value type follows the attribute when no default is given."""
        options = OptionSet(width=80)
        config = BuildConfig()
        options.add(config, "ratio", "r")
        assert options.parse(["-r", "0.25"])
        assert config.ratio == 0.25

    def test_type_defaults_to_str(self):
        """Test that unknown attributes are bound as strings."""
        options = OptionSet(width=80)

        class Namespace:
            pass

        ns = Namespace()
        options.add(ns, "name", "n")
        assert ns.name == ""
        assert options.parse(["-n", "42"])
        assert ns.name == "42"

    def test_explicit_type(self):
        """Test that an explicit type overrides inference."""
        options = OptionSet(width=80)
        ref = Ref(None)
        options.add(ref, "value", "p", "path", type=Path)
        assert ref.value == Path()
        assert options.parse(["--path", "/tmp/out"])
        assert ref.value == Path("/tmp/out")

    def test_flag_names_accept_dashes(self):
        """Test that flags may be given with their leading dashes."""
        options = OptionSet(width=80)
        entry = options.add_switch(Ref(False), "value", "-v", "--verbose")
        assert entry.short_flag == "v"
        assert entry.long_flag == "verbose"
        assert entry.name == "--verbose"

    @pytest.mark.parametrize("short", ["ab", "-", " ", "--"])
    def test_invalid_short_flag(self, short):
        """Test that malformed short flags are rejected."""
        options = OptionSet(width=80)
        with pytest.raises(ValueError, match="Invalid short flag"):
            options.add(Ref(""), "value", short)

    @pytest.mark.parametrize("long", ["--", "a=b", "two words", "---x"])
    def test_invalid_long_flag(self, long):
        """Test that malformed long flags are rejected."""
        options = OptionSet(width=80)
        with pytest.raises(ValueError, match="Invalid long flag"):
            options.add(Ref(""), "value", long=long)

    def test_entry_fields(self):
        """Test that the entry records everything given at registration."""
        options = OptionSet(width=80)
        entry = options.add(
            BuildConfig(), "jobs", "j", "jobs", "parallel jobs", 4, "Build"
        )
        assert entry.short_flag == "j"
        assert entry.long_flag == "jobs"
        assert entry.takes_argument is True
        assert entry.group == "Build"
        assert entry.description == "parallel jobs"
        assert entry.default_text == " <default: 4>"

    def test_switch_entry_takes_no_argument(self):
        """Test that switches are recorded as not taking an argument."""
        options = OptionSet(width=80)
        entry = options.add_switch(Ref(False), "value", "v")
        assert entry.takes_argument is False
        assert entry.name == "-v"

    def test_registration_after_parse_raises(self):
        """Test that the flag table is sealed once parsing has started."""
        options = OptionSet(width=80)
        options.add_switch(Ref(False), "value", "v")
        options.parse([])
        with pytest.raises(RuntimeError):
            options.add_switch(Ref(False), "value", "q")

    def test_non_ascii_short_flag_keeps_codes_unique(self):
        """Test that a short flag above Latin-1 cannot take a long-only flag's code."""
        alpha = Ref("")
        beta = Ref("")
        options = OptionSet(width=80)
        long_only = options.add(alpha, "value", long="alpha")
        short = options.add(beta, "value", "Ā", "beta")
        assert long_only.code != short.code

        assert options.parse(["--alpha", "x", "-Ā", "y"])
        assert alpha.value == "x"
        assert beta.value == "y"

    def test_failed_default_assignment_leaves_no_entry(self):
        """Test that a target rejecting the default leaves the flag unregistered."""

        @dataclass(frozen=True)
        class Frozen:
            x: int = 0

        options = OptionSet(width=80)
        with pytest.raises(AttributeError):
            options.add(Frozen(), "x", "x", "xx", "an x", 1)
        with pytest.raises(AttributeError):
            options.add_switch(Frozen(), "x", "y", "yy", "a y")

        assert options.entries == []
        assert options.setters == {}
        assert options.format_usage() == ""
        assert options.parse(["-x", "2"]) is False

        ref = Ref(0)
        options = OptionSet(width=80)
        with pytest.raises(AttributeError):
            options.add(Frozen(), "x", "x", "xx")
        options.add(ref, "value", "x", "xx")
        assert options.parse(["--xx", "2"])
        assert ref.value == 2

    def test_none_default_does_not_fix_type(self):
        """Test that a None default falls back to the attribute or str for the type."""
        count = Ref(0)
        name = Ref(None)
        options = OptionSet(width=80)
        options.add(count, "value", "n", "count", "number of items", None)
        options.add(name, "value", "s", "name", "a name", None)
        assert count.value is None
        assert name.value is None

        assert options.parse(["-n", "3", "-s", "abc"])
        assert count.value == 3
        assert name.value == "abc"
