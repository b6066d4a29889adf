"""
Tests for appcastkit.versioning.keys module.

Tests version parsing and ordering including:
- VersionToken construction limits
- Numeric core comparison with zero padding
- Prerelease precedence
- Build metadata handling
- Invalid (non-numeric) versions
- Numeric components past the fourth
- Equality and hashing for deduplication
"""

from __future__ import annotations

import pytest

from appcastkit.versioning import SemVerLike, VersionToken

pytestmark = pytest.mark.unit


class TestVersionToken:
    """Tests for the VersionToken value type."""

    def test_core_text(self):
        """Test dotted core rendering."""
        token = VersionToken(core=(1, 2, 3), suffix="-rc.1")
        assert token.core_text == "1.2.3"
        assert str(token) == "1.2.3-rc.1"

    def test_empty_core_rejected(self):
        """Test that an empty core cannot be constructed."""
        with pytest.raises(ValueError):
            VersionToken(core=())

    def test_too_many_components_rejected(self):
        """Test that more than four components are rejected."""
        with pytest.raises(ValueError):
            VersionToken(core=(1, 2, 3, 4, 5))

    def test_negative_component_rejected(self):
        """Test that negative components are rejected."""
        with pytest.raises(ValueError):
            VersionToken(core=(1, -2))


class TestParsing:
    """Tests for SemVerLike.parse."""

    def test_accessors(self):
        """Test version, suffix and prerelease accessors."""
        v = SemVerLike.parse("2.0-beta1")
        assert v.is_valid
        assert v.version == "2.0"
        assert v.all_suffixes == "-beta1"
        assert v.prerelease == "beta1"
        assert v.build_metadata == ""
        assert v.core == (2, 0)

    def test_build_metadata(self):
        """Test prerelease and build split."""
        v = SemVerLike.parse("1.0.0-rc.1+build.5")
        assert v.prerelease == "rc.1"
        assert v.build_metadata == "build.5"
        assert v.all_suffixes == "-rc.1+build.5"

    def test_v_prefix(self):
        """Test that a leading v is accepted and dropped."""
        v = SemVerLike.parse("v1.2")
        assert v.version == "1.2"
        assert str(v) == "1.2"
        assert v == SemVerLike.parse("1.2")

    def test_whitespace_trimmed(self):
        """Test that surrounding whitespace is ignored."""
        assert SemVerLike.parse("  1.4.1 ") == SemVerLike.parse("1.4.1")

    @pytest.mark.parametrize("raw", ["", None, "banana", "release-candidate"])
    def test_invalid_never_raises(self, raw):
        """Test that strings without a numeric core parse as invalid."""
        v = SemVerLike.parse(raw)
        assert not v.is_valid
        assert v.version == ""
        assert v.core == ()

    def test_repr(self):
        """Test repr shows the version text."""
        assert repr(SemVerLike.parse("1.0")) == "SemVerLike('1.0')"


class TestOrdering:
    """Tests for SemVerLike comparison."""

    def test_numeric_core(self):
        """Test component-by-component comparison."""
        assert SemVerLike.parse("1.10") > SemVerLike.parse("1.9")
        assert SemVerLike.parse("2.0.0") > SemVerLike.parse("1.99.99")
        assert SemVerLike.parse("1.0.1") > SemVerLike.parse("1.0")

    def test_zero_padding(self):
        """Test that missing trailing components count as zero."""
        assert SemVerLike.parse("1.0").compare(SemVerLike.parse("1.0.0.0")) == 0
        assert SemVerLike.parse("1.0") == SemVerLike.parse("1.0.0")

    def test_release_outranks_prerelease(self):
        """Test that a plain release is newer than its prereleases."""
        assert SemVerLike.parse("1.0.0") > SemVerLike.parse("1.0.0-rc.1")
        assert SemVerLike.parse("1.0.0-rc.1") < SemVerLike.parse("1.0.0")

    def test_release_outranks_build_metadata(self):
        """Test that a version without suffix is newer than one with build metadata."""
        assert SemVerLike.parse("1.0") > SemVerLike.parse("1.0+build.7")

    def test_prerelease_precedence(self):
        """Test semver prerelease precedence rules."""
        ordered = [
            "1.0.0-1",
            "1.0.0-alpha",
            "1.0.0-alpha.1",
            "1.0.0-alpha.beta",
            "1.0.0-beta",
            "1.0.0-beta.2",
            "1.0.0-beta.11",
            "1.0.0-rc.1",
            "1.0.0",
        ]
        parsed = [SemVerLike.parse(v) for v in ordered]
        for older, newer in zip(parsed, parsed[1:]):
            assert older < newer, f"{older} should be older than {newer}"

    def test_descending_sort(self):
        """Test sorting newest first."""
        versions = ["2.0-alpha.1", "2.0-beta1"]
        result = sorted(versions, key=SemVerLike.parse, reverse=True)
        assert result == ["2.0-beta1", "2.0-alpha.1"]

    def test_components_past_fourth_extend_the_core(self):
        """Test that a fifth component orders numerically, not as a prerelease."""
        assert SemVerLike.parse("1.2.3.4.5") > SemVerLike.parse("1.2.3.4")
        assert SemVerLike.parse("1.2.3.4.5") < SemVerLike.parse("1.2.3.5")
        assert SemVerLike.parse("1.2.3.4.10") > SemVerLike.parse("1.2.3.4.9")
        assert SemVerLike.parse("1.2.3.4.5-rc1") < SemVerLike.parse("1.2.3.4.5")
        assert SemVerLike.parse("1.2.3.4.0") == SemVerLike.parse("1.2.3.4")

    def test_components_past_fourth_keep_their_text(self):
        """Test that extra components stay in the suffix text."""
        v = SemVerLike.parse("1.2.3.4.5-rc1")
        assert v.core == (1, 2, 3, 4)
        assert v.all_suffixes == ".5-rc1"
        assert v.prerelease == "rc1"
        assert str(v) == "1.2.3.4.5-rc1"

    def test_build_metadata_does_not_order(self):
        """Test that two builds of the same version compare equal."""
        a = SemVerLike.parse("1.0+a")
        b = SemVerLike.parse("1.0+b")
        assert a.compare(b) == 0
        assert not (a < b or b < a)

    def test_invalid_sorts_lowest(self):
        """Test that invalid versions are older than any valid one."""
        assert SemVerLike.parse("banana") < SemVerLike.parse("0.0.1")
        assert SemVerLike.parse("0.1-alpha") > SemVerLike.parse("zzz")

    def test_invalid_compare_as_text(self):
        """Test that two invalid versions compare by their text."""
        assert SemVerLike.parse("beta") > SemVerLike.parse("alpha")
        assert SemVerLike.parse("same").compare(SemVerLike.parse("same")) == 0

    def test_comparison_with_other_types(self):
        """Test that comparing with non-versions is unsupported."""
        with pytest.raises(TypeError):
            _ = SemVerLike.parse("1.0") < "1.0"
        assert SemVerLike.parse("1.0") != "1.0"


class TestEquality:
    """Tests for SemVerLike equality and hashing."""

    def test_equal_suffix_required(self):
        """Test that equality needs the same core and suffix text."""
        assert SemVerLike.parse("1.0-beta") == SemVerLike.parse("1.0.0-beta")
        assert SemVerLike.parse("1.0-beta") != SemVerLike.parse("1.0-beta2")
        assert SemVerLike.parse("1.0+a") != SemVerLike.parse("1.0+b")

    def test_hash_matches_equality(self):
        """Test that equal versions deduplicate in sets."""
        versions = {SemVerLike.parse(v) for v in ["1.0", "1.0.0", "v1.0", "1.1"]}
        assert len(versions) == 2

    def test_invalid_equality(self):
        """Test that invalid versions are equal only to the same text."""
        assert SemVerLike.parse("abc") == SemVerLike.parse("abc")
        assert SemVerLike.parse("abc") != SemVerLike.parse("abd")
