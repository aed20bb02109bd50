"""Tests for input file discovery."""

import os

import pytest

from minifyimg.core.validators import InvalidConfiguration
from minifyimg.rules.discovery import PathMatcher, expand_patterns


def p(path):
    return path.replace("/", os.sep)


ALL_IMAGES = [
    p("src/images/icons/nested/dot.gif"),
    p("src/images/icons/star.svg"),
    p("src/images/logo.png"),
    p("src/images/photo.jpg"),
    p("src/images/raw/draft.png"),
]


class TestGlobExpansion:
    """Tests for glob-mode expansion."""

    def test_recursive_pattern(self, image_tree):
        """Test ** finds nested files, sorted, without junk."""
        assert expand_patterns(["src/images/**/*"]) == ALL_IMAGES

    def test_directories_are_skipped(self, image_tree):
        """Test only regular files are returned."""
        files = expand_patterns(["src/images/*"])
        assert files == [p("src/images/logo.png"), p("src/images/photo.jpg")]

    def test_pattern_order_and_dedupe(self, image_tree):
        """Test patterns expand in order and duplicates keep their first position."""
        files = expand_patterns(["src/images/*.jpg", "src/images/**/*"])

        assert files[0] == p("src/images/photo.jpg")
        assert len(files) == len(ALL_IMAGES)
        assert files.count(p("src/images/photo.jpg")) == 1

    def test_negation(self, image_tree):
        """Test ! patterns exclude matching files."""
        files = expand_patterns(["src/images/**/*", "!src/images/raw/**", "!**/*.svg"])

        assert p("src/images/raw/draft.png") not in files
        assert p("src/images/icons/star.svg") not in files
        assert p("src/images/logo.png") in files

    def test_same_file_different_spelling(self, image_tree):
        """Test "x" and "./x" are one file, kept under the first spelling."""
        files = expand_patterns(["src/images/*.png", "./src/images/*.png"])

        assert files == [p("src/images/logo.png")]

    def test_absolute_and_relative_spelling(self, image_tree):
        """Test an absolute pattern does not duplicate relative matches."""
        absolute = os.path.join(os.getcwd(), "src", "images", "*.jpg")

        files = expand_patterns(["src/images/*.jpg", absolute])

        assert files == [p("src/images/photo.jpg")]

    def test_brace_group(self, image_tree):
        """Test {a,b} groups match every alternative, sorted together."""
        files = expand_patterns(["src/images/*.{png,jpg}"])

        assert files == [p("src/images/logo.png"), p("src/images/photo.jpg")]

    def test_nested_brace_group(self, image_tree):
        """Test brace groups in directories and negations."""
        files = expand_patterns(["src/images/{icons,raw}/**/*.{svg,png,gif}", "!**/*.{gif,svg}"])

        assert files == [p("src/images/raw/draft.png")]

    def test_no_matches(self, image_tree):
        """Test a pattern matching nothing yields an empty list."""
        assert expand_patterns(["src/images/**/*.webp"]) == []

    def test_only_negations(self, image_tree):
        """Test negations alone select nothing."""
        assert expand_patterns(["!src/images/raw/**"]) == []

    def test_repeatable(self, image_tree):
        """Test the same filesystem state yields the same list."""
        matcher = PathMatcher()
        assert matcher.expand(["src/images/**/*"]) == matcher.expand(["src/images/**/*"])


class TestLiteralPaths:
    """Tests for use_glob=False."""

    def test_literal_paths(self, image_tree):
        """Test literal paths are passed through, de-duplicated and de-junked."""
        specs = ["src/images/logo.png", "src/images/*.jpg", "src/images/logo.png", "src/images/.DS_Store"]
        files = PathMatcher(use_glob=False).expand(specs)

        assert files == ["src/images/logo.png", "src/images/*.jpg"]

    def test_literal_duplicates_normalized(self, image_tree):
        """Test literal paths naming the same file are kept once."""
        specs = ["src/images/logo.png", "./src/images/logo.png", "src/images/../images/logo.png"]

        assert PathMatcher(use_glob=False).expand(specs) == ["src/images/logo.png"]

    def test_literal_exclusion_rejected(self, image_tree):
        """Test exclusion patterns are refused without glob expansion."""
        with pytest.raises(InvalidConfiguration, match="requires glob expansion"):
            PathMatcher(use_glob=False).expand(["src/images/logo.png", "!src/images/logo.png"])
