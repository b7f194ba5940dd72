"""
BookingDesk Backend — Category Tests
======================================

What:  Category.is_valid is a total membership test over the fixed tags.
"""

import pytest

from bookingdesk.models.category import Category


class TestCategoryValidation:

    @pytest.mark.parametrize("tag", ["pets", "auto", "events", "beauty", "home", "health"])
    def test_enumerated_tags_are_valid(self, tag):
        assert Category.is_valid(tag)

    @pytest.mark.parametrize("tag", ["", "Pets", "automotive", "food", " pets", "pets "])
    def test_other_strings_are_invalid(self, tag):
        assert not Category.is_valid(tag)

    @pytest.mark.parametrize("tag", [None, 1, ["pets"], Category])
    def test_non_strings_are_invalid(self, tag):
        assert not Category.is_valid(tag)

    def test_members_are_valid(self):
        """Enum members compare equal to their wire value."""
        assert Category.is_valid(Category.AUTOMOTIVE)

    def test_values_lists_every_tag_once(self):
        assert sorted(Category.values()) == ["auto", "beauty", "events", "health", "home", "pets"]
