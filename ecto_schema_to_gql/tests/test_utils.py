#!/usr/bin/env python3

import pytest

from ecto_schema_to_gql.utils import atom, camelize, last_segment, pluralize, singularize, snake_case


class TestNaming:
    """Test cases for naming helpers"""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("User", "user"),
            ("TestUser", "test_user"),
            ("HTTPRequest", "http_request"),
            ("user_status", "user_status"),
            ("", ""),
        ],
    )
    def test_snake_case(self, text, expected):
        assert snake_case(text) == expected

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("my_app", "MyApp"),
            ("accounts", "Accounts"),
            ("Accounts", "Accounts"),
            ("blog_posts", "BlogPosts"),
        ],
    )
    def test_camelize(self, text, expected):
        assert camelize(text) == expected

    def test_last_segment(self):
        assert last_segment("MyApp.Accounts.User") == "User"
        assert last_segment("User") == "User"


class TestSingularize:
    """Naive singularization strips exactly one trailing s"""

    def test_regular_plural(self):
        assert singularize("users") == "user"

    def test_status_loses_its_s(self):
        """The naive rule is kept as is: status -> statu"""
        assert singularize("status") == "statu"

    def test_only_one_s_is_stripped(self):
        assert singularize("addresss") == "addres"

    def test_no_trailing_s(self):
        assert singularize("people") == "people"

    def test_pluralize(self):
        assert pluralize("user") == "users"


if __name__ == "__main__":
    pytest.main([__file__])


class TestAtom:
    """Test cases for Elixir atom literals"""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("active", ":active"),
            ("valid?", ":valid?"),
            ("in-progress", ':"in-progress"'),
            ("on hold", ':"on hold"'),
            ('say "hi"', ':"say \\"hi\\""'),
        ],
    )
    def test_atom(self, name, expected):
        assert atom(name) == expected
