"""Unit tests for scope parsing and narrowing."""

import pytest

from oauth_core.oauth2 import ScopeValidator
from oauth_core.oauth2.scopes import format_scope, parse_scope

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, ()),
        ("", ()),
        ("   ", ()),
        ("read", ("read",)),
        ("write read write", ("write", "read")),
        ("read\twrite\n", ("read", "write")),
    ],
)
def test_parse_scope(raw: str | None, expected: tuple[str, ...]) -> None:
    assert parse_scope(raw) == expected


def test_format_scope() -> None:
    assert format_scope(("a", "b")) == "a b"
    assert format_scope(()) == ""


class TestNarrow:
    """Narrowing allows subsets and never widens."""

    validator = ScopeValidator()

    def test_absent_request_keeps_grant(self) -> None:
        assert self.validator.narrow(None, "read write").unwrap() == "read write"
        assert self.validator.narrow("  ", "read write").unwrap() == "read write"

    def test_subset(self) -> None:
        assert self.validator.narrow("write", "read write").unwrap() == "write"

    def test_same_set_in_other_order(self) -> None:
        assert self.validator.narrow("write read", "read write").unwrap() == "write read"

    def test_superset_is_error(self) -> None:
        result = self.validator.narrow("read admin", "read write")

        assert result.is_err()
        assert "admin" in result.unwrap_err()

    def test_nothing_granted(self) -> None:
        assert self.validator.narrow("read", "").is_err()
        assert self.validator.narrow(None, "").unwrap() == ""


class TestValidateKnown:
    def test_any_scope_without_configuration(self) -> None:
        assert ScopeValidator().validate_known("x y x").unwrap() == "x y"

    def test_known_scopes(self) -> None:
        validator = ScopeValidator(["read", "write"])

        assert validator.validate_known("read").unwrap() == "read"
        assert validator.validate_known(None).unwrap() == ""
        assert validator.validate_known("read delete").unwrap_err() == "Unknown scope: delete"
