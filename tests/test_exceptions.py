"""Unit tests for the error taxonomy."""

import pytest

from pushit.exceptions import (
    MultiError,
    NoMappingFoundError,
    PushitError,
    UnknownHookError,
    UnknownVariableError,
    flatten_errors,
)


class TestMultiError:
    """Tests for MultiError."""

    def test_single_error_message(self):
        """Test the message of a single-error aggregate."""
        err = MultiError([UnknownVariableError("a")])
        assert str(err) == 'Unknown variable "a"'

    def test_message_counts_extra_errors(self):
        """Test the message mentions how many more errors there are."""
        err = MultiError(
            [
                UnknownVariableError("a"),
                UnknownVariableError("b"),
                NoMappingFoundError("x.js"),
            ]
        )
        assert str(err) == 'Unknown variable "a" (and 2 more errors)'
        assert isinstance(err, PushitError)

    def test_requires_errors(self):
        """Test an empty aggregate is rejected."""
        with pytest.raises(ValueError):
            MultiError([])

    def test_flatten_nested(self):
        """Test nested aggregates are flattened in order."""
        a = UnknownVariableError("a")
        b = UnknownHookError("b")
        c = NoMappingFoundError("c")
        err = MultiError([a, MultiError([b, c])])
        assert list(flatten_errors(err)) == [a, b, c]

    def test_flatten_plain_error(self):
        """Test a plain error flattens to itself."""
        err = NoMappingFoundError("c")
        assert list(flatten_errors(err)) == [err]

    def test_unknown_hook_is_unknown_variable(self):
        """Test unknown hooks can be handled as unknown variables."""
        assert isinstance(UnknownHookError("x"), UnknownVariableError)
