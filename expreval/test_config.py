import pytest
from pydantic import ValidationError

from expreval.config import (
    DEFAULT_CONFIG,
    ENV_MAX_DEPTH,
    ENV_MAX_NAME_LENGTH,
    MAX_DEPTH,
    MAX_NAME_LENGTH,
    EvalConfig,
    load_config,
)
from expreval.errors import ErrorKind, EvalError, error_to_string


def test_defaults():
    assert DEFAULT_CONFIG.max_name_length == MAX_NAME_LENGTH
    assert DEFAULT_CONFIG.max_depth == MAX_DEPTH


def test_config_is_frozen():
    with pytest.raises(ValidationError):
        DEFAULT_CONFIG.max_depth = 3


@pytest.mark.parametrize("kwargs", [
    {"max_depth": 0},
    {"max_depth": 1000},
    {"max_name_length": 0},
    {"max_name_length": "many"},
])
def test_out_of_range_values_rejected(kwargs):
    with pytest.raises(ValidationError):
        EvalConfig(**kwargs)


def test_load_config_from_mapping():
    config = load_config({ENV_MAX_NAME_LENGTH: "8", ENV_MAX_DEPTH: " 4 "})
    assert config.max_name_length == 8
    assert config.max_depth == 4


def test_load_config_ignores_blank_values():
    assert load_config({ENV_MAX_DEPTH: ""}) == DEFAULT_CONFIG


def test_load_config_reads_environment(monkeypatch):
    monkeypatch.setenv(ENV_MAX_DEPTH, "10")
    assert load_config().max_depth == 10
    assert load_config().max_name_length == MAX_NAME_LENGTH


def test_load_config_invalid_environment(monkeypatch):
    monkeypatch.setenv(ENV_MAX_DEPTH, "deep")
    with pytest.raises(ValidationError):
        load_config()


# ---------------------------
# Error text
# ---------------------------

def test_every_kind_has_text():
    texts = [error_to_string(kind) for kind in ErrorKind]
    assert texts[0] == "ok"
    assert "undefined error" not in texts
    assert len(set(texts)) == len(texts)


def test_error_text_values():
    assert error_to_string(ErrorKind.STACK_OVERFLOW) == "stack overflow"
    assert error_to_string(ErrorKind.EXPECTED_CLOSE_BRACKET) == "expected close bracket"
    assert error_to_string(3) == "literal out-of-range"


@pytest.mark.parametrize("code", [-1, 12, 999])
def test_out_of_range_code_falls_back(code):
    assert error_to_string(code) == "undefined error"


def test_eval_error_formatting():
    assert str(EvalError(ErrorKind.NAME_TOO_LONG)) == "name too long"
    assert str(EvalError(ErrorKind.EXPECTED_TERM, 7)) == "expected term at position 7"
    assert repr(EvalError(ErrorKind.EXPECTED_TERM, 7)) == "EvalError(EXPECTED_TERM, pos=7)"
