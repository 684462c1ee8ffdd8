import pytest

from rulebook.errors import (
    ContextCancelledError,
    Errors,
    KeyNotFoundError,
    KeyWrongTypeError,
    NotAMapError,
)
from rulebook.validation import (
    Context,
    Each,
    Key,
    Length,
    Map,
    Required,
    add_rule_translation,
    set_language,
    validate,
    validate_map,
    validate_map_with_context,
)
from rulebook.validation.formats import Email


@pytest.fixture
def payload():
    return {
        "name": "Qiang Xue",
        "email": "q",
        "address": {"street": "123 Main Street", "city": ""},
    }


def test_map_errors_keyed_by_key(payload):
    err = validate_map(payload,
        Key("name", Required, Length(5, 20)),
        Key("email", Required, Email),
    )
    assert isinstance(err, Errors)
    assert str(err) == "email: must be a valid email address."


def test_nested_map_rule(payload):
    err = validate(payload, Map(
        Key("email", Email),
        Key("address", Map(Key("street", Required), Key("city", Required))),
    ))
    assert str(err) == "address: (city: cannot be blank.); email: must be a valid email address."


def test_valid_map():
    assert validate_map({"a": "x"}, Key("a", Required)) is None
    assert validate_map(None, Key("a", Required)) is None


def test_extra_keys_tolerated_by_default(payload):
    assert validate_map(payload, Key("name", Required)) is None
    assert validate(payload, Map(Key("name", Required))) is None


def test_exhaustive_flags_extra_keys(payload):
    err = validate_map(payload, Key("name", Required), exhaustive=True)
    assert err.to_dict() == {"address": "key not expected", "email": "key not expected"}
    assert err["email"].code == "validation_key_unexpected"

    rule = Map(Key("name", Required)).exhaustive()
    assert sorted(validate(payload, rule)) == ["address", "email"]
    assert validate(payload, rule.allow_extra_keys()) is None


def test_extra_key_message_is_translatable():
    add_rule_translation("es", "key_unexpected", "clave no esperada")
    set_language("es")
    err = validate_map({"a": 1, "b": 2}, Key("a"), exhaustive=True)
    assert str(err) == "b: clave no esperada."


def test_missing_key_is_internal():
    err = validate_map({"a": 1}, Key("b", Required))
    assert isinstance(err, KeyNotFoundError)
    assert err.message == "b: required key is missing"


def test_wrong_key_type_is_internal():
    err = validate_map({"a": 1}, Key(1, Required))
    assert isinstance(err, KeyWrongTypeError)
    assert err.message == "1: key not the correct type"
    assert isinstance(validate_map({"a": 1}, Key(["a"])), KeyWrongTypeError)


def test_internal_error_short_circuits():
    err = validate_map({"a": "", "b": ""}, Key("a", Required), Key("c", Required), Key("b", Required))
    assert isinstance(err, KeyNotFoundError)


def test_not_a_map():
    err = validate_map(["a"], Key(0))
    assert isinstance(err, NotAMapError)
    assert err.message == "only a map can be validated"
    assert isinstance(validate(["a"], Map(Key(0))), NotAMapError)


def test_mixed_key_types_accept_any_hashable_key():
    assert str(validate_map({1: "", "a": "x"}, Key(1, Required))) == "1: cannot be blank."


def test_map_values_with_each():
    err = validate_map({"tags": ["ok", ""]}, Key("tags", Each(Required)))
    assert str(err) == "tags: (1: cannot be blank.)."


def test_map_with_context():
    ctx, cancel = Context.background().with_cancel()
    assert validate_map_with_context(ctx, {"a": "x"}, Key("a", Required)) is None
    cancel()
    err = validate_map_with_context(ctx, {"a": "x"}, Key("a", Required))
    assert isinstance(err, ContextCancelledError)
