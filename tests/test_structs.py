from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel
from pydantic import Field as ModelField

from rulebook.errors import (
    Error,
    Errors,
    FieldNotFoundError,
    FieldOwnerError,
    FieldReferenceError,
    PrivateFieldError,
    StructTargetError,
)
from rulebook.validation import (
    ByWithContext,
    Context,
    Field,
    In,
    Length,
    Match,
    Required,
    Skip,
    StructRules,
    fields_of,
    validate,
    validate_struct,
    validate_struct_with_context,
)
from rulebook.validation.formats import Email


@dataclass
class Address:
    street: str
    city: str
    state: str
    zip: str

    def validate(self):
        f = fields_of(self)
        return validate_struct(self,
            Field(f.street, Required, Length(5, 50)),
            Field(f.city, Required, Length(5, 50)),
            Field(f.state, Required, Match(r"^[A-Z]{2}$")),
            Field(f.zip, Required, Match(r"^[0-9]{5}$")),
        )


@dataclass
class Customer:
    name: str
    gender: str
    email: str
    address: Address

    def validate(self):
        f = fields_of(self)
        return validate_struct(self,
            Field(f.name, Required, Length(5, 20)),
            Field(f.gender, In("Female", "Male")),
            Field(f.email, Required, Email),
            Field(f.address),
        )


@pytest.fixture
def customer():
    return Customer(
        name="Qiang Xue",
        gender="",
        email="q",
        address=Address("123 Main Street", "Unknown", "Virginia", "12345"),
    )


def test_nested_struct_errors(customer):
    err = customer.validate()
    assert isinstance(err, Errors)
    assert str(err) == "address: (state: must be in a valid format.); email: must be a valid email address."
    assert err.to_dict() == {
        "address": {"state": "must be in a valid format"},
        "email": "must be a valid email address",
    }


def test_engine_reaches_struct_validation(customer):
    assert str(validate([customer])) == (
        "0: (address: (state: must be in a valid format.); email: must be a valid email address.)."
    )


def test_valid_struct(customer):
    customer.email = "q@example.com"
    customer.address.state = "VA"
    assert customer.validate() is None


def test_skip_on_field_suppresses_nested_validation(customer):
    f = fields_of(customer)
    err = validate_struct(customer, Field(f.address, Skip), Field(f.email, Email))
    assert list(err) == ["email"]


def test_none_struct_is_valid():
    assert validate_struct(None, Field("anything", Required)) is None


@pytest.mark.parametrize("target", [42, "text", ["a"], {"a": 1}])
def test_non_struct_target(target):
    assert isinstance(validate_struct(target, Field("a")), StructTargetError)


# ============================================================================
# Field resolution
# ============================================================================

@dataclass
class Inner:
    name: str


@dataclass
class Outer:
    name: str
    inner: Inner


def test_reference_from_other_object_is_rejected():
    outer = Outer("", Inner(""))
    err = validate_struct(outer, Field(fields_of(outer.inner).name, Required))
    assert isinstance(err, FieldOwnerError)


def test_reference_from_same_object_is_accepted():
    outer = Outer("", Inner(""))
    err = validate_struct(outer, Field(fields_of(outer).name, Required))
    assert str(err) == "name: cannot be blank."


def test_unknown_and_nested_paths_are_not_found():
    outer = Outer("x", Inner("y"))
    f = fields_of(outer)
    assert isinstance(validate_struct(outer, Field(f.missing)), FieldNotFoundError)
    assert isinstance(validate_struct(outer, Field(f.inner.name)), FieldNotFoundError)
    assert isinstance(validate_struct(outer, Field("missing")), FieldNotFoundError)


def test_non_reference_spec():
    assert isinstance(validate_struct(Outer("x", Inner("y")), Field(42)), FieldReferenceError)


def test_internal_error_discards_collected_errors():
    outer = Outer("", Inner(""))
    err = validate_struct(outer, Field("name", Required), Field("missing", Required))
    assert isinstance(err, FieldNotFoundError)
    assert "missing" in err.message


class Account:
    def __init__(self, login, secret):
        self.login = login
        self._secret = secret


class Slotted:
    __slots__ = ("code",)

    def __init__(self, code):
        self.code = code


def test_plain_objects_and_private_fields():
    account = Account("", "hunter2")
    assert str(validate_struct(account, Field("login", Required))) == "login: cannot be blank."
    assert isinstance(validate_struct(account, Field("_secret", Required)), PrivateFieldError)


def test_slotted_objects():
    assert str(validate_struct(Slotted(""), Field("code", Required))) == "code: cannot be blank."


# ============================================================================
# Display names
# ============================================================================

@dataclass
class Tagged:
    email: str = field(default="", metadata={"json": "email_address,omitempty"})
    name: str = field(default="", metadata={"json": ""})
    hidden: str = field(default="", metadata={"form": "other"})


def test_display_name_comes_from_tag():
    err = validate_struct(Tagged(),
        Field("email", Required),
        Field("name", Required),
        Field("hidden", Required),
    )
    assert sorted(err) == ["email_address", "hidden", "name"]


def test_display_name_tag_is_configurable(monkeypatch, fresh_settings):
    monkeypatch.setenv("RULEBOOK_ERROR_TAG", "form")
    fresh_settings.cache_clear()
    err = validate_struct(Tagged(), Field("email", Required), Field("hidden", Required))
    assert sorted(err) == ["email", "other"]


class Signup(BaseModel):
    email: str = ModelField(default="", alias="emailAddress")
    name: str = ""


def test_pydantic_models_use_aliases():
    model = Signup()
    f = fields_of(model)
    err = validate_struct(model, Field(f.email, Required), Field(f.name, Required))
    assert str(err) == "emailAddress: cannot be blank; name: cannot be blank."


# ============================================================================
# Selective mode and context
# ============================================================================

def test_struct_rules_allow_list():
    rules = StructRules().add("name", Required).add("email", Required, Email)
    account = Customer("", "", "", Address("", "", "", ""))

    assert sorted(rules.validate(account)) == ["email", "name"]
    assert list(rules.validate(account, "email")) == ["email"]
    assert rules.validate(account, "gender") is None


def test_struct_with_context():
    rule = ByWithContext(lambda ctx, v: Error("", "locked") if ctx.value("locked") else None)
    outer = Outer("x", Inner("y"))

    assert validate_struct(outer, Field("name", rule)) is None
    ctx = Context.background().with_value("locked", True)
    assert str(validate_struct_with_context(ctx, outer, Field("name", rule))) == "name: locked."
