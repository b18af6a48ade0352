from routelens.domain.models import FIELD_NAME_RE
from routelens.extractors.js.lexer import tokenize
from routelens.extractors.js.validation import (
    extract_validation_schema,
    list_validation_chains,
    resolve_validator_field,
)


USER_VALIDATION = """
const { body } = require("express-validator");

const nameValidator = () =>
  body("name").trim().notEmpty().withMessage("Name is required");

const emailValidator = () => body("email").isEmail();

const passwordValidator = (field = "password") =>
  body("password")
    .isLength({ min: 8 })
    .matches(/^(?=.*[a-z])[A-Za-z\\d@$!%*#?&]{8,}$/);

const phoneCustomValidator = (required = true) => {
  const baseChain = body("phone").trim();
  return required ? baseChain.notEmpty() : baseChain.optional();
};

const registerValidation = [
  nameValidator(),
  emailValidator(),
  passwordValidator(),
  phoneCustomValidator(),
  handleValidationErrors,
];

const updateProfileValidation = [
  nameValidator(),
  phoneCustomValidator(false),
  handleValidationErrors,
];

module.exports = { registerValidation, updateProfileValidation };
"""


def test_lists_top_level_chains_in_source_order():
    assert list_validation_chains(USER_VALIDATION) == ["registerValidation", "updateProfileValidation"]


def test_lists_exported_chains():
    src = """
exports.loginValidation = [body("email")];
module.exports.logoutValidation = [];
function helper() {
  const innerValidation = [];
}
"""
    assert list_validation_chains(src) == ["loginValidation", "logoutValidation"]


def test_register_chain_fields_are_required():
    schema = extract_validation_schema(USER_VALIDATION, "registerValidation")
    assert schema == {
        "name": "string",
        "email": "string",
        "password": "string",
        "phone": "string",
    }


def test_false_argument_marks_field_optional():
    schema = extract_validation_schema(USER_VALIDATION, "updateProfileValidation")
    assert schema == {"name": "string", "phone": "string (optional)"}


def test_object_key_definition():
    src = """
const validators = {
  titleValidator: body("title").notEmpty(),
  slugValidator: body("slug"),
};
const postValidation = [titleValidator(), slugValidator(false)];
"""
    schema = extract_validation_schema(src, "postValidation")
    assert schema == {"title": "string", "slug": "string (optional)"}


def test_plain_assignment_definition():
    src = """
const slugValidator = body("slug");
const tagValidator = body("tag").optional();
const articleValidation = [slugValidator(), tagValidator(false)];
"""
    assert resolve_validator_field(tokenize(src), "slugValidator") == "slug"
    schema = extract_validation_schema(src, "articleValidation")
    assert schema == {"slug": "string", "tag": "string (optional)"}


def test_field_with_trailing_newline_is_not_an_identifier():
    src = "const aValidator = () => body(`email\n`);\nconst xValidation = [aValidator()];"
    assert FIELD_NAME_RE.match("email\n") is None
    assert extract_validation_schema(src, "xValidation") is None


def test_undefined_validator_falls_back_to_name():
    src = "const loginValidation = [usernameValidator(), otpCustomValidator()];"
    schema = extract_validation_schema(src, "loginValidation")
    assert schema == {"username": "string", "otpcustom": "string"}


def test_resolve_field_from_function_body():
    src = """
function tokenValidator() {
  return body("token").isJWT();
}
"""
    assert resolve_validator_field(tokenize(src), "tokenValidator") == "token"


def test_missing_chain_or_no_fields_returns_none():
    src = """
const emptyValidation = [handleValidationErrors];
const nestedValidation = [addressValidator()];
const addressValidator = () => body("address.street");
"""
    assert extract_validation_schema(src, "nope") is None
    assert extract_validation_schema(src, "emptyValidation") is None
    # "address.street" is not a plain identifier
    assert extract_validation_schema(src, "nestedValidation") is None
