from routelens.extractors.js.handlers import (
    extract_handler_schema,
    extract_schema_from_source,
    list_handler_names,
)


USER_CONTROLLER = """
const User = require("../models/user.model");

const getProfile = async (req, res) => {
  const user = await User.findById(req.user.id);
  res.json(user);
};

const updateProfile = async (req, res) => {
  const { name, email, phone } = req.body;
  const updates = {};
  if (name) updates.name = name;
  if (email) updates.email = email;
  if (phone) updates.phone = phone;
  res.json(updates);
};

function createUser(req, res) {
  const { name, email: mail, role = "user", ...rest } = req.body;
  const note = req.body.note;
  if (note) {
    rest.note = note;
  }
  return res.status(201).json({ name, mail, role, rest });
}

const ping = (req, res) => res.send("pong");

exports.deleteUser = async (req, res) => {
  await User.deleteOne({ _id: req.params.id });
};

module.exports = { getProfile, updateProfile, createUser, ping };
"""


def test_handler_names_grouped_by_declaration_shape():
    assert list_handler_names(USER_CONTROLLER) == [
        "getProfile",
        "updateProfile",
        "ping",
        "createUser",
        "deleteUser",
    ]


def test_guarded_destructured_fields_are_optional():
    schema = extract_handler_schema(USER_CONTROLLER, "updateProfile")
    assert schema == {
        "name": "string (optional)",
        "email": "string (optional)",
        "phone": "string (optional)",
    }


def test_destructuring_keys_and_direct_access():
    schema = extract_handler_schema(USER_CONTROLLER, "createUser")
    assert schema == {
        "name": "string",
        "email": "string",
        "role": "string",
        "note": "string (optional)",
    }


def test_handler_without_payload_access_returns_none():
    assert extract_handler_schema(USER_CONTROLLER, "getProfile") is None
    assert extract_handler_schema(USER_CONTROLLER, "deleteUser") is None


def test_unknown_handler_returns_none():
    assert extract_handler_schema(USER_CONTROLLER, "missing") is None


def test_expression_body_arrow_is_not_a_handler_span():
    # no braces, nothing to scan
    assert extract_handler_schema(USER_CONTROLLER, "ping") is None


def test_guard_operators():
    src = """
exports.checkout = async function (req, res) {
  const { amount, tag, flag, val, count } = req.body;
  const total = amount || 0;
  const label = tag ? tag : "none";
  const ok = flag && count > 0;
  const v = val ?? 1;
  res.json({ total, label, ok, v });
};
"""
    schema = extract_handler_schema(src, "checkout")
    assert schema == {
        "amount": "string (optional)",
        "tag": "string (optional)",
        "flag": "string (optional)",
        "val": "string (optional)",
        "count": "string",
    }


def test_optional_chaining_and_custom_payload_object():
    src = """
const login = (req, res) => {
  const user = req.body?.username;
  const pass = request.payload.password;
};
"""
    assert extract_schema_from_source(src) == {"username": "string"}
    assert extract_schema_from_source(src, payload="request.payload") == {"password": "string"}


def test_nested_member_access_is_not_payload():
    src = """
async function save(req, res) {
  const body = ctx.req.body.secret;
  const { title } = req.body;
}
"""
    assert extract_handler_schema(src, "save") == {"title": "string"}
