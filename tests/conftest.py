from pathlib import Path
import textwrap

import pytest


AUTH_VALIDATION = """
const { body, validationResult } = require("express-validator");

const handleValidationErrors = (req, res, next) => {
  const errors = validationResult(req);
  if (!errors.isEmpty()) {
    return res.status(400).json({ success: false, message: errors.array()[0].msg });
  }
  next();
};

const nameValidator = () =>
  body("name")
    .trim()
    .notEmpty()
    .withMessage("Name is required");

const emailValidator = () => body("email").trim().isEmail();

const passwordValidator = (field = "password") =>
  body("password")
    .isLength({ min: 8 })
    .matches(/^(?=.*[a-z])(?=.*[A-Z])[A-Za-z\\d@$!%*#?&]{8,}$/);

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

const loginValidation = [emailValidator(), passwordValidator(), handleValidationErrors];

module.exports = { registerValidation, loginValidation };
"""

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
  const user = await User.findByIdAndUpdate(req.user.id, updates, { new: true });
  res.json(user);
};

module.exports = { getProfile, updateProfile };
"""


def write(p: Path, s: str) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(textwrap.dedent(s), encoding="utf-8")


@pytest.fixture
def express_project(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    write(repo / "src" / "validations" / "auth.validation.js", AUTH_VALIDATION)
    write(repo / "src" / "controllers" / "user.controller.js", USER_CONTROLLER)
    return repo

