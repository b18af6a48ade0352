from routelens.matching.candidates import (
    generate_candidates,
    name_segments,
    to_camel_case,
    verbs_for,
    with_suffix,
)


def test_name_segments_drop_api_and_params():
    assert name_segments("/api/user/:id/posts/{post_id}") == ["user", "posts"]


def test_single_segment_order():
    cands = generate_candidates("/api/user/:id", "GET")
    assert cands[:5] == ["user", "getUser", "userGet", "fetchUser", "userFetch"]
    assert "api" not in cands
    assert not any(":" in c or "id" == c for c in cands)


def test_separated_segment_spellings():
    cands = generate_candidates("/api/user-documents", "POST")
    assert cands[:6] == [
        "user-documents",
        "userdocuments",
        "userDocuments",
        "createUser-documents",
        "createUserdocuments",
        "createUserDocuments",
    ]


def test_pair_and_triple_forms():
    pair = generate_candidates("/auth/reset-password", "POST")
    assert "authResetPassword" in pair
    assert "resetPasswordAuth" in pair

    triple = generate_candidates("/api/users/frameworks/compare/run", "POST")
    assert "frameworksCompareRun" in triple
    assert "createFrameworksCompareRun" in triple
    # pair forms precede the trailing-three forms
    assert triple.index("usersFrameworks") < triple.index("frameworksCompareRun")


def test_candidates_are_unique():
    cands = generate_candidates("/api/user/profile", "PUT")
    assert len(cands) == len(set(cands))


def test_unknown_method_uses_its_own_name():
    assert verbs_for("options") == ("options",)
    assert "optionsUser" in generate_candidates("/user", "OPTIONS")


def test_camel_case():
    assert to_camel_case("user_profile-image") == "userProfileImage"


def test_with_suffix_puts_suffixed_first():
    assert with_suffix(["login", "auth"], "Validation") == [
        "loginValidation",
        "authValidation",
        "login",
        "auth",
    ]
    assert with_suffix(["login"], "") == ["login"]
