"""Tests for the development token CLI."""

import jwt

from scripts.issue_token import main

SECRET = "cli-secret-0123456789abcdefghijk"


def test_prints_signed_token(capsys):
    main(["user-7", "--email", "dev@example.com", "--secret", SECRET, "--ttl", "120"])

    token = capsys.readouterr().out.strip()
    claims = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_aud": False})

    assert claims["sub"] == "user-7"
    assert claims["email"] == "dev@example.com"
    assert claims["exp"] - claims["iat"] == 120


def test_token_accepted_by_validator(capsys):
    from tunevault_core.auth.credentials import CredentialValidator

    main(["user-8", "--secret", SECRET])

    token = capsys.readouterr().out.strip()
    principal = CredentialValidator(signing_secret=SECRET).validate(token)

    assert principal.subject_id == "user-8"
