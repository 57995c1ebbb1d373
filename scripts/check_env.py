"""Check that the service configuration in an env file is complete and unchanged.

Subcommands:

``check``
    Load the env file and instantiate ``AppSettings``; report missing LinkedIn
    client settings or an unusable token store backend.
``record``
    Run ``check`` and store a SHA256 baseline of the env file.
``verify``
    Run ``check`` and compare the env file against the recorded baseline, so a
    rotated client secret or encryption key is noticed before restart.

Example::

    python -m scripts.check_env --env-file .env record --hash-file .env.sha256
"""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from app.core.config import AppSettings, _load_env_file

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5

_BACKENDS = {"sqlite", "dynamodb"}


class ConfigurationError(ValueError):
    """Settings parse but cannot work together."""


def _compute_hash(env_file: Path) -> str:
    """Return the SHA256 checksum for the target environment file."""
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _validate_settings(env_file: Path) -> AppSettings:
    """Load ``env_file`` and check the token store and LinkedIn client settings."""
    _load_env_file(str(env_file))
    settings = AppSettings()  # type: ignore[call-arg]

    backend = settings.storage.backend.lower()
    if backend not in _BACKENDS:
        raise ConfigurationError(
            f"TOKEN_STORE_BACKEND must be one of {sorted(_BACKENDS)}, got {backend!r}."
        )
    if backend == "dynamodb" and not settings.storage.dynamodb_table_name:
        raise ConfigurationError("DYNAMODB_TABLE_NAME is required for the dynamodb backend.")
    if not settings.linkedin.scopes:
        raise ConfigurationError("LINKEDIN_SCOPES must list at least one scope.")
    if not settings.is_development and not settings.security.token_encryption_secret:
        raise ConfigurationError(
            "TOKEN_ENCRYPTION_SECRET must be set outside development environments."
        )
    return settings


def _record_checksum(env_file: Path, hash_file: Path) -> int:
    """Persist the current checksum to ``hash_file``."""
    checksum = _compute_hash(env_file)
    hash_file.write_text(f"{checksum}\n", encoding="utf-8")
    print(f"Recorded checksum to {hash_file} ({checksum})")
    return EXIT_OK


def _verify_checksum(env_file: Path, hash_file: Path) -> int:
    """Compare the current checksum to the recorded baseline."""
    if not hash_file.exists():
        print(
            f"Expected checksum file {hash_file} is missing. "
            "Re-run with the 'record' command to establish a baseline.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    expected = hash_file.read_text(encoding="utf-8").strip()
    actual = _compute_hash(env_file)
    if expected == actual:
        print("Environment checksum OK.")
        return EXIT_OK

    print(
        "Environment checksum mismatch!\n"
        f"  expected: {expected}\n"
        f"  actual:   {actual}\n"
        "A client secret or encryption key may have changed; stored tokens "
        "will not decrypt under a new TOKEN_ENCRYPTION_SECRET unless the old "
        "one is listed in TOKEN_ENCRYPTION_PREVIOUS_SECRETS.",
        file=sys.stderr,
    )
    return EXIT_CHECKSUM_ERROR


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate OAuth service settings and detect .env drift."
    )
    parser.add_argument(
        "--env-file",
        default=Path(".env"),
        type=Path,
        help="Path to the environment file (default: .env in the repo root).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("record", "Validate settings and store the checksum baseline."),
        ("verify", "Validate settings and compare the checksum with the baseline."),
    ):
        subparser = subparsers.add_parser(name, help=help_text)
        subparser.add_argument("--hash-file", required=True, type=Path)
    subparsers.add_parser("check", help="Validate settings only.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    env_file: Path = args.env_file

    if not env_file.exists():
        print(f"Environment file {env_file} does not exist.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        _validate_settings(env_file)
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR
    except ConfigurationError as exc:
        print(f"Settings are inconsistent: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    handlers: dict[str, Callable[[], int]] = {
        "record": lambda: _record_checksum(env_file, args.hash_file),
        "verify": lambda: _verify_checksum(env_file, args.hash_file),
        "check": lambda: EXIT_OK,
    }
    return handlers[args.command]()


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
