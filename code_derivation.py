import hashlib
import hmac

from models import CodeFormat

CODE_LENGTH = 8
DELIMITER = "-"
PREFIX = "MAAS"


def _short_code(name: str, version: str, secret: str) -> str:
    payload = DELIMITER.join((name, version, secret))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:CODE_LENGTH]


def _name_tag(name: str) -> str:
    return "".join(ch for ch in name if ch.isalpha())[:4].upper()


def derive(name: str, version: str, secret: str, code_format: CodeFormat = CodeFormat.SHORT) -> str:
    """
    Derive the access code for a product version.

    SHORT is the first 8 hex characters of SHA-256 over "name-version-secret".
    PREFIXED wraps the same hash as "MAAS-<first 4 letters of name>-<hash>".
    """
    code = _short_code(name, version, secret)
    if CodeFormat(code_format) == CodeFormat.PREFIXED:
        return f"{PREFIX}{DELIMITER}{_name_tag(name)}{DELIMITER}{code}"
    return code


def normalize(code: str) -> str:
    return code.strip().lower()


def verify(candidate: str, expected: str) -> bool:
    """Case-insensitive comparison of a user-entered code with the expected one."""
    if not candidate or not expected:
        return False
    return hmac.compare_digest(
        normalize(candidate).encode("utf-8"),
        normalize(expected).encode("utf-8"),
    )


def verify_code(
    candidate: str,
    name: str,
    version: str,
    secret: str,
    code_format: CodeFormat = CodeFormat.SHORT,
) -> bool:
    """Check a code against the single canonical format of this deployment."""
    return verify(candidate, derive(name, version, secret, code_format))
