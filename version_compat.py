import logging
import re
from typing import Optional

from acceptance_store import AcceptanceStore
from code_derivation import verify_code
from models import CodeFormat, CompatibilityPolicy

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"^[vV]?(\d+)(?:\.(\d+))?")

# Whole version: dotted numbers plus an optional suffix starting with a letter ("-beta", "+rc1")
_FULL_VERSION_RE = re.compile(r"^[vV]?\d+(?:\.\d+)*(?:[-+][A-Za-z][0-9A-Za-z.-]*)?$")


def config_key(name: str, version: str) -> str:
    return f"{name}-{version}"


def version_from_key(key: str, name: str) -> Optional[str]:
    """
    Return the version part of a key belonging to ``name``.

    Keys of products whose name merely starts with ``name-`` ("Proj-2-1.0"
    for "Proj") do not yield a well-formed version and are ignored.
    """
    prefix = f"{name}-"
    if not key.startswith(prefix):
        return None
    version = key[len(prefix):]
    if not _FULL_VERSION_RE.match(version):
        return None
    return version


def compatibility_prefix(version: str, policy: CompatibilityPolicy) -> Optional[str]:
    """
    Portion of a version that decides compatibility.

    "1.2.7" -> "1.2" under MAJOR_MINOR, "1" under MAJOR. A missing minor
    counts as 0. Versions without a numeric major have no prefix.
    """
    match = _VERSION_RE.match(version.strip())
    if not match:
        return None

    major = str(int(match.group(1)))
    if CompatibilityPolicy(policy) == CompatibilityPolicy.MAJOR:
        return major

    minor = str(int(match.group(2))) if match.group(2) is not None else "0"
    return f"{major}.{minor}"


class VersionCompatibilityResolver:
    """
    Decides whether stored acceptances cover a product version.

    An exact record must carry a code that verifies for that version. Failing
    that, any other record of the same product whose version shares the
    compatibility prefix authorizes the version. By default the matched
    record's code is not re-checked; this is a deliberate trust boundary and
    can be tightened with ``reverify_compatible``.
    """

    def __init__(
        self,
        secret: str,
        policy: CompatibilityPolicy = CompatibilityPolicy.MAJOR_MINOR,
        code_format: CodeFormat = CodeFormat.SHORT,
        reverify_compatible: bool = False,
    ):
        self.secret = secret
        self.policy = CompatibilityPolicy(policy)
        self.code_format = CodeFormat(code_format)
        self.reverify_compatible = reverify_compatible

    def is_exact_match(self, store: AcceptanceStore, name: str, version: str) -> bool:
        stored = store.get(config_key(name, version))
        if stored is None:
            return False
        return verify_code(stored, name, version, self.secret, self.code_format)

    def find_compatible_key(self, store: AcceptanceStore, name: str, version: str) -> Optional[str]:
        """Return any stored key of ``name`` sharing the version's compatibility prefix."""
        wanted = compatibility_prefix(version, self.policy)
        if wanted is None:
            return None

        exact = config_key(name, version)
        for key in store.keys():
            if key == exact:
                continue

            stored_version = version_from_key(key, name)
            if stored_version is None:
                continue
            if compatibility_prefix(stored_version, self.policy) != wanted:
                continue

            if self.reverify_compatible and not verify_code(
                store.get(key) or "", name, stored_version, self.secret, self.code_format
            ):
                logger.debug("Skipping %s: stored code does not verify", key)
                continue

            return key
        return None

    def is_authorized(self, store: AcceptanceStore, name: str, version: str) -> bool:
        if self.is_exact_match(store, name, version):
            return True

        matched = self.find_compatible_key(store, name, version)
        if matched is not None:
            logger.info("%s %s authorized by compatible record %s", name, version, matched)
            return True
        return False
