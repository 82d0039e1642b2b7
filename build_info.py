"""
Release metadata baked into the distributed build.

Both values are written by the release pipeline and are not meant to be
changed by end users. The secret is shared with the access-code generator
run by the distributor.
"""

SECRET_KEY = "DefaultMAASSecretKey2025!"

# en-US format, parsed by expiration_gate.parse_expiration
EXPIRATION_DATE = "12/31/2026"
