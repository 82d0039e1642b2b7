"""
User-facing texts shown by the host while running the startup gates.
"""

from datetime import datetime
from typing import Optional

EULA_REQUIRED_TITLE = "EULA Acceptance Required"
EULA_REJECTED_TITLE = "EULA Not Accepted"
EXPIRED_TITLE = "Application Expired"
AGREEMENT_TITLE = "Agreement"
ERROR_TITLE = "Error"

EULA_REQUIRED = (
    "This application requires EULA acceptance before use.\n\n"
    "You will be prompted to provide an access code. "
    "Please follow the instructions to obtain your code."
)

EULA_REJECTED = (
    "EULA acceptance is required to use this application.\n\n"
    "The application will now close."
)

INVALID_CODE = "Invalid access code. Please try again."


def code_instructions(eula_url: str) -> str:
    return f"Please visit {eula_url} to accept the EULA and receive your access code."


def _updates_line(releases_url: str) -> str:
    return f"Newer builds with future expiration dates can be found here: {releases_url}"


def expired(releases_url: str) -> str:
    return f"Application has expired. {_updates_line(releases_url)}"


def invalid_expiration(releases_url: str) -> str:
    return (
        "This build does not carry a valid expiration date and cannot be started. "
        + _updates_line(releases_url)
    )


def _until(expiration_date: Optional[datetime]) -> str:
    if expiration_date is None:
        return "until further notice"
    return f"until {expiration_date.strftime('%m/%d/%Y')}"


def usage_terms(project_name: str, expiration_date: Optional[datetime], releases_url: str, returning: bool) -> str:
    """
    Usage agreement shown on every launch while the build can expire.

    First-time users get the full research-use disclaimer; returning users a
    shorter reminder.
    """
    availability = (
        f"Application will only be available {_until(expiration_date)} "
        "after which the application will be unavailable. "
    )
    agreement = (
        "By Clicking 'Yes' you agree that this application will be evaluated "
        "and not utilized in providing planning decision support\n\n"
    )
    footer = (
        _updates_line(releases_url) + "\n\n"
        "See the FAQ for more information on how to remove this pop-up and expiration"
    )

    if returning:
        return availability + agreement + footer

    intro = (
        f"The current {project_name} application is provided AS IS as a non-clinical, "
        "research only tool in evaluation only. The current "
    )
    return intro + availability[0].lower() + availability[1:] + agreement + footer
