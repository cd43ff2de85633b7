"""Law society registry lookup"""

import logging

logger = logging.getLogger(__name__)


def verify_lsa_standing(bar_number: str) -> bool:
    """Check a bar number against the Law Society of Alberta directory.

    Not integrated yet: every bar number is reported as in good standing.
    """
    # TODO: call the LSA lawyer directory API once access is granted
    logger.warning(f"LSA directory check not implemented, accepting bar number {bar_number}")
    return True
