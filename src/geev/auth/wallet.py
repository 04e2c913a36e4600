"""Mock wallet authentication.

There is no real signature check: a signature is accepted when it is longer
than ten characters. Everything else about the flow (lookup, registration on
first sign-in) behaves as the production flow would.
"""

from __future__ import annotations

import structlog

from geev.auth.directory import UserDirectory
from geev.auth.schemas import WalletCredentials
from geev.store.schemas import User

logger = structlog.get_logger()

MIN_SIGNATURE_LENGTH = 11


def verify_wallet_signature(wallet_address: str, signature: str, message: str) -> bool:
    """Mock verification: only the signature length is checked."""
    logger.debug("wallet_signature_check", wallet_address=wallet_address, message_length=len(message))
    return len(signature) >= MIN_SIGNATURE_LENGTH


def authorize(credentials: WalletCredentials, directory: UserDirectory) -> User | None:
    """Resolve wallet credentials to a user, registering one when a username is given.

    Returns None for a rejected signature or an unknown wallet without a username.
    """
    if not verify_wallet_signature(credentials.wallet_address, credentials.signature, credentials.message):
        logger.info("wallet_signature_rejected", wallet_address=credentials.wallet_address)
        return None

    user = directory.lookup_user_by_wallet(credentials.wallet_address)
    if user is not None:
        return user

    if not credentials.username:
        logger.info("wallet_not_registered", wallet_address=credentials.wallet_address)
        return None

    return directory.register(
        credentials.wallet_address,
        credentials.username,
        email=credentials.email,
    )
