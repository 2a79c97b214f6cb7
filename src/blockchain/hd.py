"""BIP-39 / BIP-32 helpers shared by the chain adapters.

Mnemonic handling and secp256k1 path derivation come from eth-account's
HD wallet module; ed25519 (SLIP-10) derivation is done by solders.
"""

from eth_account.hdaccount import generate_mnemonic, key_from_seed, seed_from_mnemonic
from eth_account.types import Language

MNEMONIC_WORDS = 12


def new_mnemonic() -> str:
    """Generate a fresh English mnemonic."""
    return generate_mnemonic(num_words=MNEMONIC_WORDS, lang=Language.ENGLISH)


def mnemonic_to_seed(mnemonic: str, passphrase: str = "") -> bytes:
    """Convert a mnemonic into its 64-byte BIP-39 seed.

    Raises:
        eth_utils.ValidationError: If the mnemonic is not a valid BIP-39 phrase
    """
    return seed_from_mnemonic(mnemonic.strip(), passphrase)


def derive_secp256k1_key(mnemonic: str, path: str) -> bytes:
    """Derive a 32-byte secp256k1 private key along a BIP-32 path."""
    return key_from_seed(mnemonic_to_seed(mnemonic), path)


def select_path(template: str, index: int | None, explicit: str | None) -> str:
    """Pick the derivation path: explicit path first, else template at index.

    Args:
        template: Path template with an ``{index}`` placeholder
        index: Account index; None means the canonical default (0)
        explicit: Caller-supplied derivation path
    """
    if explicit:
        return explicit
    return template.format(index=index if index is not None else 0)
