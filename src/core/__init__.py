from .encoding import canonical_json
from .crypto_layer import KeyPair, sign_struct, verify_struct, blake2b_hash as hash

__all__ = [
    "canonical_json",
    "KeyPair",
    "sign_struct",
    "verify_struct",
    "hash",
]
