# protected_core/constants.py

BODY_FIELD = "body"
KEYS_FIELD = "keys"
ID_FIELD = "id"

# Legacy bodies end in ":i" + hex IV (16 bytes -> 32 hex chars)
LEGACY_DELIMITER = ":i"
LEGACY_IV_HEX_LEN = 32
LEGACY_TEXT_ENCODING = "latin-1"

# Current binary format: version | nonce | AES-GCM ciphertext
CRYPTO_VERSION = 5
GCM_NONCE_LEN = 12
