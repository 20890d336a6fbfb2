"""
Protected Core Package
======================
Protected-field records: plain models that keep one field as ciphertext.

Provides:
- ProtectedRecord merge override and asynchronous decrypt pipeline
- Body format detection (legacy hex-IV blobs vs base64) and AES decryption
- Key directory lookups and concrete record types (Note, Board, KeychainEntry)
"""
