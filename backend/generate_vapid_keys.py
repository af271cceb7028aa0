#!/usr/bin/env python3
"""Generate VAPID keys for Web Push notifications."""

import base64

from cryptography.hazmat.primitives import serialization
from py_vapid import Vapid


def main() -> None:
    vapid = Vapid()
    vapid.generate_keys()

    private_key = vapid.private_pem().decode("utf-8").strip()

    # Browsers expect the raw uncompressed point, base64url without padding
    public_key_bytes = vapid.public_key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.UncompressedPoint,
    )
    public_key_b64 = base64.urlsafe_b64encode(public_key_bytes).decode("utf-8").rstrip("=")

    # pywebpush accepts the PEM body on a single line
    private_key_line = "".join(
        line for line in private_key.splitlines() if not line.startswith("-----")
    )

    print("=" * 70)
    print("VAPID KEYS GENERATED - Add to .env")
    print("=" * 70)
    print(f"VAPID_PRIVATE_KEY={private_key_line}")
    print(f"VAPID_PUBLIC_KEY={public_key_b64}")
    print("VAPID_SUBJECT=mailto:admin@example.com")
    print("=" * 70)


if __name__ == "__main__":
    main()
