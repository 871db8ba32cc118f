#!/usr/bin/env python3
"""
Example usage of the TOON codec.

This script encodes one document in every layout, prints the sizes and
shows that each layout decodes back to the original value.
"""

import json
from toon_codec import DecodeError, EncodeError, EncodeOptions, ToonCodec, decode, encode


def main():
    """Main example function."""
    print("TOON Codec Example")
    print("=" * 50)

    # Create sample data
    sample_data = {
        "users": [
            {"id": 1, "name": "Alice Johnson", "email": "alice@example.com", "active": True},
            {"id": 2, "name": "Bob Smith", "email": "bob@example.com", "active": False},
            {"id": 3, "name": "Carol", "email": "carol@example.com", "active": True}
        ],
        "config": {
            "version": "1.0.0",
            "features": ["comments", "search"],
            "limits": {"max_posts_per_user": 100, "ratio": 0.75}
        }
    }

    json_string = json.dumps(sample_data, indent=2)
    print(f"Original JSON size: {len(json_string)} bytes\n")

    # Indented text
    text = encode(sample_data)
    print(f"Text layout ({len(text)} bytes):")
    print(text.decode("utf-8"))
    print()

    # Compact binary
    compact = encode(sample_data, compact=True)
    print(f"Compact layout: {len(compact)} bytes, header {compact[:5]!r}")

    # Tabular layout applies to a top-level uniform array of objects
    users = sample_data["users"]
    tabular = encode(users, tabular_arrays=True)
    print(f"\nTabular layout ({len(tabular)} bytes):")
    print(tabular.decode("utf-8"))

    tabular_compact = encode(users, tabular_arrays=True, compact=True)
    print(f"\nTabular compact layout: {len(tabular_compact)} bytes")

    # Every layout decodes back without a flag
    for label, blob, original in [
        ("text", text, sample_data),
        ("compact", compact, sample_data),
        ("tabular", tabular, users),
        ("tabular compact", tabular_compact, users)
    ]:
        status = "✅" if decode(blob) == original else "❌"
        print(f"{status} {label} round trip")

    # Strict tabular mode rejects values it cannot lay out as a table
    codec = ToonCodec()
    try:
        codec.encode(users + [{"id": 4}], EncodeOptions(tabular_arrays=True, strict=True))
        print("\nStrict mode accepted the rows")
    except EncodeError as e:
        print(f"\n❌ Strict mode: {e}")
        print(f"   {codec.error_handler.handle_error(e).suggested_action}")

    # Decode errors carry the offset of the problem
    try:
        decode(compact[:-3])
    except DecodeError as e:
        print(f"❌ Truncated document: {e}")


if __name__ == "__main__":
    main()
