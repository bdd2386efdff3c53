"""CLI entry point for mediasign."""

import argparse
import asyncio
import logging
import sys

from mediasign.cache import CacheConfigError
from mediasign.config import ConfigError, resolve_bucket_alias
from mediasign.references import resolve_reference
from mediasign.registry import build_registry


async def run(bucket: str, path: str, reference: bool, public_fallback: bool) -> str:
    registry = build_registry()
    bucket = resolve_bucket_alias(bucket)
    if reference:
        return await resolve_reference(
            registry, path, default_bucket=bucket, public_fallback=public_fallback
        )
    return await registry.resolve(bucket, path)


def main(argv=None):
    parser = argparse.ArgumentParser(description="mediasign - signed URLs for private storage objects")
    parser.add_argument("bucket", help="storage bucket, or @operator-assets|@operator-documents|@operator-logo (default bucket with --reference)")
    parser.add_argument("path", help="object path within the bucket")
    parser.add_argument(
        "--reference",
        action="store_true",
        help="treat PATH as a raw reference (storage URL, bucket-prefixed path, external URL)",
    )
    parser.add_argument(
        "--public-fallback",
        action="store_true",
        help="fall back to the public URL when signing fails (with --reference)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        url = asyncio.run(run(args.bucket, args.path, args.reference, args.public_fallback))
    except (ConfigError, CacheConfigError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    if not url:
        print(f"Could not sign {args.bucket}:{args.path}", file=sys.stderr)
        sys.exit(1)
    print(url)


if __name__ == "__main__":
    main()
