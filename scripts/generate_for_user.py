#!/usr/bin/env python
"""Run one profile picture generation for a user, bypassing ID-token checks."""
from __future__ import annotations

import argparse
import asyncio
import logging

from profilegen.errors import CallableError
from profilegen.services.pipeline import GenerationPipeline


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a profile picture for a Firebase user")
    parser.add_argument("--uid", required=True)
    parser.add_argument("--image_url", required=True)
    parser.add_argument("--prompt", default=None)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    pipeline = GenerationPipeline()
    try:
        response = asyncio.run(pipeline.run(args.uid, {"imageUrl": args.image_url, "prompt": args.prompt}))
    except CallableError as exc:
        print(f"Generation failed [{exc.code.value}]: {exc.message}")
        return 1

    print("Generated result:")
    print(response.model_dump_json(by_alias=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
