#!/usr/bin/env python3
"""
Command-line front end for the image editor.

Usage:
    ai-image-editor --image photo.jpg --instructions "make the sky purple"
    ai-image-editor --api-key AIza... --image photo.png --instructions "remove the car" --output-dir edits/
    ai-image-editor --forget-key
"""

import argparse
import asyncio
import sys
import time
from pathlib import Path
from typing import List, Optional

from core.data_url import InvalidDataURL, parse_data_url
from core.logging_config import setup_logging
from editor.controller import EditController, Notification
from editor.credentials import CredentialStore
from editor.files import FileHandle, extension_for
from editor.transport import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, EditApiClient

ICONS = {"success": "✅", "error": "❌", "info": "ℹ️"}


def print_notification(notification: Notification) -> None:
    stream = sys.stderr if notification.level == "error" else sys.stdout
    print(f"{ICONS.get(notification.level, '')} {notification.message}", file=stream)


def save_images(images: List[str], output_dir: Path) -> List[Path]:
    """Write returned data URLs as ai-edited-image-<timestamp>-<n>.<ext>"""
    output_dir.mkdir(parents=True, exist_ok=True)
    stamp = int(time.time() * 1000)
    saved = []
    for index, data_url in enumerate(images, start=1):
        try:
            image = parse_data_url(data_url)
        except InvalidDataURL as e:
            print(f"⚠️ Skipping unreadable image {index}: {e}", file=sys.stderr)
            continue
        path = output_dir / f"ai-edited-image-{stamp}-{index}.{extension_for(image.mime_type)}"
        path.write_bytes(image.data)
        saved.append(path)
    return saved


async def run(args: argparse.Namespace) -> int:
    store = CredentialStore(args.storage) if args.storage else CredentialStore()

    if args.forget_key:
        store.clear()
        print("🔑 Stored API key removed")
        return 0

    api = EditApiClient(base_url=args.server, timeout=args.timeout)
    controller = EditController(api, store, on_notify=print_notification)

    if args.api_key and not controller.save_credential(args.api_key):
        return 2
    if controller.needs_credential:
        print("❌ No API key stored. Get one at https://aistudio.google.com/app/apikey and pass --api-key.",
              file=sys.stderr)
        return 2

    if not args.image or not args.instructions:
        print("❌ --image and --instructions are required", file=sys.stderr)
        return 2

    if not await controller.select_image(FileHandle.from_path(args.image)):
        return 1

    controller.set_instructions(args.instructions)
    entry = await controller.submit()
    if entry is None:
        return 1

    if entry.result_text:
        print(f"\n🤖 {entry.result_text}\n")
    for path in save_images(entry.result_images, Path(args.output_dir)):
        print(f"💾 Saved {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Edit an image with Gemini through the image editor API")
    parser.add_argument("--image", help="Path of the image to edit")
    parser.add_argument("--instructions", help="What to change in the image")
    parser.add_argument("--api-key", help="Gemini API key (stored for later runs)")
    parser.add_argument("--forget-key", action="store_true", help="Remove the stored API key and exit")
    parser.add_argument("--server", default=DEFAULT_BASE_URL, help=f"API server URL (default: {DEFAULT_BASE_URL})")
    parser.add_argument("--output-dir", default=".", help="Where edited images are saved")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Request timeout in seconds")
    parser.add_argument("--storage", help="Path of the credential store file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests and responses")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("INFO" if args.verbose else "WARNING")
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
