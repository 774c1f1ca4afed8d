from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

import cv2

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from skintone_finder.config import SkinToneSettings  # noqa: E402
from skintone_finder.drawing import draw_samples  # noqa: E402
from skintone_finder.errors import SkinToneError  # noqa: E402
from skintone_finder.pipeline import SkinToneFinder  # noqa: E402


def main() -> int:
    ap = argparse.ArgumentParser(description="Estimate the skin tone of the face in a public image URL.")
    ap.add_argument("--url", required=True, help="Public URL of the input image")
    ap.add_argument("--key", default=None, help="Face API key (default: $FACE_API_KEY)")
    ap.add_argument("--endpoint", default=None, help="Face API endpoint (default: $FACE_API_ENDPOINT)")
    ap.add_argument("--scratch-dir", default=None, help="Where fetched images are stored")
    ap.add_argument("--circular-hue", action="store_true", help="Average hue on the color circle")
    ap.add_argument("--out", default=None, help="Write an annotated copy of the image here")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = SkinToneSettings.from_env(
        face_api_key=args.key,
        face_api_endpoint=args.endpoint,
        scratch_dir=args.scratch_dir,
        circular_hue=True if args.circular_hue else None,
    )
    if not settings.face_api_key:
        raise RuntimeError("No Face API key: pass --key or set FACE_API_KEY.")

    try:
        estimate = asyncio.run(SkinToneFinder(settings).estimate(args.url))
    except SkinToneError as e:
        print(f"failed at stage {e.stage.value if e.stage else '?'}: {e.message}", file=sys.stderr)
        return 1

    h, s, l = estimate.hsl
    print(f"hsl: ({h:.1f}, {s:.1f}, {l:.1f})")
    for name, p, rgb in zip(estimate.points.names(), estimate.points, estimate.rgb_samples):
        print(f"  {name}: point=({p.x:.1f}, {p.y:.1f}) rgb={rgb}")

    if args.out:
        frame = cv2.imread(str(estimate.image_path))
        if frame is None:
            raise RuntimeError(f"Could not read image: {estimate.image_path}")
        out = draw_samples(frame, estimate.points, estimate.rgb_samples, estimate.hsl)
        if not cv2.imwrite(args.out, out):
            raise RuntimeError(f"Could not write output image: {args.out}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
