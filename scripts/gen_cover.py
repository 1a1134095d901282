"""Write a textured cover image just large enough for a payload of a given size."""

from __future__ import annotations

import click
import numpy as np

from stegano_dct.capacity import cover_side_for
from stegano_dct.config import EmbeddingPolicy
from stegano_dct.image_utils import LOSSLESS_EXTENSIONS, save_carrier


def textured_cover(side: int, channels: int = 3, seed: int = 42) -> np.ndarray:
    """Smooth per-channel gradient plus block-scale texture.

    Mid-frequency energy in every 8x8 block keeps the quantized coefficients
    from standing out against an otherwise flat background.
    """
    rng = np.random.default_rng(seed)
    y = np.linspace(0, 1, side, dtype=np.float32)[:, None]
    x = np.linspace(0, 1, side, dtype=np.float32)[None, :]
    planes = []
    for c in range(channels):
        tilt = 0.5 + 0.3 * np.cos(np.pi * (x + c / channels)) * (1 - y)
        texture = rng.normal(0.0, 0.08, size=(side, side)).astype(np.float32)
        planes.append(np.clip(tilt + texture, 0, 1))
    return (np.stack(planes, axis=2) * 255).round().astype(np.uint8)


@click.command()
@click.option("--payload-bytes", type=click.IntRange(min=1), required=True, help="Message size the cover must hold")
@click.option("--out", "out_path", default="cover.png", show_default=True, help="Output image (PNG/BMP/TIFF)")
@click.option("--ratio", type=float, default=0.3, show_default=True, help="Fraction of pixels allowed to carry payload")
@click.option("--seed", type=int, default=42, show_default=True, help="Texture seed")
def main(payload_bytes: int, out_path: str, ratio: float, seed: int):
    """Generate the smallest square cover that holds PAYLOAD_BYTES."""
    if not out_path.lower().endswith(LOSSLESS_EXTENSIONS):
        raise click.BadParameter(f"output must be lossless ({', '.join(LOSSLESS_EXTENSIONS)})", param_hint="--out")
    try:
        policy = EmbeddingPolicy(ratio=ratio)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--ratio")
    side = cover_side_for(payload_bytes, policy)
    save_carrier(out_path, textured_cover(side, policy.channels, seed))
    click.echo(f"Wrote {side}x{side} cover for {payload_bytes} bytes to: {out_path}")


if __name__ == "__main__":
    main()
