from __future__ import annotations

import logging

import click

from .config import EmbeddingPolicy
from .crypto import Argon2KeySource, RawPasswordKey
from .engine import embed, embeddable_bytes, extract
from .image_utils import LOSSLESS_EXTENSIONS, load_carrier, save_carrier


def _key_source(fast_kdf: bool):
    return RawPasswordKey() if fast_kdf else Argon2KeySource()


def _policy(ratio: float, step: float = 8.0) -> EmbeddingPolicy:
    try:
        return EmbeddingPolicy(ratio=ratio, step=step)
    except ValueError as e:
        raise click.BadParameter(str(e))


def _check_lossless(ctx, param, value: str) -> str:
    if not value.lower().endswith(LOSSLESS_EXTENSIONS):
        raise click.BadParameter(f"output must be lossless ({', '.join(LOSSLESS_EXTENSIONS)})")
    return value


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Stegano-DCT CLI: hide/extract password-keyed messages in DCT coefficients."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@click.option("--in", "in_path", required=True, help="Input cover image")
@click.option("--out", "out_path", required=True, callback=_check_lossless, help="Output stego image (PNG/BMP/TIFF)")
@click.option("--message", "message_path", required=True, help="File containing the secret message")
@click.option("--password", default="", help="Password keying the payload cipher")
@click.option("--ratio", type=float, default=0.3, show_default=True, help="Fraction of pixels allowed to carry payload")
@click.option("--step", type=float, default=8.0, show_default=True, help="Coefficient quantization step")
@click.option("--fast-kdf", is_flag=True, help="Use the raw password as keystream instead of Argon2id")
def hide(in_path: str, out_path: str, message_path: str, password: str, ratio: float, step: float, fast_kdf: bool):
    """Cipher and hide a message inside an image."""
    with open(message_path, "rb") as f:
        plaintext = f.read()
    policy = _policy(ratio, step)
    carrier = load_carrier(in_path)
    result = embed(carrier, plaintext, password, policy=policy, key_source=_key_source(fast_kdf))
    if not result.success:
        raise click.ClickException(f"{result.error_kind.value}: {result.detail}")
    save_carrier(out_path, result.carrier)
    click.echo(f"Embedded {result.byte_length} bytes; stego image saved to: {out_path}")


@cli.command("extract")
@click.option("--in", "in_path", required=True, help="Input stego image")
@click.option("--out", "out_path", required=True, help="Output recovered message file")
@click.option("--password", default="", help="Password used during embedding")
@click.option("--ratio", type=float, default=0.3, show_default=True, help="Ratio used during embedding")
@click.option("--step", type=float, default=8.0, show_default=True, help="Step used during embedding")
@click.option("--fast-kdf", is_flag=True, help="Use the raw password as keystream instead of Argon2id")
def extract_cmd(in_path: str, out_path: str, password: str, ratio: float, step: float, fast_kdf: bool):
    """Extract and decipher a hidden message from an image."""
    policy = _policy(ratio, step)
    carrier = load_carrier(in_path)
    result = extract(carrier, password, policy=policy, key_source=_key_source(fast_kdf))
    if not result.success:
        raise click.ClickException(f"{result.error_kind.value}: {result.detail}")
    with open(out_path, "wb") as f:
        f.write(result.payload)
    click.echo(f"Recovered {len(result.payload)} bytes to: {out_path}")


@cli.command()
@click.option("--in", "in_path", required=True, help="Cover image")
@click.option("--ratio", type=float, default=0.3, show_default=True, help="Fraction of pixels allowed to carry payload")
def capacity(in_path: str, ratio: float):
    """Print the largest message (in bytes) the image can hold."""
    carrier = load_carrier(in_path)
    click.echo(embeddable_bytes(carrier, _policy(ratio)))


if __name__ == "__main__":
    cli()
