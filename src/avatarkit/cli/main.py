"""avatarkit CLI -- render avatars from the command line.

Thin wrapper around :class:`~avatarkit.render.AvatarRenderer` using click.
Rendered media metadata is printed as JSON; ``--output`` copies the stored
blob to a file.
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

import click
from PIL import Image

from avatarkit.config import RenderConfig
from avatarkit.model import AvatarError, ColorPair, Media, PhotoAvatar, TextAvatar
from avatarkit.render import AvatarRenderer, create_text_drawable, get_typeface


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error(msg: str) -> None:
    """Print an error message to stderr and exit 1."""
    click.echo(msg, err=True)
    raise SystemExit(1)


def _config(ctx: click.Context) -> RenderConfig:
    return RenderConfig(dimensions=ctx.obj.get("size"))


def _renderer(ctx: click.Context) -> AvatarRenderer:
    """Renderer for one CLI run; blobs from earlier runs are discarded."""
    renderer = AvatarRenderer(_config(ctx))
    renderer.blob_store.on_session_start()
    return renderer


def _emit(renderer: AvatarRenderer, media: Media, output: Path | None) -> None:
    if output is not None:
        with renderer.blob_store.open(media.handle) as src, open(output, "wb") as dst:
            shutil.copyfileobj(src, dst)
    click.echo(json.dumps(media.to_dict(), indent=2))


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="avatarkit")
@click.option("--size", "-s", type=int, default=None, help="Avatar edge length in pixels.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, size: int | None, verbose: bool) -> None:
    """avatarkit -- render avatar descriptions into JPEG media."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if verbose:
        logging.getLogger("avatarkit").setLevel(logging.DEBUG)
    ctx.ensure_object(dict)
    ctx.obj["size"] = size


# ---------------------------------------------------------------------------
# avatarkit text
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("text")
@click.option("--foreground", "-f", default="#000000", show_default=True, help="Text color.")
@click.option("--background", "-b", default="#ffffff", show_default=True, help="Background color.")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.pass_context
def text(ctx: click.Context, text: str, foreground: str, background: str, output: Path | None) -> None:
    """Render TEXT (e.g. initials) as an avatar."""
    try:
        avatar = TextAvatar(text, ColorPair(foreground, background))
        with _renderer(ctx) as renderer:
            media = renderer.submit(avatar).result()
            _emit(renderer, media, output)
    except (AvatarError, OSError, ValueError) as exc:
        _error(f"Error: {exc}")


# ---------------------------------------------------------------------------
# avatarkit photo
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.pass_context
def photo(ctx: click.Context, path: Path, output: Path | None) -> None:
    """Import the photo at PATH and store it as an avatar."""
    try:
        with _renderer(ctx) as renderer:
            data = path.read_bytes()
            uri = renderer.picker_storage.save(data)
            media = renderer.submit(PhotoAvatar(uri, len(data))).result()
            _emit(renderer, media, output)
    except (AvatarError, OSError, ValueError) as exc:
        _error(f"Error: {exc}")


# ---------------------------------------------------------------------------
# avatarkit badge
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("text")
@click.option("--foreground", "-f", default="#000000", show_default=True, help="Text color.")
@click.option("--background", "-b", default="#ffffff", show_default=True, help="Background color.")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), required=True)
@click.option("--round", "round_shape", is_flag=True, help="Round badge instead of a square one.")
@click.option("--inverted", is_flag=True, help="Draw the text in the background color.")
@click.pass_context
def badge(
    ctx: click.Context,
    text: str,
    foreground: str,
    background: str,
    output: Path,
    round_shape: bool,
    inverted: bool,
) -> None:
    """Draw TEXT as a transparent PNG text badge."""
    try:
        config = _config(ctx)
        avatar = TextAvatar(text, ColorPair(foreground, background))
        drawable = create_text_drawable(
            avatar,
            inverted=inverted,
            size=config.dimensions,
            is_rect=not round_shape,
            typeface=get_typeface(config.font_path),
        )
        with Image.new("RGBA", (config.dimensions, config.dimensions), (0, 0, 0, 0)) as canvas:
            drawable.draw(canvas)
            canvas.save(output, format="PNG")
        click.echo(f"Badge written to {output} (font size {drawable.font_size}px)")
    except (AvatarError, OSError, ValueError) as exc:
        _error(f"Error: {exc}")
