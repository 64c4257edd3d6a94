"""Command line interface for img2ans."""

from __future__ import annotations

import argparse
import sys
import warnings
from pathlib import Path
from typing import Iterable, List

from .ansi import AnsiOptions, convert_blocks_to_ans
from .cga import CGA_PALETTE
from .converter import (
    ConvertOptions,
    convert_blocks_to_image,
    convert_path,
    parse_color,
)
from .errors import ConversionError
from .fonts import get_font

IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tif", ".tiff"}


def iter_images(paths: Iterable[str]) -> List[Path]:
    results: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_file():
            results.append(path)
        elif path.is_dir():
            for entry in sorted(path.iterdir()):
                if entry.is_file() and entry.suffix.lower() in IMAGE_SUFFIXES:
                    results.append(entry)
        else:
            raise ConversionError(f"Input path does not exist: {path}")
    if not results:
        raise ConversionError("No image files were found in the provided inputs.")
    return results


def _columns(text: str) -> int:
    try:
        value = int(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid column count: {text}") from exc
    if not 1 <= value <= 65535:
        raise argparse.ArgumentTypeError("columns must be between 1 and 65535")
    return value


def build_parser() -> argparse.ArgumentParser:
    palette_text = ", ".join(f"{idx}: {rgb}" for idx, rgb in enumerate(CGA_PALETTE))

    parser = argparse.ArgumentParser(
        description=(
            "Convert images into CP437 ANSI art (.ans) with a SAUCE record.\n"
            "Each character cell is reduced to two colors and drawn with the closest glyph of the "
            "IBM VGA font (8x16, or 8x8 with --vga50).\n"
            "Colors are written as 24-bit escapes by default; --cga maps them to the 16 CGA colors "
            "in the Oklab color space.\n"
            f"CGA palette: {palette_text}"
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "inputs",
        nargs="+",
        help="Image files or folders containing images (non-recursive)",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        required=True,
        help="Destination directory for .ans files",
    )
    parser.add_argument("--prefix", default="", help="Optional prefix for output filenames")
    parser.add_argument("--suffix", default="", help="Optional suffix for output filenames")
    parser.add_argument(
        "--columns",
        type=_columns,
        default=80,
        help="Number of character columns (1 to 65535)",
    )
    parser.add_argument("--vga50", action="store_true", help="Use the 8x8 font (defaults to 8x16)")
    parser.add_argument(
        "--restrict",
        action="store_true",
        help="Only use block and shade glyphs (space, 176-178, 219-223)",
    )
    parser.add_argument(
        "--corrected-match",
        action="store_true",
        help="Keep the inverse score when an inverted glyph wins (output differs from the classic matcher)",
    )
    parser.add_argument(
        "--cga",
        action="store_true",
        help="Write 16-color CGA escapes instead of 24-bit colors",
    )
    parser.add_argument(
        "--modern-sgr",
        action="store_true",
        help="Write 24-bit colors as ESC[38;2;R;G;Bm / ESC[48;2;R;G;Bm instead of ESC[...t",
    )
    parser.add_argument(
        "--image",
        action="store_true",
        help="Also write a PNG rendering of the result (<name>.ans.png)",
    )
    parser.add_argument(
        "--background",
        help="Composite transparent pixels onto this color (e.g., 0,0,0 or #000000)",
    )
    parser.add_argument("--gamma", type=float, help="Optional gamma curve applied before conversion")
    parser.add_argument("--contrast", type=float, help="Optional contrast multiplier applied before conversion")
    parser.add_argument(
        "--hue-shift",
        type=float,
        help="Shift source hue in degrees (-180 to 180) before conversion",
    )
    parser.add_argument("--title", default="", help="SAUCE title (35 characters)")
    parser.add_argument("--author", default="", help="SAUCE author (20 characters)")
    parser.add_argument("--group", default="", help="SAUCE group (20 characters)")
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Overwrite existing files without prompting",
    )

    return parser


def ensure_unique_names(paths: List[Path], prefix: str, suffix: str, extension: str) -> List[str]:
    names: List[str] = []
    seen = set()
    for path in paths:
        name = f"{prefix}{path.stem}{suffix}.{extension}"
        if name in seen:
            raise ConversionError(f"Duplicate output name would occur: {name}")
        seen.add(name)
        names.append(name)
    return names


def write_outputs(
    inputs: List[Path],
    names: List[str],
    options: ConvertOptions,
    ansi_options: AnsiOptions,
    output_dir: Path,
    force: bool,
    write_image: bool,
) -> None:
    targets = [output_dir / name for name in names]
    if write_image:
        targets += [output_dir / f"{name}.png" for name in names]
    conflicts = [str(target) for target in targets if target.exists() and not force]
    if conflicts:
        raise ConversionError(
            "Output files already exist (use --force to overwrite):\n" + "\n".join(conflicts)
        )

    output_dir.mkdir(parents=True, exist_ok=True)
    font = get_font(options.font)

    for src, name in zip(inputs, names):
        blocks = convert_path(src, options)
        target = output_dir / name
        try:
            target.write_bytes(convert_blocks_to_ans(blocks, font, options.columns, ansi_options))
        except OSError as exc:
            raise ConversionError(f"Failed to write {target}: {exc}") from exc
        print(f"wrote {target}")

        if write_image:
            image_target = output_dir / f"{name}.png"
            try:
                convert_blocks_to_image(blocks, font, options.columns).save(image_target)
            except OSError as exc:
                raise ConversionError(f"Failed to write {image_target}: {exc}") from exc
            print(f"wrote {image_target}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = ConvertOptions()
        options.columns = args.columns
        options.font = "vga50" if args.vga50 else "vga"
        options.restrict = args.restrict
        options.corrected_match = args.corrected_match
        if args.background is not None:
            options.background_color = parse_color(args.background)
        options.gamma = args.gamma
        options.contrast = args.contrast
        options.hue_shift = args.hue_shift

        ansi_options = AnsiOptions(
            truecolor=not args.cga,
            modern_sgr=args.modern_sgr,
            title=args.title,
            author=args.author,
            group=args.group,
        )

        inputs = iter_images(args.inputs)
        output_dir = Path(args.output_dir)
        names = ensure_unique_names(inputs, args.prefix, args.suffix, "ans")
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            write_outputs(
                inputs, names, options, ansi_options, output_dir, args.force, args.image
            )
        for warning in caught:
            print(f"Warning: {warning.message}")
        return 0
    except ConversionError as exc:
        print(exc, file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
