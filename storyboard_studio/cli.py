#!/usr/bin/env python3
"""
CLI: Generate Storyboard
========================

Command-line tool that renders every panel of a storyboard file.

Usage:
    storyboard-studio story.yaml
    storyboard-studio story.yaml -o panels --style noir --aspect-ratio 4:3

Storyboard file format:
    style: watercolor          # optional
    aspect_ratio: "16:9"       # optional
    characters:
      - name: Ada
        description: tall woman in a red coat
        reference_image: refs/ada.png   # optional, relative to this file
    scenes:
      - text: Ada enters a dimly lit room
        characters: [Ada]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, List, Dict, Any, Tuple

import yaml

from .api import get_client_from_config, list_clients
from .core.config import Config
from .core.exceptions import ResourceNotFoundError, StoryboardError, ValidationError
from .project.character import ReferenceImage
from .project.store import ProjectStore
from .project.style import GenerationSettings, list_art_styles, list_aspect_ratios
from .utils.image_utils import save_data_url
from .workflow.orchestrator import SceneOrchestrator
from .workflow.validator import validate_character, validate_reference_image, validate_scene_text

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="storyboard-studio",
        description="Generate storyboard panels with AI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s story.yaml
  %(prog)s story.yaml -o panels --style noir
  %(prog)s --list-styles
        """,
    )

    parser.add_argument(
        "storyboard",
        nargs="?",
        help="Storyboard YAML file",
    )
    parser.add_argument(
        "-o", "--output",
        default="./output",
        help="Directory for rendered panels (default: ./output)",
    )
    parser.add_argument(
        "--style",
        help="Art style key (overrides the storyboard file and config)",
    )
    parser.add_argument(
        "--aspect-ratio",
        help="Aspect ratio, e.g. 16:9 (overrides the storyboard file and config)",
    )
    parser.add_argument(
        "--provider",
        help="Generation backend (default: from config)",
    )
    parser.add_argument(
        "--config",
        help="Path to config file",
    )
    parser.add_argument(
        "--list-styles",
        action="store_true",
        help="List art styles and aspect ratios, then exit",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def load_storyboard(
    path: Path,
    store: ProjectStore,
) -> Dict[str, Any]:
    """
    Read a storyboard file into ``store``.

    Character references in scenes are by name. Reference image paths are
    resolved relative to the storyboard file.

    Returns:
        The file's optional settings (``style``, ``aspect_ratio``)

    Raises:
        ValidationError: Malformed entries, blank names, descriptions or scene text, bad images
        ResourceNotFoundError: A scene names an undefined character
    """
    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValidationError(f"Invalid YAML in storyboard file: {e}", field=str(path))

    if not isinstance(data, dict):
        raise ValidationError("Storyboard file must be a mapping", field=str(path))

    by_name: Dict[str, str] = {}

    for entry in data.get("characters") or []:
        _require_mapping(entry, "characters")
        name, description = validate_character(entry.get("name"), entry.get("description"))

        reference_image = None
        if entry.get("reference_image"):
            image_path = path.parent / entry["reference_image"]
            try:
                reference_image = ReferenceImage.from_file(image_path)
            except FileNotFoundError:
                raise ResourceNotFoundError(
                    f"Reference image not found for {name}: {image_path}",
                    resource_type="reference_image",
                    resource_id=str(image_path),
                )
            validate_reference_image(reference_image)

        character = store.add_character(name, description, reference_image)
        by_name[name] = character.id

    for entry in data.get("scenes") or []:
        _require_mapping(entry, "scenes")
        text = validate_scene_text(entry.get("text"))
        character_ids = []
        for name in entry.get("characters") or []:
            if name not in by_name:
                raise ResourceNotFoundError(
                    f"Scene references unknown character: {name}",
                    resource_type="character",
                    resource_id=name,
                )
            character_ids.append(by_name[name])
        store.add_scene(text, character_ids)

    return {
        key: data[key] for key in ("style", "aspect_ratio") if data.get(key)
    }


def _require_mapping(entry: Any, section: str) -> None:
    if not isinstance(entry, dict):
        raise ValidationError(
            f"Each entry under '{section}' must be a mapping, got: {entry!r}",
            field=section,
            value=entry,
        )


def resolve_settings(
    config: Config,
    file_settings: Dict[str, Any],
    args: argparse.Namespace,
) -> GenerationSettings:
    """Command line beats the storyboard file, which beats the config."""
    return GenerationSettings(
        art_style=args.style or file_settings.get("style") or config.defaults.art_style,
        aspect_ratio=args.aspect_ratio or file_settings.get("aspect_ratio") or config.defaults.aspect_ratio,
    )


def write_results(store: ProjectStore, output_dir: Path) -> Tuple[int, int]:
    """
    Save rendered panels and a summary file.

    Returns:
        (rendered, failed) panel counts
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    summary = []
    rendered = failed = 0

    for scene in store.scenes:
        entry = {
            "panel": scene.panel_number,
            "text": scene.user_text,
            "final_prompt": scene.final_prompt,
        }
        if scene.image_url:
            image_path = save_data_url(scene.image_url, output_dir / f"panel_{scene.panel_number:02d}")
            entry["image"] = image_path.name
            rendered += 1
        if scene.error:
            entry["error"] = scene.error
            failed += 1
        summary.append(entry)

    with open(output_dir / "storyboard.yaml", "w") as f:
        yaml.safe_dump({"panels": summary}, f, sort_keys=False, allow_unicode=True)

    return rendered, failed


async def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_styles:
        print("Art styles:")
        for style in list_art_styles():
            print(f"  {style['key']:<16} {style['label']}")
        print("Aspect ratios:")
        for ratio in list_aspect_ratios():
            print(f"  {ratio['key']:<16} {ratio['label']}")
        return 0

    if not args.storyboard:
        print("Error: a storyboard file is required")
        return 1

    try:
        config = Config.load(args.config)
        if args.provider:
            if args.provider.lower() not in list_clients():
                print(f"Error: unknown provider {args.provider}")
                return 1
            config.provider.name = args.provider.lower()

        store = ProjectStore()
        file_settings = load_storyboard(Path(args.storyboard), store)
        settings = resolve_settings(config, file_settings, args)
    except StoryboardError as e:
        print(f"Error: {e.message}")
        return 1
    except OSError as e:
        print(f"Error: {e}")
        return 1

    client = get_client_from_config(config)
    if not client.is_available():
        print(f"Error: {client.env_key_name} environment variable not set")
        return 1

    print("=" * 50)
    print("Storyboard Studio")
    print("=" * 50)
    print(f"Panels: {len(store.scenes)}")
    print(f"Style: {settings.art_style.label}")
    print(f"Aspect ratio: {settings.aspect_ratio.label}")

    orchestrator = SceneOrchestrator(store, client, settings, config.generation)

    try:
        async with client:
            report = await orchestrator.generate_all_pending()
    except KeyboardInterrupt:
        print("\nCancelled")
        return 130

    rendered, failed = write_results(store, Path(args.output))

    print("\n" + "-" * 50)
    print(report.message)
    for scene in store.scenes:
        if scene.error:
            print(f"Panel {scene.panel_number}: {scene.error}")
    print(f"Output: {Path(args.output)}")
    print("=" * 50)

    return 0 if failed == 0 and rendered == len(store.scenes) else 1


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
