"""
End-to-end demo script to showcase an optimization run.

Creates sample images (including near-duplicates and a corrupt file), runs the
pipeline, and prints the resulting manifest and version history.
"""

import json
from pathlib import Path
from tempfile import TemporaryDirectory

from PIL import Image

from image_optimizer.core.pipeline import ImagePipeline
from image_optimizer.utils.config import PipelineConfig


def create_demo_images(demo_dir: Path) -> None:
    """
    Create sample images for demonstration.

    Args:
        demo_dir: Project root; images are written to its ``images`` folder
    """
    images_dir = demo_dir / "images"
    print(f"Creating demo images in: {images_dir}")

    photos_dir = images_dir / "photos"
    photos_dir.mkdir(parents=True)
    graphics_dir = images_dir / "graphics"
    graphics_dir.mkdir()

    # Large photo: resized to the 2048px bound and re-encoded as JPEG
    landscape = Image.new("RGB", (4000, 2250), color=(70, 130, 180))
    landscape.paste((240, 240, 240), (0, 0, 4000, 900))
    landscape.save(photos_dir / "landscape_4000x2250.jpg", "JPEG", quality=95)

    # Near-duplicate: same scene, smaller and more compressed
    landscape.resize((1280, 720)).save(
        photos_dir / "landscape_1280x720.jpg", "JPEG", quality=60
    )

    # Portrait saved as a large PNG: converted to JPEG
    portrait = Image.effect_noise((1200, 1600), 64).convert("RGB")
    portrait.save(photos_dir / "portrait.png")

    # Transparent sprite: kept as PNG
    sprite = Image.new("RGBA", (128, 128), color=(0, 0, 0, 0))
    sprite.paste((220, 20, 60, 255), (32, 32, 96, 96))
    sprite.save(graphics_dir / "sprite.png")

    # GIF: copied through untouched
    Image.new("P", (64, 64), color=3).save(graphics_dir / "badge.gif")

    # Corrupt file: recorded as an error, run continues
    (photos_dir / "broken.jpg").write_bytes(b"\xff\xd8\xff\xe0 not really a jpeg")

    print("✓ Created 6 files (1 near-duplicate pair, 1 corrupt)")


def main():
    """Run the demo."""
    print("=" * 70)
    print("IMAGE OPTIMIZER - END-TO-END DEMO")
    print("=" * 70)
    print()

    with TemporaryDirectory() as temp_dir:
        demo_dir = Path(temp_dir) / "demo"
        demo_dir.mkdir()

        # Step 1: Create demo images
        print("STEP 1: Creating demo images")
        print("-" * 70)
        create_demo_images(demo_dir)
        print()

        # Step 2: Run the pipeline
        print("STEP 2: Optimizing images")
        print("-" * 70)
        config = PipelineConfig()
        summary = ImagePipeline(config, demo_dir).run()
        print(f"✓ Run {summary.version}: {summary.items} items, {summary.errors} errors")
        print()

        # Step 3: Inspect the manifest
        print("STEP 3: Manifest")
        print("-" * 70)
        manifest = json.loads(summary.manifest_path.read_text(encoding="utf-8"))
        for item in manifest["items"]:
            if "error" in item:
                print(f"  ✗ {item['original']}: {item['error']}")
                continue
            print(
                f"  {item['original']} -> {item['processed']} "
                f"[{', '.join(item['operations'])}] "
                f"{item['originalSize']} -> {item['processedSize']} bytes"
            )
        print()

        for group in manifest["duplicates"]:
            print(f"  Duplicate group {group['id']}:")
            for path in group["files"]:
                print(f"    → {path}")
        print()

        # Step 4: Summary
        print("STEP 4: Summary")
        print("-" * 70)
        print("✓ Demo completed successfully!")
        print()
        print("In a real workflow, you would now:")
        print(f"  1. Review {config.duplicates_dir}/ and keep or remove files manually")
        print("  2. Run `image-optimizer verify` to check checksums")
        print("  3. Run `image-optimizer history` to list previous runs")
        print()
        print("=" * 70)


if __name__ == "__main__":
    main()
