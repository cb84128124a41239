"""Export generated site assets to disk or a zip archive."""

import io
import zipfile
from pathlib import Path

from .models import BusinessPlan, is_safe_relative_path


def write_site_bundle(plan: BusinessPlan, output_dir: Path) -> list[Path]:
    """
    Write every site asset under output_dir, creating directories as needed.

    Returns:
        Paths of the written files, in plan order

    Raises:
        ValueError: an asset path would land outside output_dir
    """
    root = Path(output_dir).resolve()
    written: list[Path] = []

    for asset in plan.site_assets:
        target = (root / asset.path).resolve()
        if not is_safe_relative_path(asset.path) or not target.is_relative_to(root):
            raise ValueError(f"Refusing to write asset outside bundle root: {asset.path}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(asset.content, encoding="utf-8")
        written.append(target)

    return written


def build_bundle_zip(plan: BusinessPlan) -> bytes:
    """Zip archive of the site assets, plus blueprint.json at the archive root."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for asset in plan.site_assets:
            if not is_safe_relative_path(asset.path):
                raise ValueError(f"Refusing to archive unsafe asset path: {asset.path}")
            zf.writestr(asset.path, asset.content)
        zf.writestr("blueprint.json", plan.to_json())
    return buf.getvalue()


def write_plan_json(plan: BusinessPlan, output_path: Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(plan.to_json(), encoding="utf-8")
    return output_path
