"""
Write the bulk upload templates to disk.

Usage:
    python scripts/generate_excel_template.py
    python scripts/generate_excel_template.py --variant legacy --out demo-templates
"""

import argparse
import sys
from pathlib import Path

# Add backend to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from services.bulk_upload_service import (
    TEMPLATE_VARIANTS,
    generate_csv_template,
    generate_excel_template,
)

TEMPLATE_NAME = "guest-blog-sites-template"


def main():
    parser = argparse.ArgumentParser(description="Generate bulk upload templates")
    parser.add_argument(
        "--variant",
        choices=sorted(TEMPLATE_VARIANTS),
        default="current",
        help="Header layout (default: current)"
    )
    parser.add_argument(
        "--out",
        default="demo-templates",
        help="Output directory (default: demo-templates)"
    )
    args = parser.parse_args()

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    excel_path = out_dir / f"{TEMPLATE_NAME}.xlsx"
    excel_path.write_bytes(generate_excel_template(args.variant))
    print(f"Excel template: {excel_path}")

    csv_path = out_dir / f"{TEMPLATE_NAME}.csv"
    csv_path.write_text(generate_csv_template(args.variant), encoding="utf-8")
    print(f"CSV template:   {csv_path}")


if __name__ == "__main__":
    main()
