"""Download local snapshots of both NYC Open Data sources used by the analysis.

Writes:
  - datasets/nypd_shooting_incidents.csv   : NYPD Shooting Incident Data (Historic)
  - datasets/nyc_population_by_borough.csv : NYC Population by Borough, 1950-2040

Point SHOOTINGS_SOURCE at the first file to run the analysis offline.

Usage:
  python scripts/download_sources.py                  # both files
  python scripts/download_sources.py shootings        # incidents only
  python scripts/download_sources.py population --force
"""

import argparse
import logging
import sys
from pathlib import Path

import httpx
from tqdm import tqdm

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "analysis"))

from config import (  # noqa: E402
    DATASETS_DIR, HTTP_TIMEOUT, POPULATION_SOURCE, POPULATION_SOURCE_URL, SHOOTINGS_SOURCE,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("shootings.download")

SHOOTINGS_URL = SHOOTINGS_SOURCE if SHOOTINGS_SOURCE.startswith("http") else \
    "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv?accessType=DOWNLOAD"

TARGETS = {
    "shootings": (SHOOTINGS_URL, DATASETS_DIR / "nypd_shooting_incidents.csv"),
    "population": (POPULATION_SOURCE_URL, Path(POPULATION_SOURCE)),
}


def download(client: httpx.Client, url: str, dest: Path, force: bool = False) -> int:
    """Stream ``url`` to ``dest``. Returns bytes written (0 if skipped)."""
    if dest.exists() and not force:
        logger.info(f"{dest.name} already exists; use --force to re-download")
        return 0

    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp = dest.with_suffix(dest.suffix + ".part")
    written = 0
    try:
        with client.stream("GET", url) as r:
            r.raise_for_status()
            total = int(r.headers.get("content-length", 0)) or None
            with open(tmp, "wb") as f, tqdm(total=total, unit="B", unit_scale=True, desc=dest.name) as bar:
                for chunk in r.iter_bytes():
                    f.write(chunk)
                    written += len(chunk)
                    bar.update(len(chunk))
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    tmp.replace(dest)
    logger.info(f"Saved {dest} ({written / 1024:.0f} KB)")
    return written


def main():
    parser = argparse.ArgumentParser(description="Download NYC Open Data snapshots for offline runs")
    parser.add_argument("which", nargs="*", help=f"Which sources: {', '.join(sorted(TARGETS))} (default: all)")
    parser.add_argument("--force", action="store_true", help="Overwrite existing files")
    args = parser.parse_args()
    unknown = [w for w in args.which if w not in TARGETS]
    if unknown:
        parser.error(f"unknown source(s): {', '.join(unknown)}")

    failed = 0
    with httpx.Client(timeout=HTTP_TIMEOUT, follow_redirects=True) as client:
        for name in args.which or sorted(TARGETS):
            url, dest = TARGETS[name]
            try:
                download(client, url, dest, force=args.force)
            except httpx.HTTPError as e:
                logger.error(f"{name}: download from {url} failed: {e}")
                failed += 1
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
