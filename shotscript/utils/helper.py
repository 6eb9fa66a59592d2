import asyncio
import base64
import hashlib
from dataclasses import dataclass
from fractions import Fraction
from io import BytesIO
from typing import List, Optional, Sequence
from urllib.parse import urlsplit, urlunsplit
from PIL import Image
from loguru import logger


@dataclass
class CommandResult:
    """Outcome of an external tool invocation."""
    args: List[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def normalize_url(url: str) -> str:
    """Strip whitespace, lowercase scheme and host, drop the fragment."""
    parts = urlsplit(url.strip())
    return urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), parts.path, parts.query, "")
    )


def get_url_hash(url: str, hash_algorithm: str = "sha256", length: int = 16) -> str:
    """Deterministic cache key for a source URL."""
    hash_func = hashlib.new(hash_algorithm)
    hash_func.update(normalize_url(url).encode("utf-8"))
    return hash_func.hexdigest()[:length]


def url_host(url: str) -> str:
    host = urlsplit(normalize_url(url)).hostname
    return host or ""


async def run_command(args: Sequence[str]) -> CommandResult:
    """Run an external tool to completion and capture its output."""
    args = [str(a) for a in args]
    logger.debug(f"Running: {' '.join(args)}")
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        # Missing binary reads like any other tool failure to callers
        return CommandResult(args=args, returncode=127, stdout="", stderr=str(e))
    out, err = await process.communicate()
    result = CommandResult(
        args=args,
        returncode=process.returncode,
        stdout=out.decode(errors="replace"),
        stderr=err.decode(errors="replace"),
    )
    if not result.ok:
        logger.debug(f"--- {args[0]} stderr ---\n{result.stderr.strip()}")
    return result


def parse_frame_rate(value: Optional[str]) -> Optional[float]:
    """Evaluate an ffprobe ratio string such as '30000/1001' to a float."""
    if value in (None, "", "0/0"):
        return None
    try:
        return float(Fraction(str(value)))
    except (ValueError, ZeroDivisionError):
        return None


def encode_image_to_base64(image_path: str, max_edge: Optional[int] = None) -> str:
    """Load an image, shrink it so its longest edge is <= max_edge, return JPEG base64."""
    with Image.open(image_path) as image:
        image = image.convert("RGB")
        if max_edge and max(image.size) > max_edge:
            image.thumbnail((max_edge, max_edge))
        buffer = BytesIO()
        image.save(buffer, format="JPEG", quality=85)
    return base64.b64encode(buffer.getvalue()).decode("utf-8")
