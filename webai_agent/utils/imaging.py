import base64
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from PIL import Image


def image_to_data_url(path: Union[str, Path], max_size: Optional[int] = None) -> str:
    """Return the image as a data URL, optionally downscaled to reduce token usage."""
    path = Path(path)
    if max_size is None:
        b64 = base64.b64encode(path.read_bytes()).decode("utf-8")
        return f"data:image/png;base64,{b64}"

    img = Image.open(path).convert("RGB")
    w, h = img.size
    if max(w, h) > max_size:
        scale = max_size / max(w, h)
        img = img.resize((int(w * scale), int(h * scale)), Image.LANCZOS)

    buf = BytesIO()
    img.save(buf, format="JPEG", quality=75)
    b64 = base64.b64encode(buf.getvalue()).decode("utf-8")
    return f"data:image/jpeg;base64,{b64}"


def screenshot_path(run_dir: Union[str, Path], step: int) -> Path:
    return Path(run_dir) / f"step_{step:02d}.png"
