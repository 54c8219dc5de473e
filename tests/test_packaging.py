import tomllib
from pathlib import Path

from storage import MAX_FILE_BYTES


ROOT = Path(__file__).resolve().parent.parent


def test_streamlit_upload_limit_allows_two_gib_files():
    config = tomllib.loads((ROOT / ".streamlit" / "config.toml").read_text(encoding="utf-8"))
    assert config["server"]["maxUploadSize"] * 1024 * 1024 >= MAX_FILE_BYTES


def test_streamlit_floor_supports_stretch_image_width():
    project = tomllib.loads((ROOT / "pyproject.toml").read_text(encoding="utf-8"))["project"]
    [requirement] = [dep for dep in project["dependencies"] if dep.startswith("streamlit")]
    floor = tuple(int(part) for part in requirement.split(">=", 1)[1].split("."))
    assert floor >= (1, 50)
