import importlib.util
import re
from pathlib import Path

SETUP_PY = Path(__file__).resolve().parents[1] / "setup.py"


def test_console_script_targets_module_inside_package():
    match = re.search(r'"facedome-track=([\w.]+):(\w+)"', SETUP_PY.read_text(encoding="utf-8"))
    assert match is not None

    module_name, func_name = match.groups()

    assert module_name.split(".")[0] == "facedome"
    spec = importlib.util.find_spec(module_name)
    assert spec is not None and spec.origin is not None
    assert re.search(rf"^def {func_name}\(", Path(spec.origin).read_text(encoding="utf-8"), re.M)
