import json
import textwrap
from pathlib import Path

import pytest

from rnamotif.config import FoldConfig, MotifConfig, load_config


def test_defaults() -> None:
    cfg = MotifConfig()
    assert cfg.constrain is False
    assert cfg.max_length == 1000
    assert cfg.header_keys == ("AC", "ID")
    assert cfg.fold == FoldConfig()


def test_load_yaml(tmp_path: Path) -> None:
    path = tmp_path / "motif.yaml"
    path.write_text(
        textwrap.dedent(
            """\
            constrain: true
            workers: 4
            header_keys: [ID]
            fold:
              pseudoknot: true
              ipknot_exe: /usr/local/bin/ipknot
              timeout: 30
            """
        )
    )
    cfg = load_config(path)
    assert cfg.constrain is True
    assert cfg.workers == 4
    assert cfg.header_keys == ("ID",)
    assert cfg.fold.pseudoknot is True
    assert cfg.fold.ipknot_exe == "/usr/local/bin/ipknot"
    assert cfg.fold.timeout == 30


def test_load_json(tmp_path: Path) -> None:
    path = tmp_path / "motif.json"
    path.write_text(json.dumps({"max_length": 500, "fold": {"temperature": 25.0}}))
    cfg = load_config(path)
    assert cfg.max_length == 500
    assert cfg.fold.temperature == 25.0
    assert cfg.fold.pseudoknot is False


def test_empty_yaml_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yml"
    path.write_text("")
    assert load_config(path) == MotifConfig()


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "text",
    [
        "verbosty: 2\n",
        "fold:\n  pseudoknots: true\n",
        "workers: 0\n",
        "max_length: -1\n",
        "- constrain\n",
        "constrain: [unclosed\n",
    ],
)
def test_invalid_config_raises(tmp_path: Path, text: str) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text(text)
    with pytest.raises(ValueError):
        load_config(path)
