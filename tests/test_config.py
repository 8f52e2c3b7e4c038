# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from site_mirror.config import DEFAULT_SEED_URL, MirrorConfig, load_config
from site_mirror.extractor import HtmlMatch
from site_mirror.writer import CollisionPolicy


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("seed_url: http://example.com\nmax_requests: 10", ".yaml", None),
        (json.dumps({"seed_url": "http://example.com", "max_requests": 10}), ".json", None),
        ("seed_url: example.com", ".yaml", ValidationError),
        ("max_requests: 0", ".yaml", ValidationError),
        ("unknown_key: 1", ".yaml", ValidationError),
        ("not: a: mapping", ".yaml", ValueError),
        ("- just\n- a list", ".yaml", TypeError),
        ("{broken", ".json", ValueError),
        ("seed_url = 1", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, MirrorConfig)
        assert cfg.seed_url == "http://example.com/"
        assert cfg.max_requests == 10


def test_defaults():
    cfg = load_config()
    assert cfg.seed_url == DEFAULT_SEED_URL + "/"
    assert cfg.max_requests == 500
    assert cfg.html_match is HtmlMatch.LOOSE
    assert cfg.on_collision is CollisionPolicy.OVERWRITE
    assert cfg.output_dir == Path("output")


def test_overrides_win_and_none_is_ignored(tmp_path):
    cfg_path = write_file(tmp_path, "seed_url: https://a.com\nconcurrency: 3", ".yaml")
    cfg = load_config(cfg_path, seed_url="https://b.com/x", concurrency=None, html_match="strict")
    assert cfg.seed_url == "https://b.com/x"
    assert cfg.concurrency == 3
    assert cfg.html_match is HtmlMatch.STRICT


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_config_is_frozen():
    cfg = MirrorConfig()
    with pytest.raises(ValidationError):
        cfg.max_requests = 1
