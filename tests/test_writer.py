# File: tests/test_writer.py
import pytest

from site_mirror.classifier import Category
from site_mirror.errors import NonBinaryImagePayload, WriteError
from site_mirror.writer import ArtifactWriter, CollisionPolicy


def test_prepare_creates_layout_and_is_idempotent(output_dir):
    writer = ArtifactWriter(output_dir)
    writer.prepare()
    writer.prepare()
    for sub in ("js", "css", "img"):
        assert (output_dir / sub).is_dir()


def test_unknown_category_has_no_directory(output_dir):
    with pytest.raises(ValueError):
        ArtifactWriter(output_dir).directory(Category.UNKNOWN)


@pytest.mark.asyncio()
async def test_persist_into_category_directories(output_dir):
    writer = ArtifactWriter(output_dir)
    writer.prepare()
    page = await writer.persist(Category.HTML, "index.html", b"<html></html>")
    script = await writer.persist(Category.SCRIPT, "app.js", "console.log('ü')")
    image = await writer.persist(Category.IMAGE, "logo.png", b"\x89PNG")

    assert page == output_dir / "index.html"
    assert script.read_text(encoding="utf-8") == "console.log('ü')"
    assert image == output_dir / "img" / "logo.png"
    assert image.read_bytes() == b"\x89PNG"


@pytest.mark.asyncio()
async def test_non_binary_image_is_refused(output_dir):
    writer = ArtifactWriter(output_dir)
    writer.prepare()
    with pytest.raises(NonBinaryImagePayload):
        await writer.persist(Category.IMAGE, "logo.png", "\x89PNG", url="https://ex.com/logo.png")
    assert not (output_dir / "img" / "logo.png").exists()


@pytest.mark.asyncio()
async def test_write_error_wraps_os_error(output_dir):
    writer = ArtifactWriter(output_dir)
    # directories never prepared
    with pytest.raises(WriteError):
        await writer.persist(Category.STYLESHEET, "site.css", b"body{}")


@pytest.mark.asyncio()
async def test_overwrite_policy_last_writer_wins(output_dir):
    writer = ArtifactWriter(output_dir, CollisionPolicy.OVERWRITE)
    writer.prepare()
    await writer.persist(Category.IMAGE, "logo.png", b"a", url="https://ex.com/a/logo.png")
    path = await writer.persist(Category.IMAGE, "logo.png", b"b", url="https://ex.com/b/logo.png")
    assert path.name == "logo.png"
    assert path.read_bytes() == b"b"


@pytest.mark.asyncio()
async def test_suffix_policy_keeps_both(output_dir):
    writer = ArtifactWriter(output_dir, CollisionPolicy.SUFFIX)
    writer.prepare()
    first = await writer.persist(Category.IMAGE, "logo.png", b"a", url="https://ex.com/a/logo.png")
    second = await writer.persist(Category.IMAGE, "logo.png", b"b", url="https://ex.com/b/logo.png")
    third = await writer.persist(Category.IMAGE, "logo.png", b"c", url="https://ex.com/c/logo.png")
    again = await writer.persist(Category.IMAGE, "logo.png", b"a2", url="https://ex.com/a/logo.png")

    assert [p.name for p in (first, second, third)] == ["logo.png", "logo-1.png", "logo-2.png"]
    assert again == first
    assert first.read_bytes() == b"a2"
    assert second.read_bytes() == b"b"
