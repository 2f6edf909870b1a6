"""Tests for attachment analysis."""

import pytest

from triage.adapters.nlp.attachment_analyzer import (
    analyze_attachments,
    extract_extension,
    mime_type_for,
    resolve_image_paths,
    split_attachments,
)


def test_split_on_all_separators():
    assert split_attachments("a.png; b.pdf|c.jpg\r\nd.txt\n\n") == ["a.png", "b.pdf", "c.jpg", "d.txt"]


@pytest.mark.parametrize("raw", [None, "", "   ", " ; | "])
def test_empty_descriptor(raw):
    insights = analyze_attachments(raw)
    assert not insights.has_attachments
    assert insights.attachment_count == 0
    assert insights.context_for_nlp == ""


def test_counts_images_by_extension_and_name():
    insights = analyze_attachments("photo.JPG; contract.pdf; скриншот_оплаты; notes.txt")
    assert insights.has_attachments
    assert insights.attachment_count == 4
    assert insights.image_attachment_count == 2
    assert insights.has_image_attachment


def test_context_hints():
    insights = analyze_attachments("error_screen.png; fraud_proof.pdf")
    assert insights.context_for_nlp == "app error screenshot fraud evidence"


def test_context_hints_in_russian():
    assert analyze_attachments("ошибка.png").context_for_nlp == "app error screenshot"
    assert analyze_attachments("мошенник.jpg").context_for_nlp == "fraud evidence"


@pytest.mark.parametrize("value,ext", [
    ("scan.PNG", ".png"),
    ("C:\\docs\\scan.jpeg", ".jpeg"),
    ("https://cdn.example.com/files/shot.webp?size=large", ".webp"),
    ("README", ""),
])
def test_extract_extension(value, ext):
    assert extract_extension(value) == ext


def test_resolve_image_paths_searches_dataset_dirs(tmp_path):
    (tmp_path / "datasets" / "attachments").mkdir(parents=True)
    root_image = tmp_path / "root.png"
    nested_image = tmp_path / "datasets" / "attachments" / "nested.jpg"
    root_image.write_bytes(b"\x89PNG")
    nested_image.write_bytes(b"\xff\xd8")

    paths = resolve_image_paths("root.png; nested.jpg; missing.png; doc.pdf", tmp_path)
    assert paths == [root_image, nested_image]


def test_resolve_image_paths_deduplicates(tmp_path):
    image = tmp_path / "shot.png"
    image.write_bytes(b"\x89PNG")
    assert resolve_image_paths(f"shot.png; {image}", tmp_path) == [image]


def test_mime_types():
    assert mime_type_for("a.JPG") == "image/jpeg"
    assert mime_type_for("a.png") == "image/png"
    assert mime_type_for("a.xyz") == "application/octet-stream"
