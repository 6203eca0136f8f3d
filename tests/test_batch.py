"""Tests for per-file isolation, naming and error reporting of batch conversions."""

from pathlib import Path

import pytest

import bwfmarkers.batch as batch
from bwfmarkers.batch import (
    MESSAGE_FILE_NOT_FOUND,
    MESSAGE_INVALID_DATA,
    MESSAGE_NO_BWF_DATA,
    MESSAGE_NO_MARKERS,
    MESSAGE_NOT_WAV,
    MESSAGE_PROCESSING_ERROR,
    MESSAGE_TOOL_UNAVAILABLE,
    MESSAGE_UNEXPECTED,
    ConversionStatus,
    plan_stored_names,
    process_batch,
)
from bwfmarkers.extraction import (
    InputFileNotFoundError,
    MetadataExtractionError,
    MetadataToolUnavailableError,
    NoBwfDataError,
)

MARKERS_XML = """
<conformance_point_document>
  <conformance_point_list>
    <conformance_point time="00:00:10.000" marker="Intro"/>
    <conformance_point time="5.0"/>
  </conformance_point_list>
</conformance_point_document>
"""
EMPTY_XML = "<conformance_point_document/>"
BROKEN_XML = "<conformance_point_document>"


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_process_batch_isolates_failures_and_keeps_input_order(
    tmp_path: Path, make_settings
) -> None:
    """Each input gets its own outcome; failures do not stop siblings."""
    inputs = [
        _write(tmp_path / "in" / "good.xml", MARKERS_XML),
        _write(tmp_path / "in" / "broken.xml", BROKEN_XML),
        _write(tmp_path / "in" / "empty.xml", EMPTY_XML),
        tmp_path / "in" / "missing.xml",
    ]
    out_dir = tmp_path / "labels"

    results = process_batch(
        inputs, from_xml=True, output_dir=out_dir, settings=make_settings()
    )

    assert [result.status for result in results] == [
        ConversionStatus.CONVERTED,
        ConversionStatus.FAILED,
        ConversionStatus.NO_MARKERS,
        ConversionStatus.FAILED,
    ]
    assert [result.error for result in results] == [
        None,
        MESSAGE_INVALID_DATA,
        MESSAGE_NO_MARKERS,
        MESSAGE_FILE_NOT_FOUND,
    ]
    good = results[0]
    assert good.original_file == "good.xml"
    assert good.marker_count == 2
    assert good.labels_file == out_dir / "good_markers.txt"
    assert good.labels_file.read_text(encoding="utf-8") == (
        "5.000000\t5.000000\tMarker 2\n10.000000\t10.000000\tIntro\n"
    )
    assert sorted(path.name for path in out_dir.iterdir()) == ["good_markers.txt"]


def test_process_batch_uses_configured_output_folder(
    tmp_path: Path, make_settings
) -> None:
    """Without an explicit folder, labels go to the configured one."""
    settings = make_settings()
    source = _write(tmp_path / "take.xml", MARKERS_XML)

    [result] = process_batch([source], from_xml=True, settings=settings)

    assert result.labels_file == settings.output.folder / "take_markers.txt"


def test_process_batch_runs_in_parallel_without_reordering(
    tmp_path: Path, make_settings
) -> None:
    """Results come back in input order with several workers."""
    inputs = [_write(tmp_path / f"take{index}.xml", MARKERS_XML) for index in range(5)]

    results = process_batch(
        inputs,
        from_xml=True,
        output_dir=tmp_path / "out",
        settings=make_settings(max_workers=4),
    )

    assert [result.original_file for result in results] == [
        f"take{index}.xml" for index in range(5)
    ]
    assert all(result.status is ConversionStatus.CONVERTED for result in results)


def test_process_batch_empty_input_list(make_settings) -> None:
    assert process_batch([], settings=make_settings()) == []


def test_process_batch_extracts_wav_metadata(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, make_settings
) -> None:
    """WAV inputs go through the extractor before conversion."""
    wav = tmp_path / "Take.WAV"
    wav.write_bytes(b"RIFF")
    seen: list[Path] = []

    def fake_extract(path, settings):
        seen.append(Path(path))
        return MARKERS_XML

    monkeypatch.setattr(batch, "extract_metadata_xml", fake_extract)

    [result] = process_batch([wav], output_dir=tmp_path / "out", settings=make_settings())

    assert seen == [wav]
    assert result.status is ConversionStatus.CONVERTED
    assert result.labels_file.name == "Take_markers.txt"


@pytest.mark.parametrize(
    ("error", "message"),
    [
        (NoBwfDataError("no bext"), MESSAGE_NO_BWF_DATA),
        (InputFileNotFoundError("gone"), MESSAGE_FILE_NOT_FOUND),
        (MetadataToolUnavailableError("missing"), MESSAGE_TOOL_UNAVAILABLE),
        (MetadataExtractionError("timeout"), MESSAGE_PROCESSING_ERROR),
        (RuntimeError("boom"), MESSAGE_UNEXPECTED),
    ],
)
def test_process_batch_maps_extraction_errors_to_messages(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    make_settings,
    error: Exception,
    message: str,
) -> None:
    """Extraction failures become user-facing messages."""
    wav = tmp_path / "take.wav"
    wav.write_bytes(b"RIFF")

    def fake_extract(path, settings):
        raise error

    monkeypatch.setattr(batch, "extract_metadata_xml", fake_extract)

    [result] = process_batch([wav], output_dir=tmp_path / "out", settings=make_settings())

    assert result.status is ConversionStatus.FAILED
    assert result.error == message
    assert result.labels_file is None


def test_process_batch_rejects_non_wav_inputs(tmp_path: Path, make_settings) -> None:
    """Only WAV files are sent to the extractor."""
    mp3 = tmp_path / "song.mp3"
    mp3.write_bytes(b"ID3")

    [result] = process_batch([mp3], output_dir=tmp_path / "out", settings=make_settings())

    assert result.status is ConversionStatus.FAILED
    assert result.error == MESSAGE_NOT_WAV


def test_process_batch_rejects_oversized_wav(tmp_path: Path, make_settings) -> None:
    """Files above the size limit are refused before extraction."""
    wav = tmp_path / "long.wav"
    wav.write_bytes(b"\0" * (1024 * 1024 + 1))

    [result] = process_batch(
        [wav], output_dir=tmp_path / "out", settings=make_settings(max_file_size_mb=1)
    )

    assert result.status is ConversionStatus.FAILED
    assert result.error == "File size exceeds 1MB limit"


def test_plan_stored_names_prefixes_colliding_names(tmp_path: Path) -> None:
    """Duplicate base names in one batch or on disk get a timestamp prefix."""
    (tmp_path / "existing_markers.txt").write_text("\n", encoding="utf-8")

    names = plan_stored_names(
        ["a/take.wav", "b/take.wav", "c/take.WAV", "existing.wav", "solo.wav"],
        tmp_path,
        clock=lambda: 1.5,
    )

    assert names == [
        "take_markers.txt",
        "1500-take_markers.txt",
        "1500_1-take_markers.txt",
        "1500-existing_markers.txt",
        "solo_markers.txt",
    ]


def test_process_batch_same_base_name_does_not_overwrite(
    tmp_path: Path, make_settings
) -> None:
    """Two inputs sharing a base name produce two label files."""
    inputs = [
        _write(tmp_path / "a" / "take.xml", MARKERS_XML),
        _write(tmp_path / "b" / "take.xml", MARKERS_XML),
    ]
    out_dir = tmp_path / "out"

    results = process_batch(inputs, from_xml=True, output_dir=out_dir, settings=make_settings())

    assert len({result.labels_file for result in results}) == 2
    assert len(list(out_dir.iterdir())) == 2
