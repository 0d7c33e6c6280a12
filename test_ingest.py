"""
Test Archive Ingestor

Tests:
1. Payloads come back in manifest order, non-QTI resources untouched
2. Each failure path returns exactly one Failure with the right reason
3. The working directory is removed after success and after every failure
"""

import pytest

import canvasimscp.ingest as ingest
from canvasimscp.errors import Failure, FailureReason
from canvasimscp.ingest import read_data
from canvasimscp.xml_tree import parse_xml

QTI = "imsqti_xmlv1p2"


def test_payloads_in_manifest_order(make_package, manifest_xml, settings, leftover_workdirs):
    archive = make_package({
        "imsmanifest.xml": manifest_xml([(QTI, "r1/q.xml"), (QTI, "r2/q.xml"), (QTI, "r3/q.xml")]),
        "r1/q.xml": "<one/>",
        "r2/q.xml": "<two/>",
        "r3/q.xml": "<three/>",
    })

    result = read_data(archive, settings=settings)

    assert result == ["<one/>", "<two/>", "<three/>"]
    assert leftover_workdirs() == []


def test_only_qti_resources_are_read(make_package, manifest_xml, settings, monkeypatch):
    # The middle resource's file is not even in the archive
    archive = make_package({
        "imsmanifest.xml": manifest_xml([
            (QTI, "a.xml"),
            ("associatedcontent", "meta/skip.xml"),
            (QTI, "b.xml"),
        ]),
        "a.xml": "<a/>",
        "b.xml": "<b/>",
    })

    opened = []
    real_get = ingest.get_file_content

    def spy(workdir, path):
        opened.append(path)
        return real_get(workdir, path)

    monkeypatch.setattr(ingest, "get_file_content", spy)

    result = read_data(archive, settings=settings)

    assert result == ["<a/>", "<b/>"]
    assert "meta/skip.xml" not in opened
    assert opened == ["imsmanifest.xml", "a.xml", "b.xml"]


def test_empty_package_is_empty_list(make_package, manifest_xml, settings):
    archive = make_package({"imsmanifest.xml": manifest_xml([])})

    assert read_data(archive, settings=settings) == []


def test_utf8_bom_is_dropped(make_package, manifest_xml, settings):
    archive = make_package({
        "imsmanifest.xml": manifest_xml([(QTI, "q.xml")]),
        "q.xml": "\ufeff<q>é</q>".encode("utf-8"),
    })

    assert read_data(archive, settings=settings) == ["<q>é</q>"]


def test_unreadable_source(settings, leftover_workdirs):
    result = read_data("/no/such/file.zip", settings=settings)

    assert isinstance(result, Failure)
    assert result.reason == FailureReason.CANNOT_READ_UPLOAD_FILE
    assert leftover_workdirs() == []


def test_copy_failure(make_package, manifest_xml, settings, leftover_workdirs, monkeypatch):
    archive = make_package({"imsmanifest.xml": manifest_xml([])})

    def broken_copy(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(ingest.shutil, "copyfile", broken_copy)

    result = read_data(archive, settings=settings)

    assert isinstance(result, Failure)
    assert result.reason == FailureReason.CANNOT_COPY_ARCHIVE
    assert "disk full" in result.message
    assert leftover_workdirs() == []


def test_not_a_zip(tmp_path, settings, leftover_workdirs):
    bogus = tmp_path / "export.zip"
    bogus.write_bytes(b"this is not a zip file")

    result = read_data(bogus, settings=settings)

    assert isinstance(result, Failure)
    assert result.reason == FailureReason.CANNOT_UNZIP
    assert leftover_workdirs() == []


def test_extractor_is_injectable(make_package, manifest_xml, settings):
    archive = make_package({"imsmanifest.xml": manifest_xml([])})
    calls = []

    def refuse(archive_path, dest):
        calls.append((archive_path.name, dest))
        return False

    result = read_data(archive, extractor=refuse, settings=settings)

    assert isinstance(result, Failure)
    assert result.reason == FailureReason.CANNOT_UNZIP
    assert calls and calls[0][0] == "content.zip"


def test_missing_manifest(make_package, settings, leftover_workdirs):
    archive = make_package({"q1.xml": "<questestinterop/>"})

    result = read_data(archive, settings=settings)

    assert isinstance(result, Failure)
    assert result.reason == FailureReason.XML_FORMAT_ERROR
    assert "imsmanifest.xml" in result.message
    assert leftover_workdirs() == []


def test_malformed_manifest_xml(make_package, settings, leftover_workdirs):
    archive = make_package({"imsmanifest.xml": "<manifest><resources>"})

    result = read_data(archive, settings=settings)

    assert isinstance(result, Failure)
    assert result.reason == FailureReason.XML_FORMAT_ERROR
    # Released on parse errors too
    assert leftover_workdirs() == []


def test_manifest_without_resources(make_package, settings, leftover_workdirs):
    archive = make_package({"imsmanifest.xml": "<manifest><organizations/></manifest>"})

    result = read_data(archive, settings=settings)

    assert isinstance(result, Failure)
    assert result.reason == FailureReason.MALFORMED_MANIFEST
    assert leftover_workdirs() == []


def test_missing_resource_file(make_package, manifest_xml, settings, leftover_workdirs):
    archive = make_package({
        "imsmanifest.xml": manifest_xml([(QTI, "present.xml"), (QTI, "absent.xml")]),
        "present.xml": "<q/>",
    })

    result = read_data(archive, settings=settings)

    assert isinstance(result, Failure)
    assert result.reason == FailureReason.MISSING_RESOURCE_FILE
    assert result.message == "absent.xml"
    assert leftover_workdirs() == []


def test_resource_escaping_package_is_missing(make_package, manifest_xml, settings):
    archive = make_package({
        "imsmanifest.xml": manifest_xml([(QTI, "../../etc/passwd")]),
    })

    result = read_data(archive, settings=settings)

    assert isinstance(result, Failure)
    assert result.reason == FailureReason.MISSING_RESOURCE_FILE


def test_resource_not_utf8(make_package, manifest_xml, settings):
    archive = make_package({
        "imsmanifest.xml": manifest_xml([(QTI, "q.xml")]),
        "q.xml": b"<q>\xff\xfe</q>",
    })

    result = read_data(archive, settings=settings)

    assert isinstance(result, Failure)
    assert result.reason == FailureReason.XML_FORMAT_ERROR


def test_manifest_parser_gets_whitespace_flag(make_package, manifest_xml, settings):
    archive = make_package({"imsmanifest.xml": manifest_xml([])})
    seen = {}

    def parser(data, preserve_whitespace, encoding):
        seen["preserve_whitespace"] = preserve_whitespace
        seen["encoding"] = encoding
        return parse_xml(data, preserve_whitespace, encoding)

    assert read_data(archive, xml_parser=parser, settings=settings) == []
    assert seen == {"preserve_whitespace": True, "encoding": "UTF-8"}


@pytest.mark.parametrize("verbose", [True, False])
def test_progress_output(make_package, manifest_xml, settings, capsys, verbose):
    from dataclasses import replace

    archive = make_package({"imsmanifest.xml": manifest_xml([])})

    read_data(archive, settings=replace(settings, verbose=verbose))

    out = capsys.readouterr().out
    assert ("[import] Found 0 QTI resource(s) in manifest" in out) is verbose


def test_failure_is_reported(settings, capsys):
    read_data("/no/such/file.zip", settings=settings)

    assert "[import:err]" in capsys.readouterr().out
