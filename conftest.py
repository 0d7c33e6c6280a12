"""
Shared fixtures: build Canvas-style content packages on disk.
"""

import zipfile
from pathlib import Path

import pytest

from canvasimscp.config import Settings


MANIFEST_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<manifest identifier="g1" xmlns="http://www.imsglobal.org/xsd/imsccv1p1/imscp_v1p1">
  <metadata>
    <schema>IMS Content</schema>
    <schemaversion>1.1.3</schemaversion>
  </metadata>
  <organizations/>
  <resources>
{resources}
  </resources>
</manifest>
"""

RESOURCE_TEMPLATE = """    <resource identifier="{ident}" type="{rtype}">
      <file href="{href}"/>
    </resource>"""

QTI_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<questestinterop xmlns="http://www.imsglobal.org/xsd/ims_qtiasiv1p2">
  <assessment ident="a1" title="Quiz">
    <section ident="root_section">
{items}
    </section>
  </assessment>
</questestinterop>
"""

ITEM_TEMPLATE = """      <item ident="{ident}" title="{title}">
        <itemmetadata>
          <qtimetadata>
            <qtimetadatafield>
              <fieldlabel>question_type</fieldlabel>
              <fieldentry>multiple_choice_question</fieldentry>
            </qtimetadatafield>
            <qtimetadatafield>
              <fieldlabel>points_possible</fieldlabel>
              <fieldentry>1.0</fieldentry>
            </qtimetadatafield>
          </qtimetadata>
        </itemmetadata>
        <presentation>
          <material>
            <mattext texttype="text/plain">{stem}</mattext>
          </material>
          <response_lid ident="response1" rcardinality="Single">
            <render_choice>
              <response_label ident="{ident}_a">
                <material><mattext texttype="text/plain">Yes</mattext></material>
              </response_label>
              <response_label ident="{ident}_b">
                <material><mattext texttype="text/plain">No</mattext></material>
              </response_label>
            </render_choice>
          </response_lid>
        </presentation>
        <resprocessing>
          <outcomes>
            <decvar maxvalue="100" minvalue="0" varname="SCORE" vartype="Decimal"/>
          </outcomes>
          <respcondition continue="No">
            <conditionvar>
              <varequal respident="response1">{ident}_a</varequal>
            </conditionvar>
            <setvar action="Set" varname="SCORE">100</setvar>
          </respcondition>
        </resprocessing>
      </item>"""


def build_manifest(resources):
    """resources: list of (type, href) pairs"""
    body = "\n".join(
        RESOURCE_TEMPLATE.format(ident=f"r{i}", rtype=rtype, href=href)
        for i, (rtype, href) in enumerate(resources, 1)
    )
    return MANIFEST_TEMPLATE.format(resources=body)


def build_qti(stems):
    """One multiple choice item per stem; idents are q1, q2, ..."""
    items = "\n".join(
        ITEM_TEMPLATE.format(ident=f"q{i}", title=f"Question {i}", stem=stem)
        for i, stem in enumerate(stems, 1)
    )
    return QTI_TEMPLATE.format(items=items)


@pytest.fixture
def settings(tmp_path):
    """Settings with an isolated temp base and no progress output."""
    base = tmp_path / "tmp"
    base.mkdir()
    return Settings(temp_base=str(base), verbose=False)


@pytest.fixture
def make_package(tmp_path):
    """Write a zip with the given {member: text_or_bytes} entries."""
    counter = {"n": 0}

    def _make(files, name=None):
        counter["n"] += 1
        path = tmp_path / (name or f"package{counter['n']}.zip")
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
            for member, content in files.items():
                zf.writestr(member, content)
        return path

    return _make


@pytest.fixture
def manifest_xml():
    return build_manifest


@pytest.fixture
def qti_xml():
    return build_qti


def workdir_root(settings: Settings) -> Path:
    return Path(settings.temp_base) / "canvas_import"


@pytest.fixture
def leftover_workdirs(settings):
    """Callable listing working directories still on disk."""
    def _list():
        root = workdir_root(settings)
        if not root.exists():
            return []
        return sorted(p.name for p in root.iterdir())
    return _list
