"""
manifest.py - Resolve question files listed in imsmanifest.xml.

Expected shape (namespaces ignored):

    <manifest>
      <resources>
        <resource type="imsqti_xmlv1p2" identifier="...">
          <file href="g1234/g1234.xml"/>
        </resource>
        <resource type="associatedcontent/imscc_xmlv1p1/learning-application-resource">
          ...
        </resource>
      </resources>
    </manifest>
"""

from typing import List, Union

from canvasimscp.config import QTI_RESOURCE_TYPE
from canvasimscp.errors import Failure, FailureReason
from canvasimscp.xml_tree import Element


def resolve_qti_resources(
    manifest: Element,
    qti_type: str = QTI_RESOURCE_TYPE,
) -> Union[List[str], Failure]:
    """
    Return the hrefs of all QTI resources, in manifest order.

    Resources of any other type are skipped; a package may bundle pages,
    images and other non-question content next to its question files.

    Returns:
        List of paths relative to the package root, or
        Failure(MALFORMED_MANIFEST) when the manifest/resources/file
        structure is missing
    """
    if manifest.tag != "manifest":
        return Failure(
            FailureReason.MALFORMED_MANIFEST,
            f"Root element is <{manifest.tag}>, expected <manifest>",
        )

    resources = manifest.first_child("resources")
    if resources is None:
        return Failure(FailureReason.MALFORMED_MANIFEST, "Manifest has no <resources> element")

    paths: List[str] = []
    for resource in resources.children_named("resource"):
        if resource.attr("type") != qti_type:
            continue

        file_elem = resource.first_child("file")
        href = file_elem.attr("href", "") if file_elem is not None else ""
        if not href:
            ident = resource.attr("identifier", "?")
            return Failure(
                FailureReason.MALFORMED_MANIFEST,
                f"QTI resource '{ident}' has no <file href=...>",
            )
        paths.append(href)

    return paths
