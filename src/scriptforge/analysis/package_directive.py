from __future__ import annotations

from scriptforge.schemas import AnalysisResult, PackageReference
from scriptforge.utils import directive_payload

PACKAGE_MARKER = "//#pkg"


def parse_package_reference(token: str) -> PackageReference:
    name, _, version = token.partition(",")
    return PackageReference(name=name.strip(), version=version.strip() or None)


class PackageDirectiveProcessor:
    def process(self, result: AnalysisResult, line: str) -> bool:
        if not line.startswith(PACKAGE_MARKER):
            return False

        token = directive_payload(line)
        if token is None:
            return True

        reference = parse_package_reference(token)
        if reference.name:
            result.package_references.append(reference)
        return True
