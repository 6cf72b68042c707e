from __future__ import annotations

from scriptforge.analysis.resolver import ArtifactResolver, UnresolvableReference
from scriptforge.schemas import AnalysisResult
from scriptforge.utils import directive_payload

REFERENCE_MARKER = "//#ref"


class ReferenceDirectiveProcessor:
    def __init__(self, resolver: ArtifactResolver) -> None:
        self.resolver = resolver

    def process(self, result: AnalysisResult, line: str) -> bool:
        if not line.startswith(REFERENCE_MARKER):
            return False

        token = directive_payload(line)
        if token is None:
            return True

        try:
            location = self.resolver.resolve(token)
        except UnresolvableReference as exc:
            raise UnresolvableReference(token, line=line, reason=exc.reason) from exc

        result.references.append(location)
        return True
