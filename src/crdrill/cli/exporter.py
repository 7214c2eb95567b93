#!/usr/bin/env python3
"""
CRDRILL EXPORTER - Machine-Readable Output
------------------------------------------
Author: CRDrill Team
Date: 2026-10-19
"""

import io
import json

from ruamel.yaml import YAML

from crdrill.core.models import DrillResult


class ReportExporter:
    """
    Serializes a DrillResult for scripts and CI pipelines.
    """

    def __init__(self):
        self.yaml = YAML(typ='rt')
        # Standard K8s: 2 spaces, but sequences are indented 4 (offset 2)
        # for maximum readability in IDEs.
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096

    def to_json(self, result: DrillResult) -> str:
        return json.dumps(result.to_dict(), indent=2)

    def to_yaml(self, result: DrillResult) -> str:
        stream = io.StringIO()
        self.yaml.dump(result.to_dict(), stream)
        return stream.getvalue()

    def export(self, result: DrillResult, fmt: str) -> str:
        if fmt == "json":
            return self.to_json(result)
        if fmt == "yaml":
            return self.to_yaml(result)
        raise ValueError(f"Unsupported export format '{fmt}'")
