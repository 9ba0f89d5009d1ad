"""
tests/scanners/test_scanners_codebuild.py - CodeBuild 스캐너 테스트
"""

from unittest.mock import MagicMock

from core.types import ResourceRef
from scanners.codebuild import DEFAULT_BUILDSPEC, CodeBuildProjectScanner


class TestCodeBuildProjectScanner:
    """CodeBuildProjectScanner 테스트"""

    def test_list_source(self, paginator):
        codebuild = MagicMock()
        codebuild.get_paginator.return_value = paginator([{"projects": ["build-a", "build-b"]}])
        scanner = CodeBuildProjectScanner(None, clients={"codebuild": codebuild})

        refs, has_more = scanner.list_source().next_page()

        codebuild.get_paginator.assert_called_once_with("list_projects")
        assert [r.resource_id for r in refs] == ["build-a", "build-b"]
        assert has_more is False

    def test_fetch_detail(self):
        codebuild = MagicMock()
        codebuild.batch_get_projects.return_value = {
            "projects": [
                {
                    "name": "build-a",
                    "source": {"buildspec": "phases:\n  build:\n    commands: [make]", "location": "https://git/repo"},
                    "environment": {
                        "environmentVariables": [
                            {"name": "DB_PASSWORD", "value": "Abcd1234!", "type": "PLAINTEXT"},
                            {"name": "FROM_SSM", "value": "/path", "type": "PARAMETER_STORE"},
                        ]
                    },
                }
            ]
        }
        scanner = CodeBuildProjectScanner(None, clients={"codebuild": codebuild})

        detail = scanner.fetch_detail(ResourceRef("build-a"))

        codebuild.batch_get_projects.assert_called_once_with(names=["build-a"])
        assert detail.resource_type == "CodeBuild Project"
        assert detail.fields == {
            "Buildspec": "phases:\n  build:\n    commands: [make]",
            "Source Location": "https://git/repo",
        }
        assert detail.variables == {"Environment": {"DB_PASSWORD": "Abcd1234!", "FROM_SSM": "/path"}}

    def test_default_buildspec(self):
        codebuild = MagicMock()
        codebuild.batch_get_projects.return_value = {"projects": [{"name": "b", "source": {"type": "S3"}}]}
        scanner = CodeBuildProjectScanner(None, clients={"codebuild": codebuild})

        detail = scanner.fetch_detail(ResourceRef("b"))

        assert detail.fields["Buildspec"] == DEFAULT_BUILDSPEC
        assert detail.variables == {"Environment": {}}

    def test_deleted_project(self):
        codebuild = MagicMock()
        codebuild.batch_get_projects.return_value = {"projects": [], "projectsNotFound": ["gone"]}
        scanner = CodeBuildProjectScanner(None, clients={"codebuild": codebuild})

        assert scanner.fetch_detail(ResourceRef("gone")) is None
