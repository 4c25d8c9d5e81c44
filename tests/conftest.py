"""Shared fixtures."""

from pathlib import Path

import pytest
import yaml

from ort.models import OrtResult

RESULT_WITHOUT_ADVISOR = {
    "repository": {
        "vcs": {"type": "Git", "url": "https://github.com/example/app.git", "revision": "abc123"},
        "config": {
            "resolutions": {
                "issues": [{"message": "Flaky network.*", "reason": "CANT_FIX_ISSUE", "comment": "Retry later."}],
                "rule_violations": [{"message": "Copyleft in .*test.*", "reason": "EXAMPLE_OF_EXCEPTION"}],
            }
        },
    },
    "analyzer": {
        "start_time": "2026-01-01T10:00:00Z",
        "end_time": "2026-01-01T10:05:00Z",
        "result": {
            "projects": [
                {
                    "id": "Gradle:com.example:app:1.0.0",
                    "definition_file_path": "build.gradle",
                    "declared_licenses": ["Apache-2.0"],
                }
            ],
            "packages": [
                {
                    "id": "Maven:org.slf4j:slf4j-api:2.0.9",
                    "declared_licenses": ["MIT"],
                    "description": "The SLF4J API",
                },
                {
                    "id": "Maven:com.h2database:h2:2.2.224",
                    "declared_licenses": ["MPL-2.0", "EPL-1.0"],
                    "concluded_license": "MPL-2.0",
                },
            ],
            "issues": {
                "Gradle:com.example:app:1.0.0": [
                    {"message": "Flaky network connection", "severity": "ERROR", "source": "Gradle"},
                    {"message": "Unresolvable dependency", "severity": "ERROR", "source": "Gradle"},
                    {"message": "Deprecated plugin", "severity": "HINT", "source": "Gradle"},
                ]
            },
        },
    },
    "evaluator": {
        "violations": [
            {"rule": "COPYLEFT", "pkg": "Maven:com.h2database:h2:2.2.224", "license": "EPL-1.0",
             "severity": "ERROR", "message": "Copyleft in production code."},
            {"rule": "COPYLEFT", "pkg": "Maven:com.h2database:h2:2.2.224", "license": "EPL-1.0",
             "severity": "WARNING", "message": "Copyleft in a test dependency."},
        ]
    },
}

ADVISOR_SECTION = {
    "results": {
        "advisor_results": {
            "Maven:com.h2database:h2:2.2.224": [
                {
                    "advisor": {"name": "OSV"},
                    "summary": {"issues": []},
                    "vulnerabilities": [
                        {
                            "id": "CVE-2022-45868",
                            "summary": "Password exposure in the web console.",
                            "references": [{"url": "https://nvd.nist.gov/vuln/detail/CVE-2022-45868",
                                            "severity": "7.8"}],
                        }
                    ],
                }
            ]
        }
    }
}


@pytest.fixture(autouse=True)
def isolated_ort_dirs(tmp_path_factory, monkeypatch):
    """Keep tests away from the user's real ~/.ort directories."""
    data_dir = tmp_path_factory.mktemp("ort-data")
    monkeypatch.setenv("ORT_DATA_DIR", str(data_dir))
    monkeypatch.setenv("ORT_CONFIG_DIR", str(data_dir / "config"))
    return data_dir


@pytest.fixture
def result_dict() -> dict:
    return yaml.safe_load(yaml.safe_dump(RESULT_WITHOUT_ADVISOR))


@pytest.fixture
def result_with_advisor_dict(result_dict) -> dict:
    result_dict["advisor"] = yaml.safe_load(yaml.safe_dump(ADVISOR_SECTION))
    return result_dict


@pytest.fixture
def ort_result(result_dict) -> OrtResult:
    return OrtResult.from_dict(result_dict)


@pytest.fixture
def ort_result_with_advisor(result_with_advisor_dict) -> OrtResult:
    return OrtResult.from_dict(result_with_advisor_dict)


@pytest.fixture
def ort_file(tmp_path, result_dict) -> Path:
    path = tmp_path / "input" / "evaluation-result.yml"
    path.parent.mkdir()
    path.write_text(yaml.safe_dump(result_dict), encoding="utf-8")
    return path
