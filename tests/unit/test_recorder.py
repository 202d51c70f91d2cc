# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for per-test coverage recording."""

import logging
from pathlib import Path

import pytest

from tcm.execdata import read_execution_record
from tcm.instrumentation import (
    ClassCoverageInfo,
    ExecutionData,
    ExecutionRecord,
    InstrumentationError,
)
from tcm.inventory import ClassSource
from tcm.recorder import CoverageRecorder, covered_lines
from tcm.toolkits import SourceArtifactToolkit
from tcm.toolkits.source import content_identity


def _write_file(path: Path, content: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class _FakeRepository:
    def __init__(self, root: Path, events: list[str]) -> None:
        self.root = root
        self._events = events

    def reset_to_baseline(self, ref: str) -> None:
        self._events.append(f"reset:{ref}")


class _FakeToolkit:
    def __init__(
        self,
        events: list[str],
        infos: dict[str, list[ClassCoverageInfo]],
        executed: dict[str, list[ExecutionData]] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self._events = events
        self._infos = infos
        self._executed = executed or {}
        self._failing = failing or set()

    def analyze(self, artifact_path: Path) -> list[ClassCoverageInfo]:
        if not artifact_path.is_file():
            raise FileNotFoundError(artifact_path)
        self._events.append(f"analyze:{artifact_path.name}")
        if artifact_path.name in self._failing:
            raise InstrumentationError(f"cannot analyze {artifact_path.name}")
        return self._infos.get(artifact_path.name, [])

    def record_execution(self, test_id: str) -> ExecutionRecord:
        self._events.append(f"record:{test_id}")
        record = ExecutionRecord(test_id=test_id)
        for data in self._executed.get(test_id, []):
            record.put(data)
        return record


def _project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    _write_file(root / "src" / "main" / "java" / "a" / "B.java")
    _write_file(root / "src" / "main" / "java" / "a" / "C.java")
    _write_file(root / "src" / "test" / "java" / "a" / "BTest.java")
    return root


def _sources(root: Path, *identifiers: str) -> list[ClassSource]:
    main_root = root / "src" / "main" / "java"
    return [
        ClassSource(
            identifier=identifier,
            path=main_root.joinpath(*identifier.split(".")).with_suffix(".java"),
        )
        for identifier in identifiers
    ]


def _recorder(
    root: Path, events: list[str], toolkit: _FakeToolkit, exec_dir: Path
) -> CoverageRecorder:
    return CoverageRecorder(
        repository=_FakeRepository(root, events),
        toolkit=toolkit,
        exec_dir=exec_dir,
        baseline_ref="main",
    )


def test_rec_001_tests_are_processed_sequentially_after_reset(tmp_path: Path) -> None:
    root = _project(tmp_path)
    events: list[str] = []
    toolkit = _FakeToolkit(events, infos={})
    recorder = _recorder(root, events, toolkit, tmp_path / "exec")

    recorder.record(_sources(root, "a.B", "a.C"), ["a.BTest.one", "a.BTest.two"])

    assert events == [
        "reset:main",
        "record:a.BTest.one",
        "analyze:B.java",
        "analyze:C.java",
        "reset:main",
        "record:a.BTest.two",
        "analyze:B.java",
        "analyze:C.java",
    ]


def test_rec_002_lines_are_covered_when_execution_data_is_present(
    tmp_path: Path,
) -> None:
    root = _project(tmp_path)
    events: list[str] = []
    toolkit = _FakeToolkit(
        events,
        infos={
            "B.java": [ClassCoverageInfo(name="a.B", class_id=7, first_line=3, last_line=5)],
            "C.java": [ClassCoverageInfo(name="a.C", class_id=8, first_line=2, last_line=2)],
        },
        executed={
            "a.BTest.one": [
                ExecutionData(id=7, name="a.B", probes=(True,)),
                ExecutionData(id=8, name="a.C", probes=(True,)),
            ]
        },
    )
    recorder = _recorder(root, events, toolkit, tmp_path / "exec")

    entries = recorder.record(
        _sources(root, "a.B", "a.C"), ["a.BTest.one", "a.BTest.two"]
    )

    assert entries[0].test_id == "a.BTest.one"
    assert entries[0].locations == ("a.B#3", "a.B#4", "a.B#5", "a.C#2")
    assert entries[1].test_id == "a.BTest.two"
    assert entries[1].locations == ()


def test_rec_003_missing_artifact_is_skipped_and_logged(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    root = _project(tmp_path)
    events: list[str] = []
    toolkit = _FakeToolkit(
        events,
        infos={"C.java": [ClassCoverageInfo(name="a.C", class_id=8, first_line=1, last_line=1)]},
        executed={"a.BTest.one": [ExecutionData(id=8, name="a.C", probes=(True,))]},
    )
    recorder = _recorder(root, events, toolkit, tmp_path / "exec")

    with caplog.at_level(logging.WARNING):
        entries = recorder.record(_sources(root, "a.Gone", "a.C"), ["a.BTest.one"])

    assert entries[0].locations == ("a.C#1",)
    assert "a.Gone" in caplog.text
    assert events == ["reset:main", "record:a.BTest.one", "analyze:C.java"]


def test_rec_004_other_analysis_failures_abort_the_run(tmp_path: Path) -> None:
    root = _project(tmp_path)
    events: list[str] = []
    toolkit = _FakeToolkit(events, infos={}, failing={"B.java"})
    recorder = _recorder(root, events, toolkit, tmp_path / "exec")

    with pytest.raises(InstrumentationError):
        recorder.record(_sources(root, "a.B"), ["a.BTest.one", "a.BTest.two"])

    assert "record:a.BTest.two" not in events


def test_rec_005_class_name_must_match_identifier(tmp_path: Path) -> None:
    root = _project(tmp_path)
    events: list[str] = []
    toolkit = _FakeToolkit(
        events,
        infos={"B.java": [ClassCoverageInfo(name="other.B", class_id=7, first_line=1, last_line=2)]},
        executed={"a.BTest.one": [ExecutionData(id=7, name="other.B", probes=(True,))]},
    )
    recorder = _recorder(root, events, toolkit, tmp_path / "exec")

    entries = recorder.record(_sources(root, "a.B"), ["a.BTest.one"])

    assert entries[0].locations == ()


def test_rec_006_execution_data_is_appended_per_test(tmp_path: Path) -> None:
    root = _project(tmp_path)
    exec_dir = tmp_path / "exec"
    events: list[str] = []
    toolkit = _FakeToolkit(
        events,
        infos={},
        executed={"a.BTest.one": [ExecutionData(id=7, name="a.B", probes=(True, False))]},
    )
    recorder = _recorder(root, events, toolkit, exec_dir)

    recorder.record(_sources(root, "a.B"), ["a.BTest.one"])
    first_size = (exec_dir / "a.BTest.one.exec").stat().st_size
    recorder.record(_sources(root, "a.B"), ["a.BTest.one"])

    exec_file = exec_dir / "a.BTest.one.exec"
    assert exec_file.stat().st_size == 2 * first_size
    assert read_execution_record(exec_file, test_id="a.BTest.one").get(7).probes == (
        True,
        False,
    )


def test_rec_007_non_positive_identity_is_not_execution() -> None:
    info = ClassCoverageInfo(name="a.B", class_id=0, first_line=1, last_line=3)
    record = ExecutionRecord(test_id="t")
    record.put(ExecutionData(id=0, name="a.B", probes=(True,)))

    assert covered_lines(info, record) == []


def test_rec_008_unknown_line_range_covers_nothing() -> None:
    info = ClassCoverageInfo(name="a.B", class_id=4)
    record = ExecutionRecord(test_id="t")
    record.put(ExecutionData(id=4, name="a.B", probes=(True,)))

    assert covered_lines(info, record) == []


def test_rec_009_no_tests_means_no_entries(tmp_path: Path) -> None:
    root = _project(tmp_path)
    events: list[str] = []
    recorder = _recorder(root, events, _FakeToolkit(events, infos={}), tmp_path / "exec")

    assert recorder.record(_sources(root, "a.B"), []) == []
    assert events == []


B_SOURCE = "\n".join(
    [
        "package a;",
        "public class B {",
        "    int value() {",
        "        return 1;",
        "    }",
        "}",
        "",
    ]
)

B_TEST_SOURCE = "\n".join(
    [
        "package a;",
        "public class B {",
        "    void check() {}",
        "}",
        "",
    ]
)


class _ReplayToolkit(SourceArtifactToolkit):
    def __init__(self, executed: list[ExecutionData]) -> None:
        super().__init__()
        self._executed = executed

    def record_execution(self, test_id: str) -> ExecutionRecord:
        record = ExecutionRecord(test_id=test_id)
        for data in self._executed:
            record.put(data)
        return record


def _same_name_project(tmp_path: Path) -> tuple[Path, list[ClassSource]]:
    root = tmp_path / "project"
    test_file = root / "src" / "test" / "java" / "a" / "B.java"
    main_file = root / "src" / "main" / "java" / "a" / "B.java"
    _write_file(test_file, B_TEST_SOURCE)
    _write_file(main_file, B_SOURCE)
    sources = [
        ClassSource(identifier="a.B", path=test_file),
        ClassSource(identifier="a.B", path=main_file),
    ]
    return root, sources


def test_rec_010_same_name_in_both_roots_analyzes_each_file(tmp_path: Path) -> None:
    root, sources = _same_name_project(tmp_path)
    toolkit = _ReplayToolkit(
        [
            ExecutionData(
                id=content_identity(B_SOURCE.encode("utf-8")),
                name="a/B",
                probes=(True,),
            )
        ]
    )
    recorder = CoverageRecorder(
        repository=_FakeRepository(root, []),
        toolkit=toolkit,
        exec_dir=tmp_path / "exec",
        baseline_ref="main",
    )

    entries = recorder.record(sources, ["a.BTest.one"])

    assert entries[0].locations == ("a.B#3", "a.B#4", "a.B#5")


def test_rec_011_foreign_identity_is_matched_by_vm_class_name() -> None:
    info = ClassCoverageInfo(name="a.B", class_id=11, first_line=2, last_line=3)
    record = ExecutionRecord(test_id="t")
    record.put(ExecutionData(id=-0x1234ABCD5678, name="a/B", probes=(False, True)))

    assert covered_lines(info, record) == ["a.B#2", "a.B#3"]


def test_rec_012_foreign_identity_without_hits_covers_nothing() -> None:
    info = ClassCoverageInfo(name="a.B", class_id=11, first_line=2, last_line=3)
    record = ExecutionRecord(test_id="t")
    record.put(ExecutionData(id=0x1234ABCD5678, name="a/B", probes=(False, False)))
    record.put(ExecutionData(id=0x99, name="a/Other", probes=(True,)))

    assert covered_lines(info, record) == []


def test_rec_013_externally_captured_data_covers_the_named_class(tmp_path: Path) -> None:
    root = tmp_path / "project"
    main_file = root / "src" / "main" / "java" / "a" / "B.java"
    _write_file(main_file, B_SOURCE)
    toolkit = _ReplayToolkit(
        [ExecutionData(id=0x1234ABCD5678, name="a/B", probes=(True, True))]
    )
    recorder = CoverageRecorder(
        repository=_FakeRepository(root, []),
        toolkit=toolkit,
        exec_dir=tmp_path / "exec",
        baseline_ref="main",
    )

    entries = recorder.record(
        [ClassSource(identifier="a.B", path=main_file)], ["a.T.t"]
    )

    assert entries[0].locations == ("a.B#3", "a.B#4", "a.B#5")
