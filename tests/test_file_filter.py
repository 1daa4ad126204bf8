from pathlib import Path

import pytest

from git_newer.file_filter import detect_shape, filter_files, rewrite_file_spec
from git_newer.models import FileSpecShape, MatchMode

ROOT = "/repo"


def _as_is(globs, cwd=None):
    if isinstance(globs, str):
        return [globs]
    return list(globs)


def test_exact_mode_keeps_changed_candidates_in_order():
    out = filter_files(
        ["c.js", "a.js", "b.js"],
        ["/repo/a.js", "/repo/c.js"],
        MatchMode.EXACT,
        cwd=ROOT,
        expand=_as_is,
    )
    assert out == ["c.js", "a.js"]


def test_exact_mode_normalizes_candidate_paths():
    out = filter_files(["./lib/../a.js"], ["/repo/a.js"], MatchMode.EXACT, cwd=ROOT, expand=_as_is)
    assert out == ["./lib/../a.js"]


def test_exact_mode_does_not_match_directories():
    out = filter_files(["build/"], ["/repo/build/x/y.js"], MatchMode.EXACT, cwd=ROOT, expand=_as_is)
    assert out == []


def test_prefix_mode_matches_directory_candidates():
    out = filter_files(
        ["build/", "docs/"],
        ["/repo/build/x/y.js"],
        MatchMode.PREFIX,
        cwd=ROOT,
        expand=_as_is,
    )
    assert out == ["build/"]


def test_prefix_mode_is_a_plain_string_prefix():
    out = filter_files(["build"], ["/repo/buildtools/run.js"], MatchMode.PREFIX, cwd=ROOT, expand=_as_is)
    assert out == ["build"]


def test_no_changes_yields_empty_list():
    assert filter_files(["a.js"], [], MatchMode.EXACT, cwd=ROOT, expand=_as_is) == []


def test_filter_expands_globs_on_disk(tmp_path: Path):
    (tmp_path / "lib").mkdir()
    for name in ["lib/a.js", "lib/b.js", "lib/c.txt"]:
        (tmp_path / name).write_text("x")

    changed = [str(tmp_path / "lib" / "b.js"), str(tmp_path / "lib" / "c.txt")]
    out = filter_files(["lib/*.js"], changed, MatchMode.EXACT, cwd=tmp_path)
    assert out == ["lib/b.js"]


@pytest.mark.parametrize(
    "config,shape",
    [
        ({"src": ["a.js"]}, FileSpecShape.SRC_LIST),
        ({"src": ["a.js"], "files": "b.js"}, FileSpecShape.SRC_LIST),
        ({"src": [], "files": "b.js"}, FileSpecShape.STRING_FILES),
        ({"files": "a.js,b.js"}, FileSpecShape.STRING_FILES),
        ({"files": ["a.js"]}, FileSpecShape.LIST_FILES),
        ({"files": {"src": ["a.js"], "dest": "out/"}}, FileSpecShape.OBJECT_SRC_FILES),
        ({"files": [{"src": ["a.js"], "dest": "out/a.js"}]}, FileSpecShape.GENERIC),
        ({"files": {"out/all.js": ["a.js"]}}, FileSpecShape.GENERIC),
        ({"options": {}}, FileSpecShape.GENERIC),
    ],
)
def test_detect_shape_priority(config, shape):
    assert detect_shape(config) is shape


def test_rewrite_src_list_keeps_other_keys():
    config = {"src": ["a.js", "b.js", "c.js"], "options": {"strict": True}}
    out, matched = rewrite_file_spec(
        config, ["/repo/a.js", "/repo/c.js"], MatchMode.EXACT, "app", cwd=ROOT, expand=_as_is
    )
    assert out == {"src": ["a.js", "c.js"], "options": {"strict": True}}
    assert matched == ["a.js", "c.js"]
    assert config["src"] == ["a.js", "b.js", "c.js"]


def test_rewrite_string_files_stays_a_string():
    out, matched = rewrite_file_spec(
        {"files": "a.js,b.js,c.js"},
        ["/repo/a.js", "/repo/c.js"],
        MatchMode.EXACT,
        "app",
        cwd=ROOT,
        expand=_as_is,
    )
    assert out == {"files": "a.js,c.js"}
    assert matched == ["a.js", "c.js"]


def test_rewrite_list_files():
    out, _ = rewrite_file_spec(
        {"files": ["a.js", "b.js"]}, ["/repo/b.js"], MatchMode.EXACT, "app", cwd=ROOT, expand=_as_is
    )
    assert out == {"files": ["b.js"]}


def test_rewrite_object_src_files_keeps_dest():
    config = {"files": {"src": ["a.js", "b.js"], "dest": "dist/"}}
    out, _ = rewrite_file_spec(config, ["/repo/a.js"], MatchMode.EXACT, "app", cwd=ROOT, expand=_as_is)
    assert out == {"files": {"src": ["a.js"], "dest": "dist/"}}
    assert config["files"]["src"] == ["a.js", "b.js"]


def test_rewrite_generic_collapses_groups_into_single_src(tmp_path: Path):
    for name in ["a.js", "b.js", "c.js"]:
        (tmp_path / name).write_text("x")
    config = {
        "files": [
            {"src": ["a.js"], "dest": "dist/a.min.js"},
            {"src": ["b.js"], "dest": "dist/b.min.js"},
            {"dist/c.min.js": ["c.js"]},
        ]
    }
    changed = [str(tmp_path / "a.js"), str(tmp_path / "c.js")]
    out, matched = rewrite_file_spec(config, changed, MatchMode.EXACT, "minify", cwd=tmp_path)

    # destinations do not survive the fallback
    assert out == {"files": {"src": ["a.js", "c.js"]}}
    assert matched == ["a.js", "c.js"]


def test_rewrite_generic_only_considers_first_source_of_each_group(tmp_path: Path):
    for name in ["a.js", "b.js"]:
        (tmp_path / name).write_text("x")
    config = {"files": {"dist/all.js": ["a.js", "b.js"]}}
    out, matched = rewrite_file_spec(
        config, [str(tmp_path / "b.js")], MatchMode.EXACT, "concat", cwd=tmp_path
    )
    assert matched == []
    assert out == {"files": {"src": []}}
