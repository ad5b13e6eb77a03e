from pathlib import Path

import pytest


def test_resolve_tree_path_bare_name(tmp_path, monkeypatch):
    """Bare names resolve under outputs/trees with a .yaml suffix."""
    monkeypatch.chdir(tmp_path)
    from treedecision.cli.paths import resolve_tree_path, trees_dir

    result = resolve_tree_path("launch")

    assert Path(result) == trees_dir() / "launch.yaml"
    assert trees_dir().is_dir()


def test_resolve_tree_path_with_suffix(tmp_path, monkeypatch):
    """Names with a known suffix are used as given."""
    monkeypatch.chdir(tmp_path)
    from treedecision.cli.paths import resolve_tree_path

    assert resolve_tree_path("launch.json") == "launch.json"


def test_resolve_tree_path_nested(tmp_path, monkeypatch):
    """Names with a directory part are used as given."""
    monkeypatch.chdir(tmp_path)
    from treedecision.cli.paths import resolve_tree_path

    assert Path(resolve_tree_path("custom/launch")) == Path("custom/launch")


def test_find_tree_file_existing_path(tmp_path):
    from treedecision.cli.paths import find_tree_file

    path = tmp_path / "tree.yaml"
    path.write_text("{}", encoding="utf-8")

    assert find_tree_file(str(path)) == str(path)


def test_find_tree_file_adds_suffix(tmp_path):
    from treedecision.cli.paths import find_tree_file

    path = tmp_path / "tree.json"
    path.write_text("{}", encoding="utf-8")

    assert find_tree_file(str(tmp_path / "tree")) == str(path)


def test_find_tree_file_in_outputs(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    from treedecision.cli.paths import find_tree_file, trees_dir

    trees_dir().mkdir(parents=True)
    (trees_dir() / "saved.yaml").write_text("{}", encoding="utf-8")

    assert Path(find_tree_file("saved")) == trees_dir() / "saved.yaml"


def test_find_tree_file_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    from treedecision.cli.paths import find_tree_file

    with pytest.raises(FileNotFoundError, match="Tree file not found"):
        find_tree_file("ghost")
