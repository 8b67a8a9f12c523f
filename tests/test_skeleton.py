"""
Tests for the skeleton purge command.
"""

from io import StringIO

import pytest
from rich.console import Console

from core.exceptions import ConfigurationError, PurgeError
from interaction.cli import ConsoleComponents
from main import main
from skeleton import DeleteDirectories, DeleteFiles, PurgeSkeleton, SkeletonConfig, expand_patterns


def _touch(base, *paths):
    for path in paths:
        target = base / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text("x", encoding="utf-8")


@pytest.fixture
def skeleton(tmp_path):
    _touch(
        tmp_path,
        ".env",
        "testbench.yaml",
        "database/database.sqlite",
        "database/.gitignore",
        "routes/testbench-api.php",
        "routes/web.php",
        "storage/app/report.csv",
        "storage/app/.gitignore",
        "storage/app/public/avatar.png",
        "storage/framework/sessions/abc123",
        "storage/framework/views/compiled.php",
        "bootstrap/cache/config.php",
        "bootstrap/cache/routes-v7.php",
        "bootstrap/cache/packages.php",
    )
    return tmp_path


@pytest.fixture
def output():
    return StringIO()


@pytest.fixture
def components(output):
    return ConsoleComponents(Console(file=output, width=100, color_system=None))


def test_purge_restores_the_skeleton(skeleton, components, output):
    assert PurgeSkeleton(skeleton, components=components).handle() == 0

    for removed in (
        ".env",
        "testbench.yaml",
        "database/database.sqlite",
        "routes/testbench-api.php",
        "storage/app/report.csv",
        "storage/app/public/avatar.png",
        "storage/framework/sessions/abc123",
        "storage/framework/views/compiled.php",
        "bootstrap/cache/config.php",
        "bootstrap/cache/routes-v7.php",
    ):
        assert not (skeleton / removed).exists(), removed

    for kept in (
        "database/.gitignore",
        "storage/app/.gitignore",
        "routes/web.php",
        "bootstrap/cache/packages.php",
    ):
        assert (skeleton / kept).exists(), kept

    text = output.getvalue()
    assert "Configuration cache cleared successfully." in text
    assert "Compiled views cleared successfully." in text
    # Built-in deletions are silent
    assert ".env" not in text


def test_purge_configured_files_and_directories(skeleton, components, output):
    _touch(skeleton, "lang/en/messages.php", "lang/fr/messages.php", "app/Models/User.php")
    config = SkeletonConfig.model_validate({
        "purge": {
            "files": ["routes/web.php", "missing.txt"],
            "directories": ["lang/*", "app", "not-there"],
        }
    })

    PurgeSkeleton(skeleton, config, components).handle()

    assert not (skeleton / "routes/web.php").exists()
    assert not (skeleton / "lang/en").exists()
    assert not (skeleton / "lang/fr").exists()
    assert (skeleton / "lang").is_dir()
    assert not (skeleton / "app").exists()

    text = output.getvalue()
    assert "File [routes/web.php] has been deleted" in text
    assert "File [missing.txt] doesn't exists" in text
    assert "Directory [lang/en] has been deleted" in text
    assert "Directory [not-there] doesn't exists" in text
    assert "DONE" in text
    assert "SKIPPED" in text


def test_purge_missing_directory(tmp_path):
    with pytest.raises(PurgeError):
        PurgeSkeleton(tmp_path / "nope").handle()


def test_purge_twice_is_harmless(skeleton):
    PurgeSkeleton(skeleton).handle()
    assert PurgeSkeleton(skeleton).handle() == 0


def test_expand_patterns(tmp_path):
    _touch(tmp_path, "logs/a.log", "logs/b.log", "logs/c.txt")

    paths = expand_patterns(tmp_path, ["logs/*.log", "plain.txt", "nothing/*"])

    assert paths == [tmp_path / "logs/a.log", tmp_path / "logs/b.log", tmp_path / "plain.txt"]


def test_delete_files_skips_directories_and_placeholders(tmp_path):
    _touch(tmp_path, "dir/file.txt", ".gitkeep", "a.txt")

    deleted = DeleteFiles(tmp_path).handle([tmp_path / "dir", tmp_path / ".gitkeep", tmp_path / "a.txt"])

    assert deleted == 1
    assert (tmp_path / "dir/file.txt").exists()
    assert (tmp_path / ".gitkeep").exists()


def test_delete_directories_removes_symlink_only(tmp_path):
    _touch(tmp_path, "real/file.txt")
    (tmp_path / "link").symlink_to(tmp_path / "real", target_is_directory=True)

    assert DeleteDirectories(tmp_path).handle([tmp_path / "link"]) == 1

    assert not (tmp_path / "link").exists()
    assert (tmp_path / "real/file.txt").exists()


def test_config_from_file(tmp_path):
    path = tmp_path / "testbench.yaml"
    path.write_text(
        "skeleton: ./workbench\n"
        "purge:\n"
        "  files: storage/logs/*.log\n"
        "  directories:\n"
        "    - lang/*\n",
        encoding="utf-8"
    )

    config = SkeletonConfig.from_file(path)

    assert config.get_purge_attributes().files == ["storage/logs/*.log"]
    assert config.get_purge_attributes().directories == ["lang/*"]
    assert config.skeleton_path(tmp_path) == (tmp_path / "workbench").resolve()


def test_config_defaults(tmp_path):
    config = SkeletonConfig.from_file(tmp_path / "testbench.yaml")

    assert config.purge.files == []
    assert config.purge.directories == []
    assert config.skeleton_path(tmp_path) is None

    empty = tmp_path / "empty.yaml"
    empty.write_text("purge:\n", encoding="utf-8")
    assert SkeletonConfig.from_file(empty).purge.files == []


@pytest.mark.parametrize("content", [
    "purge: [unclosed\n",
    "- just\n- a list\n",
    "purge:\n  files: 12\n",
])
def test_invalid_config(tmp_path, content):
    path = tmp_path / "testbench.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        SkeletonConfig.from_file(path)


def test_cli_purge(skeleton):
    (skeleton / "testbench.yaml").write_text("purge:\n  files: routes/web.php\n", encoding="utf-8")

    code = main(["purge-skeleton", "--path", str(skeleton), "--config", str(skeleton / "testbench.yaml")])

    assert code == 0
    assert not (skeleton / "routes/web.php").exists()
    assert not (skeleton / "testbench.yaml").exists()


def test_cli_purge_missing_directory(tmp_path):
    code = main(["purge-skeleton", "--path", str(tmp_path / "nope"), "--config", str(tmp_path / "none.yaml")])
    assert code == 1


def test_absolute_patterns_stay_in_the_skeleton(tmp_path):
    working_path = tmp_path / "skeleton"
    _touch(tmp_path, "outside.txt", "xdir/keep.txt")
    _touch(working_path, "outside.txt")
    config = SkeletonConfig.model_validate({
        "purge": {
            "files": [str(tmp_path / "outside.txt")],
            "directories": [str(tmp_path / "x*"), "../x*"],
        }
    })

    PurgeSkeleton(working_path, config).handle()

    assert (tmp_path / "outside.txt").exists()
    assert (tmp_path / "xdir/keep.txt").exists()


def test_parent_paths_are_ignored(tmp_path):
    working_path = tmp_path / "skeleton"
    working_path.mkdir()
    _touch(tmp_path, "notes.txt")

    assert expand_patterns(working_path, ["../notes.txt", "/"]) == []


def test_wildcards_skip_dotfiles(tmp_path):
    _touch(tmp_path, "storage/app/report.csv", "storage/app/.secret", "storage/.hidden/a.txt")

    assert expand_patterns(tmp_path, ["storage/app/*"]) == [tmp_path / "storage/app/report.csv"]
    assert expand_patterns(tmp_path, ["storage/*/a.txt"]) == []
    assert expand_patterns(tmp_path, ["storage/app/.*"]) == [tmp_path / "storage/app/.secret"]
