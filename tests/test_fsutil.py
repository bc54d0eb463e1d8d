import io
import os
import zipfile

from spacecli.fsutil import check_if_any_file_exists, file_exists, is_empty, unzip_templates


def test_file_exists(tmp_path):
    (tmp_path / "a.txt").write_text("x")
    (tmp_path / "sub").mkdir()
    assert file_exists(str(tmp_path), "a.txt") is True
    assert file_exists(str(tmp_path), "sub") is False
    assert file_exists(str(tmp_path), "missing") is False


def test_is_empty(tmp_path):
    assert is_empty(str(tmp_path / "nope")) is True
    assert is_empty(str(tmp_path)) is True
    (tmp_path / ".space").mkdir()
    assert is_empty(str(tmp_path)) is True
    (tmp_path / "main.py").write_text("")
    assert is_empty(str(tmp_path)) is False


def test_check_if_any_file_exists(tmp_path):
    (tmp_path / "main.py").write_text("")
    assert check_if_any_file_exists(str(tmp_path), "requirements.txt", "main.py") is True
    assert check_if_any_file_exists(str(tmp_path), "requirements.txt", "Pipfile") is False
    assert check_if_any_file_exists(str(tmp_path)) is False


def test_unzip_templates_extracts_only_root(tmp_path):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("templates/python/", "")
        archive.writestr("templates/python/main.py", "print('hi')")
        archive.writestr("templates/python/pkg/util.py", "x = 1")
        archive.writestr("templates/node/index.js", "ignored")
    dest = str(tmp_path / "out")

    unzip_templates(buffer.getvalue(), dest, "templates/python")

    assert file_exists(dest, "main.py") is True
    assert file_exists(os.path.join(dest, "pkg"), "util.py") is True
    assert file_exists(dest, "index.js") is False
    assert is_empty(str(tmp_path / "templates")) is True
    assert (tmp_path / "out" / "main.py").read_text() == "print('hi')"
    assert (tmp_path / "out" / "pkg" / "util.py").read_text() == "x = 1"