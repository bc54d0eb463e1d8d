import pytest

from spacecli.ignore import compile_ignore_lines

DEFAULT_LINES = [
    "# files never uploaded",
    ".git",
    ".env*",
    "venv",
    "virtualenv",
    "node_modules",
    "__pycache__",
    "",
]

FILES = {
    ".git": True,
    ".env": True,
    ".envrc": True,
    "venv": True,
    "virtualenv": True,
    "venv/main.py": True,
    "node_modules/index.js": True,
    "folder/.env": True,
    "main.py": False,
}


@pytest.mark.parametrize(("path", "ignored"), sorted(FILES.items()))
def test_ignore_patterns(path, ignored):
    matcher = compile_ignore_lines(DEFAULT_LINES)
    assert matcher.matches(path) is ignored


def test_add_new_pattern():
    matcher = compile_ignore_lines(DEFAULT_LINES + ["main.py"])
    assert matcher.matches("main.py") is True


def test_override_existing_pattern():
    matcher = compile_ignore_lines(DEFAULT_LINES + ["!.env"])
    assert matcher.matches(".env") is False


def test_negation_before_match_has_no_effect():
    matcher = compile_ignore_lines(["!.env", ".env"])
    assert matcher.matches(".env") is True


def test_comments_and_blank_lines_are_skipped():
    matcher = compile_ignore_lines(["# .env", "", "   "])
    assert len(matcher) == 0
    assert matcher.matches(".env") is False


def test_rooted_pattern_only_matches_at_root():
    matcher = compile_ignore_lines(["/build"])
    assert matcher.matches("build/out.js") is True
    assert matcher.matches("src/build") is False


def test_folder_glob_is_rooted():
    matcher = compile_ignore_lines(["docs/*.md"])
    assert matcher.matches("docs/readme.md") is True
    assert matcher.matches("other/docs/readme.md") is False


def test_double_star_prefix_matches_any_depth():
    matcher = compile_ignore_lines(["**/logs"])
    assert matcher.matches("logs") is True
    assert matcher.matches("a/b/logs/today.txt") is True
    assert matcher.matches("catalogs") is False


def test_question_mark_is_literal():
    matcher = compile_ignore_lines(["file?.txt"])
    assert matcher.matches("file?.txt") is True
    assert matcher.matches("file1.txt") is False