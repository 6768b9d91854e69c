import pytest

from adolens_core.utils.code import detect_language, is_code_file, is_excluded


@pytest.mark.parametrize(
    "filename",
    ["src/main.ts", "app/page.tsx", "lib/azdo.py", "README.md", "Dockerfile", "config.yaml"],
)
def test_code_files_return_true(filename):
    assert is_code_file(filename) is True


@pytest.mark.parametrize(
    "filename",
    ["logo.png", "photo.JPG", "font.woff2", "archive.zip", "yarn.lock", "doc.pdf", "bin/tool.exe"],
)
def test_non_code_files_return_false(filename):
    assert is_code_file(filename) is False


class TestDetectLanguage:
    def test_uses_extension(self):
        assert detect_language("/src/a.ts") == "ts"

    def test_uses_last_extension(self):
        assert detect_language("src/app.test.tsx") == "tsx"

    def test_defaults_to_text_without_extension(self):
        assert detect_language("/Makefile") == "text"

    def test_dotfile_is_text(self):
        assert detect_language(".gitignore") == "text"

    def test_dot_in_directory_name_is_ignored(self):
        assert detect_language("v1.2/LICENSE") == "text"


class TestIsExcluded:
    def test_full_path_glob(self):
        assert is_excluded("/src/generated/api.ts", ["src/generated/*.ts"])

    def test_basename_glob(self):
        assert is_excluded("/web/package-lock.json", ["package-lock.json"])

    def test_directory_prefix(self):
        assert is_excluded("/db/migrations/0001.sql", ["migrations/"])

    def test_no_match(self):
        assert not is_excluded("/src/a.ts", ["*.min.js", "migrations/"])

    def test_empty_patterns(self):
        assert not is_excluded("/src/a.ts", [])
