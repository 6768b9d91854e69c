from adolens_core.prompts import (
    FILE_DELIMITER,
    FileReviewInput,
    build_file_block,
    build_system_prompt,
    build_user_prompt,
    truncate,
)


def _file(path="src/a.ts", diff="@@ -1 +1 @@\n-a\n+b\n", full_text="b\n"):
    return FileReviewInput(path=path, language="ts", diff=diff, full_text=full_text)


class TestSystemPrompt:
    def test_declares_schema_and_severities(self):
        prompt = build_system_prompt()
        for word in ("BLOCKER", "MAJOR", "MINOR", "NIT", '"file"', '"severity"', '"message"'):
            assert word in prompt

    def test_lists_focus_areas(self):
        prompt = build_system_prompt()
        for area in ("Security", "Performance", "Code quality", "Best practices", "Potential bugs"):
            assert area in prompt

    def test_allows_empty_array(self):
        assert "[]" in build_system_prompt()


class TestFileBlock:
    def test_sections_in_order(self):
        block = build_file_block(_file())
        assert block.index("File: src/a.ts") < block.index("Language: ts")
        assert block.index("Language: ts") < block.index("Diff:")
        assert block.index("Diff:") < block.index("Full Content:")
        assert block.rstrip().endswith(FILE_DELIMITER)

    def test_long_sections_are_truncated(self):
        block = build_file_block(_file(diff="d" * 50, full_text="f" * 50), max_chars=10)
        assert "d" * 10 + "\n... [diff truncated]" in block
        assert "f" * 10 + "\n... [file truncated]" in block
        assert "d" * 11 not in block

    def test_no_limit(self):
        block = build_file_block(_file(full_text="f" * 50), max_chars=None)
        assert "f" * 50 in block
        assert "truncated" not in block


class TestUserPrompt:
    def test_contains_every_file_in_order(self):
        prompt = build_user_prompt([_file("src/b.ts"), _file("src/a.ts")])
        assert prompt.index("File: src/b.ts") < prompt.index("File: src/a.ts")
        assert prompt.count(f"{FILE_DELIMITER}\n") == 2

    def test_context_comes_first(self):
        prompt = build_user_prompt([_file()], pr_context="  Fixes login bug  ")
        assert prompt.startswith("PR Context:\nFixes login bug\n")
        assert prompt.index("PR Context:") < prompt.index("File: src/a.ts")

    def test_blank_context_omitted(self):
        assert "PR Context" not in build_user_prompt([_file()], pr_context="   ")
        assert "PR Context" not in build_user_prompt([_file()])

    def test_deterministic(self):
        files = [_file("a.py"), _file("b.py")]
        assert build_user_prompt(files, "ctx") == build_user_prompt(files, "ctx")


def test_truncate_keeps_short_text():
    assert truncate("short", 10, "diff") == "short"


def test_truncate_exact_length_is_kept():
    assert truncate("x" * 10, 10, "diff") == "x" * 10
